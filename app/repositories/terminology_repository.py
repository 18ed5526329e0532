"""SQLAlchemy-backed terminology store.

Reads ``namaste_codes`` and converts rows into :class:`TerminologyRecord`.
Older dataset variants that only carry a HIGH/MEDIUM/LOW label get a numeric
confidence here, so the engine only ever sees the canonical shape.

Every statement goes through :meth:`SqlTerminologyStore._execute`, which maps
``SQLAlchemyError`` to :class:`StoreError` (``StoreTimeoutError`` when the
server cancelled the statement).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from sqlalchemy import and_, case, func, or_, select
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.clinical.terminology.errors import StoreError, StoreTimeoutError
from app.clinical.terminology.records import TerminologyRecord
from app.models.namaste_code import NamasteCode

logger = logging.getLogger(__name__)

_LIKE_ESCAPE = "\\"

_LEGACY_CONFIDENCE: dict[str, float] = {
    "high": 0.9,
    "medium": 0.7,
    "low": 0.4,
}

_COLUMNS = {
    "category": NamasteCode.category,
    "traditional_code": NamasteCode.traditional_code,
    "traditional_title": NamasteCode.traditional_title,
    "traditional_description": NamasteCode.traditional_description,
    "target_code": NamasteCode.target_code,
    "target_title": NamasteCode.target_title,
    "target_definition": NamasteCode.target_definition,
    "biomedicine_code": NamasteCode.biomedicine_code,
    "biomedicine_title": NamasteCode.biomedicine_title,
}


@dataclass
class CategoryCount:
    category: str
    count: int


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so user text matches literally."""
    return (
        value.replace(_LIKE_ESCAPE, _LIKE_ESCAPE * 2)
        .replace("%", _LIKE_ESCAPE + "%")
        .replace("_", _LIKE_ESCAPE + "_")
    )


def _column(name: str):
    try:
        return _COLUMNS[name]
    except KeyError:
        raise ValueError(f"unknown terminology field: {name}") from None


def _contains(column, term: str):
    return func.coalesce(column, "").ilike(f"%{escape_like(term)}%", escape=_LIKE_ESCAPE)


def _effective_confidence():
    label = func.lower(func.trim(func.coalesce(NamasteCode.mapping_confidence, "")))
    return func.coalesce(
        NamasteCode.confidence_score,
        case(*[(label == key, value) for key, value in _LEGACY_CONFIDENCE.items()], else_=None),
    )


def _legacy_confidence(label: Optional[str]) -> Optional[float]:
    if not label:
        return None
    return _LEGACY_CONFIDENCE.get(label.strip().lower())


def to_record(row: NamasteCode) -> TerminologyRecord:
    confidence = row.confidence_score
    if confidence is None:
        confidence = _legacy_confidence(row.mapping_confidence)

    return TerminologyRecord(
        id=row.id,
        category=(row.category or "").strip().lower() or None,
        traditional_code=row.traditional_code,
        traditional_title=row.traditional_title,
        traditional_description=row.traditional_description,
        target_code=row.target_code,
        target_title=row.target_title,
        target_definition=row.target_definition,
        target_link=row.target_link,
        confidence_score=float(confidence) if confidence is not None else None,
        biomedicine_code=row.biomedicine_code,
        biomedicine_title=row.biomedicine_title,
        mapping_type=row.mapping_type,
    )


class SqlTerminologyStore:
    def __init__(self, db: Session) -> None:
        self.db = db

    def _execute(self, stmt) -> Any:
        try:
            return self.db.execute(stmt)
        except OperationalError as exc:
            self.db.rollback()
            if "statement timeout" in str(exc.orig).lower() or "canceling statement" in str(exc.orig).lower():
                logger.warning("terminology_store statement timed out")
                raise StoreTimeoutError("terminology store query timed out") from exc
            raise StoreError("terminology store unavailable") from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StoreError("terminology store query failed") from exc

    def _records(self, stmt) -> list[TerminologyRecord]:
        return [to_record(row) for row in self._execute(stmt).scalars().all()]

    @staticmethod
    def _active():
        return select(NamasteCode).where(NamasteCode.is_active.is_(True))

    # ------------------------------------------------------------------
    # Engine query interface
    # ------------------------------------------------------------------

    def find_exact(self, value: str, *, fields: Sequence[str]) -> list[TerminologyRecord]:
        if not value or not fields:
            return []

        stmt = (
            self._active()
            .where(or_(*[_column(name) == value for name in fields]))
            .order_by(NamasteCode.id.asc())
        )
        return self._records(stmt)

    def find_top_by_traditional_code(self, value: str) -> Optional[TerminologyRecord]:
        if not value:
            return None

        confidence = _effective_confidence()
        missing_last = case((confidence.is_(None), 1), else_=0)
        stmt = (
            self._active()
            .where(NamasteCode.traditional_code == value)
            .order_by(missing_last.asc(), confidence.desc(), NamasteCode.id.asc())
            .limit(1)
        )
        records = self._records(stmt)
        return records[0] if records else None

    def find_all_matching_all_terms(
        self,
        terms: Sequence[str],
        fields: Sequence[str],
    ) -> list[TerminologyRecord]:
        terms = [t for t in terms if t]
        if not terms or not fields:
            return []

        columns = [_column(name) for name in fields]
        predicate = and_(*[or_(*[_contains(col, term) for col in columns]) for term in terms])
        stmt = self._active().where(predicate).order_by(NamasteCode.id.asc())
        return self._records(stmt)

    # ------------------------------------------------------------------
    # Catalogue queries
    # ------------------------------------------------------------------

    def find_by_title_containing(self, query: str, *, limit: int) -> list[TerminologyRecord]:
        if not query:
            return []

        stmt = (
            self._active()
            .where(_contains(NamasteCode.traditional_title, query))
            .order_by(NamasteCode.id.asc())
            .limit(limit)
        )
        return self._records(stmt)

    def find_by_title(self, title: str) -> Optional[TerminologyRecord]:
        if not title:
            return None

        stmt = (
            self._active()
            .where(NamasteCode.traditional_title == title)
            .order_by(NamasteCode.id.asc())
            .limit(1)
        )
        records = self._records(stmt)
        return records[0] if records else None

    def find_by_any_text(self, query: str) -> list[TerminologyRecord]:
        if not query:
            return []

        stmt = (
            self._active()
            .where(
                or_(
                    _contains(NamasteCode.traditional_title, query),
                    _contains(NamasteCode.traditional_description, query),
                    _contains(NamasteCode.traditional_code, query),
                )
            )
            .order_by(NamasteCode.id.asc())
        )
        return self._records(stmt)

    def find_all_active(self, *, limit: Optional[int] = None) -> list[TerminologyRecord]:
        missing_last = case((NamasteCode.traditional_title.is_(None), 1), else_=0)
        stmt = self._active().order_by(
            missing_last.asc(),
            NamasteCode.traditional_title.asc(),
            NamasteCode.id.asc(),
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        return self._records(stmt)

    def find_by_category(self, category: str) -> list[TerminologyRecord]:
        stmt = (
            self._active()
            .where(func.lower(func.coalesce(NamasteCode.category, "")) == category.strip().lower())
            .order_by(NamasteCode.id.asc())
        )
        return self._records(stmt)

    def find_dual_coded(self) -> list[TerminologyRecord]:
        stmt = (
            self._active()
            .where(NamasteCode.target_code.is_not(None), NamasteCode.biomedicine_code.is_not(None))
            .order_by(NamasteCode.id.asc())
        )
        return self._records(stmt)

    def count_active(self) -> int:
        stmt = select(func.count()).select_from(NamasteCode).where(NamasteCode.is_active.is_(True))
        return int(self._execute(stmt).scalar_one() or 0)

    def count_by_category(self) -> list[CategoryCount]:
        category = func.lower(func.coalesce(NamasteCode.category, ""))
        stmt = (
            select(category.label("category"), func.count().label("count"))
            .where(NamasteCode.is_active.is_(True))
            .group_by(category)
            .order_by(category.asc())
        )
        rows = self._execute(stmt).all()
        return [CategoryCount(category=r.category, count=int(r.count)) for r in rows if r.category]

    def count_dual_coded(self) -> int:
        stmt = (
            select(func.count())
            .select_from(NamasteCode)
            .where(
                NamasteCode.is_active.is_(True),
                NamasteCode.target_code.is_not(None),
                NamasteCode.biomedicine_code.is_not(None),
            )
        )
        return int(self._execute(stmt).scalar_one() or 0)

    def count_unmapped(self) -> int:
        stmt = (
            select(func.count())
            .select_from(NamasteCode)
            .where(
                NamasteCode.is_active.is_(True),
                or_(NamasteCode.target_code.is_(None), NamasteCode.biomedicine_code.is_(None)),
            )
        )
        return int(self._execute(stmt).scalar_one() or 0)
