"""In-process terminology store.

Used where no database is available (tests, fixtures, offline tooling).  It
has no compound query support, so AND-of-ORs symptom queries are emulated by
intersecting per-term candidate id sets and replaying the survivors in
insertion order.
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from app.clinical.terminology.records import QUERY_FIELDS, TerminologyRecord


def _check_fields(fields: Sequence[str]) -> None:
    unknown = [name for name in fields if name not in QUERY_FIELDS]
    if unknown:
        raise ValueError(f"unknown terminology field: {unknown[0]}")


class InMemoryTerminologyStore:
    def __init__(self, records: Iterable[TerminologyRecord] = ()) -> None:
        self._records: list[TerminologyRecord] = list(records)
        ids = [r.id for r in self._records]
        if len(ids) != len(set(ids)):
            raise ValueError("record ids must be unique")

    def __len__(self) -> int:
        return len(self._records)

    def find_exact(self, value: str, *, fields: Sequence[str]) -> list[TerminologyRecord]:
        if not value:
            return []
        _check_fields(fields)
        return [r for r in self._records if any(r.field_value(name) == value for name in fields)]

    def find_top_by_traditional_code(self, value: str) -> Optional[TerminologyRecord]:
        if not value:
            return None

        best: Optional[TerminologyRecord] = None
        for record in self._records:
            if record.traditional_code != value:
                continue
            if best is None:
                best = record
            elif record.confidence_score is not None and (
                best.confidence_score is None or record.confidence_score > best.confidence_score
            ):
                best = record
        return best

    def find_all_matching_all_terms(
        self,
        terms: Sequence[str],
        fields: Sequence[str],
    ) -> list[TerminologyRecord]:
        terms = [t for t in terms if t]
        if not terms or not fields:
            return []
        _check_fields(fields)

        surviving: Optional[set] = None
        for term in terms:
            ids = self._ids_matching(term.lower(), fields)
            surviving = ids if surviving is None else surviving & ids
            if not surviving:
                return []
        return [r for r in self._records if r.id in surviving]

    def _ids_matching(self, needle: str, fields: Sequence[str]) -> set:
        matched = set()
        for record in self._records:
            for name in fields:
                value = record.field_value(name)
                if value and needle in value.lower():
                    matched.add(record.id)
                    break
        return matched
