"""Exact code resolution with per-category selection.

A lookup by traditional code in ``ANY`` mode first finds the best record for
that code (the *anchor*) and pivots to its target code, so the result fans out
to every sibling traditional mapping of the same disease.  Results keep one
record per category; the anchor always owns its own category slot.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from app.clinical.terminology.records import TARGET_CODE, TRADITIONAL_CODE, TerminologyRecord
from app.clinical.terminology.store import TerminologyStore
from app.core.search_config import SearchTuning, search_tuning

logger = logging.getLogger(__name__)


class ResolveMode(str, Enum):
    ANY = "any"
    TARGET_ONLY = "target"
    TRADITIONAL_ONLY = "traditional"


_MODE_FIELDS: dict[ResolveMode, tuple[str, ...]] = {
    ResolveMode.ANY: (TARGET_CODE, TRADITIONAL_CODE),
    ResolveMode.TARGET_ONLY: (TARGET_CODE,),
    ResolveMode.TRADITIONAL_ONLY: (TRADITIONAL_CODE,),
}


class CodeResolver:
    def __init__(self, store: TerminologyStore, *, tuning: SearchTuning = search_tuning) -> None:
        self._store = store
        self._tuning = tuning

    def resolve(self, query: Optional[str], mode: ResolveMode = ResolveMode.ANY) -> list[TerminologyRecord]:
        key = (query or "").strip()
        if not key:
            return []

        anchor: Optional[TerminologyRecord] = None
        if mode is ResolveMode.ANY:
            anchor = self._store.find_top_by_traditional_code(key)
            if anchor is not None and anchor.target_code and anchor.target_code.strip():
                key = anchor.target_code.strip()
                logger.debug(
                    "code_resolver.anchor query=%r anchor_id=%s pivot_key=%r",
                    query,
                    anchor.id,
                    key,
                )

        rows = self._store.find_exact(key, fields=_MODE_FIELDS[mode])
        threshold = self._tuning.confidence_threshold
        qualified = [r for r in rows if r.passes_confidence(threshold)]

        selected = self._select_per_category(qualified, anchor=anchor, threshold=threshold)
        if mode is not ResolveMode.ANY:
            selected = selected[: self._tuning.single_mode_limit]

        logger.debug(
            "code_resolver.resolve query=%r mode=%s key=%r rows=%s qualified=%s returned=%s",
            query,
            mode.value,
            key,
            len(rows),
            len(qualified),
            len(selected),
        )
        return selected

    @staticmethod
    def _select_per_category(
        records: list[TerminologyRecord],
        *,
        anchor: Optional[TerminologyRecord],
        threshold: float,
    ) -> list[TerminologyRecord]:
        # dict keeps first-seen category order; replacing a value keeps its slot.
        by_category: dict[Optional[str], TerminologyRecord] = {}
        anchor_category = anchor.category if anchor is not None else None
        anchor_qualifies = anchor is not None and anchor.passes_confidence(threshold)

        for record in records:
            category = record.category
            if anchor_qualifies and category == anchor_category:
                by_category[category] = anchor
                continue

            existing = by_category.get(category)
            if existing is None or (record.confidence_score or 0.0) > (existing.confidence_score or 0.0):
                by_category[category] = record

        if anchor_qualifies and anchor_category not in by_category:
            # Anchor target carried stray whitespace, so the pivoted query missed it.
            return [anchor, *by_category.values()]
        return list(by_category.values())
