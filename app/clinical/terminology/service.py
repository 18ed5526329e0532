"""NAMASTE catalogue service.

Auto-complete, free-text search, category listings and coverage statistics
over the terminology store.  Code resolution, symptom grouping and
translation live in their own modules; this service covers the browsing
side used by EMR pick lists and dashboards.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from app.clinical.terminology.records import TerminologyRecord
from app.clinical.terminology.text_matcher import TextMatcher
from app.core.search_config import SearchTuning, search_tuning
from app.repositories.terminology_repository import SqlTerminologyStore

logger = logging.getLogger(__name__)


@dataclass
class TerminologyStats:
    total_codes: int
    dual_coded_records: int
    unmapped_records: int
    by_category: Dict[str, int] = field(default_factory=dict)


class TerminologyService:
    def __init__(
        self,
        store: SqlTerminologyStore,
        *,
        matcher: Optional[TextMatcher] = None,
        tuning: SearchTuning = search_tuning,
    ) -> None:
        self.store = store
        self.matcher = matcher or TextMatcher()
        self.tuning = tuning

    def _clamp_limit(self, limit: Optional[int]) -> int:
        requested = limit or self.tuning.autocomplete_default_limit
        return max(1, min(requested, self.tuning.autocomplete_max_limit))

    def search_autocomplete(self, term: Optional[str], limit: Optional[int] = None) -> List[TerminologyRecord]:
        """Titles containing ``term``; terms shorter than the minimum return nothing."""
        logger.info("Auto-complete search for term: %s", term)
        query = (term or "").strip()
        if len(query) < self.tuning.min_term_length:
            return []
        return self.store.find_by_title_containing(query, limit=self._clamp_limit(limit))

    def get_by_title(self, title: Optional[str]) -> Optional[TerminologyRecord]:
        logger.info("Fetching details for NAMASTE name: %s", title)
        value = (title or "").strip()
        return self.store.find_by_title(value) if value else None

    def comprehensive_search(self, term: Optional[str]) -> List[TerminologyRecord]:
        """Search title, description and code; best text matches first."""
        logger.info("Comprehensive search for term: %s", term)
        query = (term or "").strip()
        if len(query) < self.tuning.min_term_length:
            return []

        records = self.store.find_by_any_text(query)
        scored = [(self.matcher.best_field_score(query, r), idx, r) for idx, r in enumerate(records)]
        scored.sort(key=lambda item: (-item[0], item[1]))
        return [r for _, _, r in scored]

    def get_all_active(self) -> List[TerminologyRecord]:
        logger.info("Fetching all active NAMASTE codes")
        return self.store.find_all_active()

    def get_recent(self, limit: Optional[int] = None) -> List[TerminologyRecord]:
        """First ``limit`` active codes by title; rows carry no update timestamps."""
        size = self._clamp_limit(limit)
        logger.info("Fetching %s recent NAMASTE codes", size)
        return self.store.find_all_active(limit=size)

    def get_by_category(self, category: Optional[str]) -> List[TerminologyRecord]:
        logger.info("Fetching codes for category: %s", category)
        value = (category or "").strip()
        return self.store.find_by_category(value) if value else []

    def get_dual_coded(self) -> List[TerminologyRecord]:
        logger.info("Fetching records with dual coding")
        return self.store.find_dual_coded()

    def get_stats(self) -> TerminologyStats:
        logger.info("Generating terminology statistics")
        return TerminologyStats(
            total_codes=self.store.count_active(),
            dual_coded_records=self.store.count_dual_coded(),
            unmapped_records=self.store.count_unmapped(),
            by_category={c.category: c.count for c in self.store.count_by_category()},
        )
