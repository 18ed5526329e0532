"""Symptom search engine: disease grouping over NAMASTE mappings.

Pipeline:

1. **Normalize** the symptom terms (trim, drop terms shorter than the minimum).
2. **Retrieve** records matching *every* term in at least one text field
   (traditional description, TM2 definition, TM2 title, traditional title).
3. **Filter** by mapping confidence.
4. **Group** candidates by target code; each group is assembled through
   :class:`CodeResolver` exactly as a direct code lookup would.
5. **Return** ordered ``DiseaseGroup`` objects, or raise
   :class:`TooManyResultsError` when the query is too broad.

The engine is synchronous and holds no state between calls.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from itertools import islice
from typing import Callable, Iterator, List, Optional, Sequence

from app.clinical.terminology.code_resolver import CodeResolver, ResolveMode
from app.clinical.terminology.errors import SearchCancelledError, TooManyResultsError
from app.clinical.terminology.records import SYMPTOM_FIELDS, DiseaseGroup, TerminologyRecord
from app.clinical.terminology.store import TerminologyStore
from app.clinical.terminology.text_matcher import TextMatcher
from app.core.search_config import (
    SearchFeatureFlags,
    SearchTuning,
    search_feature_flags,
    search_tuning,
)

logger = logging.getLogger(__name__)

CancelCheck = Callable[[], bool]


# ---------------------------------------------------------------------------
# Structured search event (for logging without perf impact)
# ---------------------------------------------------------------------------

@dataclass
class SearchEvent:
    """Lightweight event emitted after every symptom search."""

    terms: list[str]
    candidate_count: int
    qualified_count: int
    group_count: int
    duration_ms: float
    outcome: str = "ok"
    top_code: Optional[str] = None


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

class SymptomSearchEngine:
    """Groups symptom matches into per-target-code disease clusters."""

    def __init__(
        self,
        store: TerminologyStore,
        *,
        resolver: Optional[CodeResolver] = None,
        matcher: Optional[TextMatcher] = None,
        flags: SearchFeatureFlags = search_feature_flags,
        tuning: SearchTuning = search_tuning,
    ) -> None:
        self._store = store
        self._tuning = tuning
        self._flags = flags
        self._resolver = resolver or CodeResolver(store, tuning=tuning)
        self._matcher = matcher or TextMatcher()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def search_grouped(
        self,
        terms: Sequence[Optional[str]],
        *,
        is_cancelled: Optional[CancelCheck] = None,
    ) -> List[DiseaseGroup]:
        """Execute the full symptom pipeline and return disease groups."""
        t0 = time.perf_counter()
        normalized = self.normalize_terms(terms)
        if not normalized:
            logger.info("symptom_search.search_grouped no usable terms raw_terms=%r", list(terms or ()))
            return []

        candidates = self._store.find_all_matching_all_terms(normalized, SYMPTOM_FIELDS)
        threshold = self._tuning.confidence_threshold
        qualified = [r for r in candidates if r.passes_confidence(threshold)]
        if self._flags.debug_search:
            logger.info(
                "symptom_search.debug terms=%s candidates=%s qualified=%s",
                normalized,
                [(r.traditional_code, r.target_code, r.confidence_score) for r in candidates],
                [r.traditional_code for r in qualified],
            )

        limit = self._tuning.max_disease_groups
        pending = self._iter_groups(normalized, qualified, is_cancelled=is_cancelled)
        groups = list(islice(pending, limit))

        # Only a group that actually resolves counts towards the cap.
        overflow = sum(1 for _ in pending)
        if overflow:
            would_be = len(groups) + overflow
            self._emit_search_event(
                SearchEvent(
                    terms=normalized,
                    candidate_count=len(candidates),
                    qualified_count=len(qualified),
                    group_count=would_be,
                    duration_ms=round((time.perf_counter() - t0) * 1000, 2),
                    outcome="too_many_results",
                )
            )
            raise TooManyResultsError(count=would_be, limit=limit)

        self._emit_search_event(
            SearchEvent(
                terms=normalized,
                candidate_count=len(candidates),
                qualified_count=len(qualified),
                group_count=len(groups),
                duration_ms=round((time.perf_counter() - t0) * 1000, 2),
                top_code=groups[0].target_code if groups else None,
            )
        )
        return groups

    def search_flat(
        self,
        terms: Sequence[Optional[str]],
        *,
        is_cancelled: Optional[CancelCheck] = None,
    ) -> List[TerminologyRecord]:
        """Same search as :meth:`search_grouped`, mappings concatenated in group order."""
        groups = self.search_grouped(terms, is_cancelled=is_cancelled)
        return [record for group in groups for record in group.mappings]

    def normalize_terms(self, terms: Sequence[Optional[str]]) -> list[str]:
        min_len = self._tuning.min_term_length
        cleaned: list[str] = []
        for term in terms or ():
            value = (term or "").strip()
            if len(value) >= min_len:
                cleaned.append(value)
        return cleaned

    # ------------------------------------------------------------------
    # Pipeline stages
    # ------------------------------------------------------------------

    def _iter_groups(
        self,
        terms: list[str],
        candidates: list[TerminologyRecord],
        *,
        is_cancelled: Optional[CancelCheck],
    ) -> Iterator[DiseaseGroup]:
        processed: set[str] = set()
        emitted = 0

        for record in candidates:
            target_code = record.target_code
            if not target_code or target_code in processed:
                continue
            if is_cancelled is not None and is_cancelled():
                logger.warning(
                    "symptom_search.cancelled terms=%r groups_built=%s",
                    terms,
                    emitted,
                )
                raise SearchCancelledError(f"symptom search cancelled after {emitted} groups")
            processed.add(target_code)

            mappings = self._resolver.resolve(record.traditional_code, ResolveMode.ANY)
            if not mappings:
                continue

            emitted += 1
            yield DiseaseGroup(
                target_code=target_code,
                target_title=record.target_title,
                target_definition=record.target_definition,
                similarity_score=record.confidence_score,
                mappings=mappings,
                match_score=round(self._matcher.average_score(terms, record), 4),
            )

    # ------------------------------------------------------------------
    # Structured logging
    # ------------------------------------------------------------------

    def _emit_search_event(self, event: SearchEvent) -> None:
        """Emit a structured log line.  Non-blocking, never raises."""
        if not self._flags.enable_search_logging:
            return

        try:
            logger.info(
                "search_event terms=%r candidates=%d qualified=%d groups=%d duration_ms=%.2f "
                "outcome=%s top_code=%s",
                event.terms,
                event.candidate_count,
                event.qualified_count,
                event.group_count,
                event.duration_ms,
                event.outcome,
                event.top_code or "-",
            )
        except Exception:  # pragma: no cover
            pass
