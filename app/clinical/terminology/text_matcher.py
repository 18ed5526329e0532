from __future__ import annotations

from typing import Optional, Sequence

from app.clinical.terminology.records import (
    BIOMEDICINE_TITLE,
    TARGET_DEFINITION,
    TARGET_TITLE,
    TRADITIONAL_DESCRIPTION,
    TRADITIONAL_TITLE,
    TerminologyRecord,
)
from app.core.search_config import MatchWeights, match_weights

DESCRIPTION_FIELDS: tuple[str, ...] = (TRADITIONAL_DESCRIPTION, TARGET_DEFINITION)
TITLE_FIELDS: tuple[str, ...] = (TRADITIONAL_TITLE, TARGET_TITLE, BIOMEDICINE_TITLE)


class TextMatcher:
    """Deterministic term-vs-text similarity used to rank terminology records."""

    def __init__(self, weights: MatchWeights = match_weights) -> None:
        self._weights = weights

    def score(self, term: Optional[str], text: Optional[str]) -> float:
        if not term or not text:
            return 0.0

        term_l = term.lower()
        text_l = text.lower()
        if term_l in text_l:
            return 1.0

        term_tokens = term_l.split()
        text_tokens = text_l.split()
        if not term_tokens:
            return 0.0

        matched = 0
        for token in term_tokens:
            if len(token) <= self._weights.min_token_length:
                continue
            if any(token in candidate or candidate in token for candidate in text_tokens):
                matched += 1

        similarity = matched / len(term_tokens)
        # Callers may pass text that was only partially lower-cased.
        if term in text:
            similarity += self._weights.substring_bonus
        return min(similarity, 1.0)

    def best_field_score(self, term: Optional[str], record: TerminologyRecord) -> float:
        best = 0.0
        for name in DESCRIPTION_FIELDS:
            best = max(best, self.score(term, record.field_value(name)))
        for name in TITLE_FIELDS:
            best = max(best, self.score(term, record.field_value(name)) * self._weights.title_weight)
        return best

    def average_score(self, terms: Sequence[str], record: TerminologyRecord) -> float:
        """Mean best-field score of ``record`` over all ``terms``."""
        if not terms:
            return 0.0
        return sum(self.best_field_score(t, record) for t in terms) / len(terms)
