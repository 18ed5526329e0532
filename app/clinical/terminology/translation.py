"""Single-code translation between NAMASTE and ICD-11.

Forward lookups project the mapped code of the best record for a traditional
code; reverse lookups return the best record for a TM2 or biomedicine code.
"Best" means highest confidence, earliest in store order on ties.  A miss is
``None``, never an error.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from app.clinical.terminology.records import (
    BIOMEDICINE_CODE,
    TARGET_CODE,
    TRADITIONAL_CODE,
    TerminologyRecord,
)
from app.clinical.terminology.store import TerminologyStore

logger = logging.getLogger(__name__)


def _best(records: Sequence[TerminologyRecord]) -> Optional[TerminologyRecord]:
    best: Optional[TerminologyRecord] = None
    for record in records:
        if best is None:
            best = record
            continue
        score = record.confidence_score if record.confidence_score is not None else -1.0
        best_score = best.confidence_score if best.confidence_score is not None else -1.0
        if score > best_score:
            best = record
    return best


class TranslationGateway:
    def __init__(self, store: TerminologyStore) -> None:
        self._store = store

    def _lookup(self, value: Optional[str], field: str) -> Optional[TerminologyRecord]:
        code = (value or "").strip()
        if not code:
            return None
        return _best(self._store.find_exact(code, fields=(field,)))

    def to_target_code(self, traditional_code: Optional[str]) -> Optional[str]:
        logger.info("Translating NAMASTE code %s to ICD-11 TM2", traditional_code)
        record = self._lookup(traditional_code, TRADITIONAL_CODE)
        return record.target_code if record is not None else None

    def to_traditional(self, target_code: Optional[str]) -> Optional[TerminologyRecord]:
        logger.info("Finding NAMASTE code for ICD-11 TM2: %s", target_code)
        return self._lookup(target_code, TARGET_CODE)

    def to_biomedicine_code(self, traditional_code: Optional[str]) -> Optional[str]:
        logger.info("Translating NAMASTE code %s to ICD-11 Biomedicine", traditional_code)
        record = self._lookup(traditional_code, TRADITIONAL_CODE)
        return record.biomedicine_code if record is not None else None

    def from_biomedicine_code(self, biomedicine_code: Optional[str]) -> Optional[TerminologyRecord]:
        logger.info("Finding NAMASTE code for ICD-11 Biomedicine: %s", biomedicine_code)
        return self._lookup(biomedicine_code, BIOMEDICINE_CODE)
