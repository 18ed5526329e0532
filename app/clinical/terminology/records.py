"""Plain result structures shared by the terminology engine.

``TerminologyRecord`` is the single canonical shape for a NAMASTE mapping row;
store adapters translate whatever their backing schema looks like into it.
``DiseaseGroup`` is produced by symptom search and never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

# Field names accepted by store queries.
TRADITIONAL_CODE = "traditional_code"
TRADITIONAL_TITLE = "traditional_title"
TRADITIONAL_DESCRIPTION = "traditional_description"
TARGET_CODE = "target_code"
TARGET_TITLE = "target_title"
TARGET_DEFINITION = "target_definition"
BIOMEDICINE_CODE = "biomedicine_code"
BIOMEDICINE_TITLE = "biomedicine_title"
CATEGORY = "category"

QUERY_FIELDS: frozenset[str] = frozenset(
    {
        CATEGORY,
        TRADITIONAL_CODE,
        TRADITIONAL_TITLE,
        TRADITIONAL_DESCRIPTION,
        TARGET_CODE,
        TARGET_TITLE,
        TARGET_DEFINITION,
        BIOMEDICINE_CODE,
        BIOMEDICINE_TITLE,
    }
)

# Free-text fields a symptom must hit (any one of them) for a record to match.
SYMPTOM_FIELDS: tuple[str, ...] = (
    TRADITIONAL_DESCRIPTION,
    TARGET_DEFINITION,
    TARGET_TITLE,
    TRADITIONAL_TITLE,
)


class ConfidenceLevel(str, Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


def confidence_level(score: Optional[float]) -> Optional[ConfidenceLevel]:
    """Bucket a confidence score: >0.8 HIGH, 0.6-0.8 MEDIUM, <0.6 LOW."""
    if score is None:
        return None
    if score > 0.8:
        return ConfidenceLevel.HIGH
    if score >= 0.6:
        return ConfidenceLevel.MEDIUM
    return ConfidenceLevel.LOW


@dataclass(frozen=True)
class TerminologyRecord:
    id: Any
    category: Optional[str] = None
    traditional_code: Optional[str] = None
    traditional_title: Optional[str] = None
    traditional_description: Optional[str] = None
    target_code: Optional[str] = None
    target_title: Optional[str] = None
    target_definition: Optional[str] = None
    target_link: Optional[str] = None
    confidence_score: Optional[float] = None
    biomedicine_code: Optional[str] = None
    biomedicine_title: Optional[str] = None
    mapping_type: Optional[str] = None

    @property
    def confidence_level(self) -> Optional[ConfidenceLevel]:
        return confidence_level(self.confidence_score)

    def passes_confidence(self, threshold: float) -> bool:
        return self.confidence_score is not None and self.confidence_score > threshold

    def field_value(self, name: str) -> Optional[str]:
        return getattr(self, name, None)


@dataclass
class DiseaseGroup:
    """Traditional-medicine records across categories sharing one target code."""

    target_code: str
    target_title: Optional[str]
    target_definition: Optional[str]
    similarity_score: Optional[float]
    mappings: list[TerminologyRecord] = field(default_factory=list)
    match_score: float = 0.0

    @property
    def categories(self) -> list[str]:
        return [m.category for m in self.mappings if m.category]
