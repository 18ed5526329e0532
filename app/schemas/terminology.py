from __future__ import annotations

from typing import Dict, Optional

from pydantic import BaseModel, Field

from app.clinical.terminology.records import DiseaseGroup, TerminologyRecord


class TerminologyRecordResponse(BaseModel):
    id: str
    category: Optional[str] = None
    traditional_code: Optional[str] = None
    traditional_title: Optional[str] = None
    traditional_description: Optional[str] = None
    target_code: Optional[str] = None
    target_title: Optional[str] = None
    target_definition: Optional[str] = None
    target_link: Optional[str] = None
    biomedicine_code: Optional[str] = None
    biomedicine_title: Optional[str] = None
    mapping_type: Optional[str] = None
    confidence_score: Optional[float] = None
    confidence_level: Optional[str] = None

    @classmethod
    def from_record(cls, record: TerminologyRecord) -> "TerminologyRecordResponse":
        level = record.confidence_level
        return cls(
            id=str(record.id),
            category=record.category,
            traditional_code=record.traditional_code,
            traditional_title=record.traditional_title,
            traditional_description=record.traditional_description,
            target_code=record.target_code,
            target_title=record.target_title,
            target_definition=record.target_definition,
            target_link=record.target_link,
            biomedicine_code=record.biomedicine_code,
            biomedicine_title=record.biomedicine_title,
            mapping_type=record.mapping_type,
            confidence_score=record.confidence_score,
            confidence_level=level.value if level is not None else None,
        )


class DiseaseGroupResponse(BaseModel):
    target_code: str
    target_title: Optional[str] = None
    target_definition: Optional[str] = None
    similarity_score: Optional[float] = None
    match_score: float = 0.0
    mappings: list[TerminologyRecordResponse] = Field(default_factory=list)

    @classmethod
    def from_group(cls, group: DiseaseGroup) -> "DiseaseGroupResponse":
        return cls(
            target_code=group.target_code,
            target_title=group.target_title,
            target_definition=group.target_definition,
            similarity_score=group.similarity_score,
            match_score=group.match_score,
            mappings=[TerminologyRecordResponse.from_record(m) for m in group.mappings],
        )


class TranslationResponse(BaseModel):
    source_code: str
    target_system: str
    target_code: str


class TerminologyStatsResponse(BaseModel):
    total_codes: int
    dual_coded_records: int
    unmapped_records: int
    by_category: Dict[str, int] = Field(default_factory=dict)
