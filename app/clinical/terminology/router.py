"""FastAPI router for NAMASTE terminology.

Thin HTTP layer over the terminology engine: code lookup, symptom search,
translation and catalogue browsing.  Engine errors are mapped to status codes
here; the engine itself never knows about HTTP.
"""

from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.clinical.terminology.code_resolver import CodeResolver, ResolveMode
from app.clinical.terminology.errors import StoreError, TooManyResultsError
from app.clinical.terminology.service import TerminologyService
from app.clinical.terminology.symptom_search import SymptomSearchEngine
from app.clinical.terminology.translation import TranslationGateway
from app.db.session import get_db
from app.repositories.terminology_repository import SqlTerminologyStore
from app.schemas.terminology import (
    DiseaseGroupResponse,
    TerminologyRecordResponse,
    TerminologyStatsResponse,
    TranslationResponse,
)
from app.services.terminology_state import check_terminology_loaded

logger = logging.getLogger(__name__)

router = APIRouter()

TM2_SYSTEM = "http://id.who.int/icd/release/11/tm2"
BIOMEDICINE_SYSTEM = "http://id.who.int/icd/release/11/biomedicine"


def _store_unavailable(exc: StoreError) -> HTTPException:
    logger.exception("Terminology store failure")
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc))


def _records(records) -> List[TerminologyRecordResponse]:
    return [TerminologyRecordResponse.from_record(r) for r in records]


@router.get("/lookup/{code}", response_model=List[TerminologyRecordResponse])
def lookup(
    code: str,
    mode: ResolveMode = Query(default=ResolveMode.ANY),
    db: Session = Depends(get_db),
) -> List[TerminologyRecordResponse]:
    resolver = CodeResolver(SqlTerminologyStore(db))
    try:
        return _records(resolver.resolve(code, mode))
    except StoreError as exc:
        raise _store_unavailable(exc) from exc


@router.get("/symptoms", response_model=List[DiseaseGroupResponse])
def search_symptoms(
    terms: List[str] = Query(..., description="Symptom terms; all must match"),
    db: Session = Depends(get_db),
) -> List[DiseaseGroupResponse]:
    engine = SymptomSearchEngine(SqlTerminologyStore(db))
    try:
        groups = engine.search_grouped(terms)
    except TooManyResultsError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": "too many results, refine query", "count": exc.count, "limit": exc.limit},
        ) from exc
    except StoreError as exc:
        raise _store_unavailable(exc) from exc
    return [DiseaseGroupResponse.from_group(g) for g in groups]


@router.get("/symptoms/flat", response_model=List[TerminologyRecordResponse])
def search_symptoms_flat(
    terms: List[str] = Query(...),
    db: Session = Depends(get_db),
) -> List[TerminologyRecordResponse]:
    engine = SymptomSearchEngine(SqlTerminologyStore(db))
    try:
        return _records(engine.search_flat(terms))
    except TooManyResultsError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": "too many results, refine query", "count": exc.count, "limit": exc.limit},
        ) from exc
    except StoreError as exc:
        raise _store_unavailable(exc) from exc


@router.get("/translate/tm2/{traditional_code}", response_model=TranslationResponse)
def translate_to_tm2(traditional_code: str, db: Session = Depends(get_db)) -> TranslationResponse:
    gateway = TranslationGateway(SqlTerminologyStore(db))
    try:
        target = gateway.to_target_code(traditional_code)
    except StoreError as exc:
        raise _store_unavailable(exc) from exc
    if not target:
        raise HTTPException(status_code=404, detail="No ICD-11 TM2 mapping found")
    return TranslationResponse(source_code=traditional_code, target_system=TM2_SYSTEM, target_code=target)


@router.get("/translate/biomedicine/{traditional_code}", response_model=TranslationResponse)
def translate_to_biomedicine(traditional_code: str, db: Session = Depends(get_db)) -> TranslationResponse:
    gateway = TranslationGateway(SqlTerminologyStore(db))
    try:
        target = gateway.to_biomedicine_code(traditional_code)
    except StoreError as exc:
        raise _store_unavailable(exc) from exc
    if not target:
        raise HTTPException(status_code=404, detail="No ICD-11 Biomedicine mapping found")
    return TranslationResponse(source_code=traditional_code, target_system=BIOMEDICINE_SYSTEM, target_code=target)


@router.get("/reverse/tm2/{target_code}", response_model=TerminologyRecordResponse)
def reverse_from_tm2(target_code: str, db: Session = Depends(get_db)) -> TerminologyRecordResponse:
    gateway = TranslationGateway(SqlTerminologyStore(db))
    try:
        record = gateway.to_traditional(target_code)
    except StoreError as exc:
        raise _store_unavailable(exc) from exc
    if record is None:
        raise HTTPException(status_code=404, detail="No NAMASTE code found for ICD-11 TM2 code")
    return TerminologyRecordResponse.from_record(record)


@router.get("/reverse/biomedicine/{biomedicine_code}", response_model=TerminologyRecordResponse)
def reverse_from_biomedicine(biomedicine_code: str, db: Session = Depends(get_db)) -> TerminologyRecordResponse:
    gateway = TranslationGateway(SqlTerminologyStore(db))
    try:
        record = gateway.from_biomedicine_code(biomedicine_code)
    except StoreError as exc:
        raise _store_unavailable(exc) from exc
    if record is None:
        raise HTTPException(status_code=404, detail="No NAMASTE code found for ICD-11 Biomedicine code")
    return TerminologyRecordResponse.from_record(record)


@router.get("/autocomplete", response_model=List[TerminologyRecordResponse])
def autocomplete(
    q: str = Query(default=""),
    limit: int = Query(default=10, ge=1, le=50),
    db: Session = Depends(get_db),
) -> List[TerminologyRecordResponse]:
    service = TerminologyService(SqlTerminologyStore(db))
    try:
        return _records(service.search_autocomplete(q, limit=limit))
    except StoreError as exc:
        raise _store_unavailable(exc) from exc


@router.get("/search", response_model=List[TerminologyRecordResponse])
def comprehensive_search(q: str = Query(default=""), db: Session = Depends(get_db)) -> List[TerminologyRecordResponse]:
    service = TerminologyService(SqlTerminologyStore(db))
    try:
        return _records(service.comprehensive_search(q))
    except StoreError as exc:
        raise _store_unavailable(exc) from exc


@router.get("/name/{title}", response_model=TerminologyRecordResponse)
def get_by_name(title: str, db: Session = Depends(get_db)) -> TerminologyRecordResponse:
    service = TerminologyService(SqlTerminologyStore(db))
    try:
        record = service.get_by_title(title)
    except StoreError as exc:
        raise _store_unavailable(exc) from exc
    if record is None:
        raise HTTPException(status_code=404, detail="NAMASTE name not found")
    return TerminologyRecordResponse.from_record(record)


@router.get("/codes", response_model=List[TerminologyRecordResponse])
def get_all_active(db: Session = Depends(get_db)) -> List[TerminologyRecordResponse]:
    service = TerminologyService(SqlTerminologyStore(db))
    try:
        return _records(service.get_all_active())
    except StoreError as exc:
        raise _store_unavailable(exc) from exc


@router.get("/admin/recent", response_model=List[TerminologyRecordResponse])
def get_recent(
    limit: int = Query(default=10, ge=1, le=50),
    db: Session = Depends(get_db),
) -> List[TerminologyRecordResponse]:
    service = TerminologyService(SqlTerminologyStore(db))
    try:
        return _records(service.get_recent(limit))
    except StoreError as exc:
        raise _store_unavailable(exc) from exc


@router.get("/category/{category}", response_model=List[TerminologyRecordResponse])
def get_by_category(category: str, db: Session = Depends(get_db)) -> List[TerminologyRecordResponse]:
    service = TerminologyService(SqlTerminologyStore(db))
    try:
        return _records(service.get_by_category(category))
    except StoreError as exc:
        raise _store_unavailable(exc) from exc


@router.get("/dual-coding", response_model=List[TerminologyRecordResponse])
def get_dual_coding(db: Session = Depends(get_db)) -> List[TerminologyRecordResponse]:
    service = TerminologyService(SqlTerminologyStore(db))
    try:
        return _records(service.get_dual_coded())
    except StoreError as exc:
        raise _store_unavailable(exc) from exc


@router.get("/stats", response_model=TerminologyStatsResponse)
def get_stats(db: Session = Depends(get_db)) -> TerminologyStatsResponse:
    service = TerminologyService(SqlTerminologyStore(db))
    try:
        stats = service.get_stats()
    except StoreError as exc:
        raise _store_unavailable(exc) from exc
    return TerminologyStatsResponse(
        total_codes=stats.total_codes,
        dual_coded_records=stats.dual_coded_records,
        unmapped_records=stats.unmapped_records,
        by_category=stats.by_category,
    )


@router.get("/health")
def health(db: Session = Depends(get_db)) -> dict:
    loaded = check_terminology_loaded(db)
    return {"status": "UP" if loaded else "DEGRADED", "terminology_loaded": loaded}
