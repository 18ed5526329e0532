"""Shared fixtures: sample NAMASTE mappings, an in-memory store, a seeded
SQLite session and a FastAPI test client bound to that session."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.clinical.terminology.records import TerminologyRecord
from app.db.models import Base, NamasteCode
from app.db.session import get_db
from app.main import app
from app.repositories.memory_store import InMemoryTerminologyStore
from app.repositories.terminology_repository import SqlTerminologyStore

SAMPLE_ROWS = [
    dict(
        category="ayurveda",
        traditional_code="NAM001",
        traditional_title="Jvara",
        traditional_description="Fever with headache and body ache",
        target_code="XM4KH5",
        target_title="Fever disorder (TM2)",
        target_definition="Disorder characterised by raised body temperature",
        target_link="http://id.who.int/icd/entity/XM4KH5",
        biomedicine_code="MG26",
        biomedicine_title="Fever of other or unknown origin",
        confidence_score=0.9,
        mapping_type="EQUIVALENT",
    ),
    dict(
        category="siddha",
        traditional_code="SID001",
        traditional_title="Suram",
        traditional_description="Fever with chills",
        target_code="XM4KH5",
        target_title="Fever disorder (TM2)",
        target_definition="Disorder characterised by raised body temperature",
        confidence_score=0.7,
    ),
    dict(
        category="unani",
        traditional_code="UNA001",
        traditional_title="Humma",
        traditional_description="Fever and thirst",
        target_code="XM4KH5",
        target_title="Fever disorder (TM2)",
        target_definition="Disorder characterised by raised body temperature",
        confidence_score=0.8,
    ),
    dict(
        category="ayurveda",
        traditional_code="NAM002",
        traditional_title="Shiroroga",
        traditional_description="Headache disorder",
        target_code="XM1AB2",
        target_title="Headache disorder (TM2)",
        target_definition="Pain in the head region",
        biomedicine_code="8A8Z",
        biomedicine_title="Headache disorders, unspecified",
        confidence_score=0.85,
    ),
    dict(
        category="siddha",
        traditional_code="SID002",
        traditional_title="Thalai vali",
        traditional_description="Head pain",
        target_code="XM1AB2",
        target_title="Headache disorder (TM2)",
        target_definition="Pain in the head region",
        confidence_score=0.5,
    ),
    dict(
        category="ayurveda",
        traditional_code="NAM003",
        traditional_title="Kasa",
        traditional_description="Cough",
        target_code="XM2CD3",
        target_title="Cough disorder (TM2)",
        target_definition="Forceful expulsion of air",
        confidence_score=None,
    ),
    dict(
        category="unani",
        traditional_code="UNA002",
        traditional_title="Suda",
        traditional_description="Headache with fever",
        target_code="XM1AB2",
        target_title="Headache disorder (TM2)",
        target_definition="Pain in the head region",
        confidence_score=0.75,
    ),
]


def make_record(record_id, **fields) -> TerminologyRecord:
    return TerminologyRecord(id=record_id, **fields)


@pytest.fixture
def sample_records() -> list[TerminologyRecord]:
    return [make_record(idx, **row) for idx, row in enumerate(SAMPLE_ROWS, start=1)]


@pytest.fixture
def memory_store(sample_records) -> InMemoryTerminologyStore:
    return InMemoryTerminologyStore(sample_records)


@pytest.fixture
def db_session() -> Session:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    factory = sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)

    with factory() as session:
        session.add_all(NamasteCode(**row) for row in SAMPLE_ROWS)
        session.add(
            NamasteCode(
                category="unani",
                traditional_code="UNA999",
                traditional_title="Retired fever entry",
                traditional_description="Fever with headache",
                target_code="XM9ZZ9",
                confidence_score=0.95,
                is_active=False,
            )
        )
        session.commit()
        yield session

    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def sql_store(db_session) -> SqlTerminologyStore:
    return SqlTerminologyStore(db_session)


@pytest.fixture
def client(db_session) -> TestClient:
    def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()
