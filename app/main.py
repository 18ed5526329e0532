"""NAMASTE Terminology Core FastAPI application.

This service maps NAMASTE (Ayurveda, Siddha, Unani) diagnosis codes to ICD-11
Traditional Medicine Module 2 and, where the dataset carries it, ICD-11
biomedicine codes.  It exposes code lookup, translation and symptom search for
EMR auto-complete.

Only terminology concerns live here.  Patient identity (ABHA), FHIR resource
assembly and data loading belong to the surrounding products.
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.clinical.terminology.router import router as terminology_router
from app.core.config import settings


def _configure_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app() -> FastAPI:
    _configure_logging()

    app = FastAPI(
        title="NAMASTE Terminology Core",
        version="0.1.0",
        description="NAMASTE to ICD-11 TM2 terminology lookup, translation and symptom search APIs.",
    )

    origins = [
        "http://localhost:3000",
    ]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(terminology_router, prefix="/terminology", tags=["NAMASTE terminology"])

    return app


app = create_app()
