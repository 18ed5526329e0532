from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.models.namaste_code import NamasteCode

logger = logging.getLogger(__name__)


def check_terminology_loaded(session: Session) -> bool:
    """Return True when namaste_codes has at least one active row."""
    try:
        stmt = select(func.count()).select_from(NamasteCode).where(NamasteCode.is_active.is_(True))
        count = session.execute(stmt).scalar_one()
        return bool(count and count > 0)
    except Exception:
        logger.exception("Failed to check terminology load state")
        return False
