"""SQLAlchemy model for namaste_codes.

Column names follow the loaded dataset (``code_title``, ``tm2_definition``
...); attribute names are the canonical ones used by the store adapter.
Rows are written by the external loader and only read here.
"""

from __future__ import annotations

from sqlalchemy import Boolean, Float, Index, Integer, String, Text, true
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class NamasteCode(Base):
    __tablename__ = "namaste_codes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    category: Mapped[str | None] = mapped_column(String(40), nullable=True, index=True)

    traditional_code: Mapped[str | None] = mapped_column("code", String(40), nullable=True)
    traditional_title: Mapped[str | None] = mapped_column("code_title", Text, nullable=True)
    traditional_description: Mapped[str | None] = mapped_column("code_description", Text, nullable=True)

    target_code: Mapped[str | None] = mapped_column("tm2_code", String(40), nullable=True)
    target_title: Mapped[str | None] = mapped_column("tm2_title", Text, nullable=True)
    target_definition: Mapped[str | None] = mapped_column("tm2_definition", Text, nullable=True)
    target_link: Mapped[str | None] = mapped_column("tm2_link", Text, nullable=True)

    biomedicine_code: Mapped[str | None] = mapped_column(String(40), nullable=True)
    biomedicine_title: Mapped[str | None] = mapped_column(Text, nullable=True)

    confidence_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    # Older dataset variants carry only a HIGH/MEDIUM/LOW label.
    mapping_confidence: Mapped[str | None] = mapped_column(String(10), nullable=True)
    mapping_type: Mapped[str | None] = mapped_column(String(20), nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=true())

    __table_args__ = (
        Index("ix_namaste_codes_code", "code"),
        Index("ix_namaste_codes_tm2_code", "tm2_code"),
        Index("ix_namaste_codes_code_title", "code_title"),
    )
