from app.db.base import Base

# Import all models here
from app.models.namaste_code import NamasteCode

__all__ = ["Base", "NamasteCode"]
