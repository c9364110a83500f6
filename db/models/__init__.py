"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.case import Case, CaseStatus
from db.models.location import Location

__all__ = [
    "Case",
    "CaseStatus",
    "Location",
]
