"""
app/api/dependencies.py

Shared FastAPI dependencies.
"""

from __future__ import annotations

from fastapi import Depends
from sqlalchemy.orm import Session

from app.repositories.case_repository import SQLAlchemyCaseRepository
from app.repositories.case_store import CaseStore
from db.session import get_db


def get_case_store(db: Session = Depends(get_db)) -> CaseStore:
    """
    Case record store bound to the request's database session.
    """

    return SQLAlchemyCaseRepository(db)
