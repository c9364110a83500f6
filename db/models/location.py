"""
db/models/location.py

Reference table of facility locations keyed by 4-digit code.
"""

from __future__ import annotations

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base


class Location(Base):
    __tablename__ = "locations"

    code: Mapped[str] = mapped_column(String(4), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
