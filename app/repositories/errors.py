"""
Record-store exceptions for case persistence.
"""

from __future__ import annotations


class CaseStoreError(Exception):
    """Base exception for case record store failures."""


class DuplicateCaseError(CaseStoreError):
    """Raised when a case with the same aviso already exists."""

    def __init__(self, aviso: str) -> None:
        super().__init__(f'Aviso "{aviso}" already exists.')
        self.aviso = aviso


class UnknownLocationError(CaseStoreError):
    """Raised when a location code is not in the reference location table."""

    def __init__(self, code: str) -> None:
        super().__init__(f'Location code "{code}" does not exist.')
        self.code = code


class CaseNotFoundError(CaseStoreError):
    """Raised when updating a case that does not exist."""

    def __init__(self, aviso: str) -> None:
        super().__init__(f'Aviso "{aviso}" was not found.')
        self.aviso = aviso
