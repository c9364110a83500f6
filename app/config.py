"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean flag; unset keeps the default.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_str_env(name: str, default: str) -> str:
    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


@dataclass(frozen=True)
class AppSettings:
    """
    Process-wide settings for the API.
    """

    title: str = "Case Import API"
    log_level: str = "INFO"


@dataclass(frozen=True)
class CaseImportSettings:
    """
    Runtime settings for spreadsheet case import.
    """

    log_row_errors: bool = True
    location_precheck: bool = True


@lru_cache(maxsize=1)
def get_app_settings() -> AppSettings:
    return AppSettings(
        title=_get_str_env("APP_TITLE", "Case Import API"),
        log_level=_get_str_env("LOG_LEVEL", "INFO").upper(),
    )


@lru_cache(maxsize=1)
def get_case_import_settings() -> CaseImportSettings:
    """
    Return cached case import settings from environment variables.
    """

    return CaseImportSettings(
        log_row_errors=_get_bool_env("CASE_IMPORT_LOG_ROW_ERRORS", True),
        location_precheck=_get_bool_env("CASE_IMPORT_LOCATION_PRECHECK", True),
    )
