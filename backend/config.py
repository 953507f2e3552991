# backend/config.py
import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv, find_dotenv

logger = logging.getLogger(__name__)


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Valor inválido para %s=%r, se usa %s", name, raw, default)
        return default


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _get_log_level(name: str, default: str) -> str:
    raw = (os.getenv(name) or "").strip().upper()
    if not raw:
        return default
    if raw not in LOG_LEVELS:
        logger.warning("Nivel de log inválido %s=%r, se usa %s", name, raw, default)
        return default
    return raw


def _get_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "si", "sí", "on")


@dataclass(frozen=True)
class Settings:
    timezone: str = "America/Lima"
    google_credentials_path: str = "credentials.json"
    google_token_path: str = "token.json"
    google_calendar_id: str = "primary"
    appointment_duration_minutes: int = 60
    add_to_calendar: bool = True
    log_level: str = "INFO"


def load_settings(dotenv: bool = True) -> Settings:
    """Lee la configuración desde variables de entorno (y .env si existe)."""
    if dotenv:
        load_dotenv(find_dotenv(usecwd=True))

    return Settings(
        timezone=os.getenv("TIMEZONE", Settings.timezone),
        google_credentials_path=os.getenv("GOOGLE_CREDENTIALS_PATH", Settings.google_credentials_path),
        google_token_path=os.getenv("GOOGLE_TOKEN_PATH", Settings.google_token_path),
        google_calendar_id=os.getenv("GOOGLE_CALENDAR_ID", Settings.google_calendar_id),
        appointment_duration_minutes=_get_int("APPOINTMENT_DURATION_MINUTES", Settings.appointment_duration_minutes),
        add_to_calendar=_get_bool("ADD_TO_CALENDAR", Settings.add_to_calendar),
        log_level=_get_log_level("LOG_LEVEL", Settings.log_level),
    )
