"""Tests for environment configuration."""

import logging

from backend.config import Settings, load_settings

ENV_VARS = [
    "TIMEZONE",
    "GOOGLE_CREDENTIALS_PATH",
    "GOOGLE_TOKEN_PATH",
    "GOOGLE_CALENDAR_ID",
    "APPOINTMENT_DURATION_MINUTES",
    "ADD_TO_CALENDAR",
    "LOG_LEVEL",
]


class TestLoadSettings:
    def test_defaults(self, monkeypatch):
        for name in ENV_VARS:
            monkeypatch.delenv(name, raising=False)

        settings = load_settings(dotenv=False)

        assert settings == Settings()
        assert settings.timezone == "America/Lima"
        assert settings.appointment_duration_minutes == 60
        assert settings.add_to_calendar is True

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("TIMEZONE", "Europe/Madrid")
        monkeypatch.setenv("GOOGLE_CALENDAR_ID", "citas@example.com")
        monkeypatch.setenv("APPOINTMENT_DURATION_MINUTES", "45")
        monkeypatch.setenv("ADD_TO_CALENDAR", "false")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        settings = load_settings(dotenv=False)

        assert settings.timezone == "Europe/Madrid"
        assert settings.google_calendar_id == "citas@example.com"
        assert settings.appointment_duration_minutes == 45
        assert settings.add_to_calendar is False
        assert settings.log_level == "DEBUG"

    def test_invalid_int_falls_back(self, monkeypatch):
        monkeypatch.setenv("APPOINTMENT_DURATION_MINUTES", "una hora")

        settings = load_settings(dotenv=False)

        assert settings.appointment_duration_minutes == 60

    def test_bool_spanish_yes(self, monkeypatch):
        monkeypatch.setenv("ADD_TO_CALENDAR", "sí")

        assert load_settings(dotenv=False).add_to_calendar is True

    def test_invalid_log_level_falls_back(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "verbose")

        settings = load_settings(dotenv=False)

        assert settings.log_level == "INFO"
        # El nivel resultante debe ser aceptado por logging
        logging.getLogger("vida_materna.test").setLevel(settings.log_level)

    def test_log_level_trimmed(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", " warning ")

        assert load_settings(dotenv=False).log_level == "WARNING"
