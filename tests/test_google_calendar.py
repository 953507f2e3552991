"""Tests for the Google Calendar exporter."""

import dataclasses
from datetime import datetime
from unittest.mock import MagicMock

import pytest

from backend.errors import IntegrationUnavailable
from backend.google_calendar import GoogleCalendarExporter, create_event, parse_date_iso, parse_time_hhmm


def make_service(created=None):
    service = MagicMock()
    service.events.return_value.insert.return_value.execute.return_value = created or {
        "id": "evt123",
        "htmlLink": "https://calendar.google.com/event?eid=evt123",
    }
    return service


class TestParsing:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("16:00 PM", "16:00"),
            ("09:00 AM", "09:00"),
            ("4:30 pm", "16:30"),
            ("12:15 am", "00:15"),
            ("12:00 PM", "12:00"),
            ("17.45", "17:45"),
        ],
    )
    def test_parse_time(self, text, expected):
        assert parse_time_hhmm(text) == expected

    @pytest.mark.parametrize("text", ["", None, "por la tarde", "25:00"])
    def test_parse_time_invalid(self, text):
        assert parse_time_hhmm(text) is None

    def test_parse_iso_date(self):
        assert parse_date_iso("2027-01-25") == "2027-01-25"

    def test_parse_spanish_date(self):
        result = parse_date_iso("25 de Enero", reference=datetime(2026, 10, 19))

        assert result is not None
        assert result.endswith("-01-25")

    def test_parse_empty_date(self):
        assert parse_date_iso("") is None


class TestCreateEvent:
    def test_event_body(self):
        service = make_service()

        create_event(
            service,
            summary="Ecografía - Garay, P.",
            date_iso="2027-01-25",
            time_hhmm="16:00",
            timezone="America/Lima",
            calendar_id="primary",
            duration_minutes=45,
        )

        kwargs = service.events.return_value.insert.call_args.kwargs
        body = kwargs["body"]
        assert kwargs["calendarId"] == "primary"
        assert body["start"]["dateTime"] == "2027-01-25T16:00:00-05:00"
        assert body["end"]["dateTime"] == "2027-01-25T16:45:00-05:00"
        assert body["start"]["timeZone"] == "America/Lima"
        assert body["reminders"]["overrides"] == [
            {"method": "popup", "minutes": 30},
            {"method": "email", "minutes": 120},
        ]
        assert "attendees" not in body


class TestGoogleCalendarExporter:
    def test_export_returns_link(self, settings, appointment):
        service = make_service()
        exporter = GoogleCalendarExporter(settings, service_factory=lambda s: service)

        link = exporter.export(dataclasses.replace(appointment, date="2027-01-25"))

        assert link == "https://calendar.google.com/event?eid=evt123"
        body = service.events.return_value.insert.call_args.kwargs["body"]
        assert body["summary"] == "Ecografía - Garay, P."
        assert body["start"]["dateTime"].startswith("2027-01-25T16:00:00")
        assert "Semana de embarazo: 12" in body["description"]
        assert "Hospital Rebagliati" in body["description"]

    def test_export_spanish_date(self, settings, appointment):
        service = make_service()
        exporter = GoogleCalendarExporter(settings, service_factory=lambda s: service)

        exporter.export(appointment)

        body = service.events.return_value.insert.call_args.kwargs["body"]
        assert "-01-25T16:00:00" in body["start"]["dateTime"]

    def test_disabled(self, settings, appointment):
        factory = MagicMock()
        exporter = GoogleCalendarExporter(dataclasses.replace(settings, add_to_calendar=False), service_factory=factory)

        with pytest.raises(IntegrationUnavailable):
            exporter.export(appointment)
        factory.assert_not_called()

    def test_unparseable_time(self, settings, appointment):
        factory = MagicMock()
        exporter = GoogleCalendarExporter(settings, service_factory=factory)

        with pytest.raises(IntegrationUnavailable):
            exporter.export(dataclasses.replace(appointment, time="por la tarde"))
        factory.assert_not_called()

    def test_api_failure_wrapped(self, settings, appointment):
        service = make_service()
        service.events.return_value.insert.return_value.execute.side_effect = RuntimeError("503")
        exporter = GoogleCalendarExporter(settings, service_factory=lambda s: service)

        with pytest.raises(IntegrationUnavailable) as exc:
            exporter.export(appointment)

        assert isinstance(exc.value.__cause__, RuntimeError)

    def test_missing_credentials(self, settings, appointment):
        exporter = GoogleCalendarExporter(settings)

        with pytest.raises(IntegrationUnavailable, match="credenciales"):
            exporter.export(appointment)
