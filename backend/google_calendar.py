# google_calendar.py
import logging
import os
import re
from datetime import datetime, timedelta
from typing import Dict, Optional

import dateparser
import pytz
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build

from backend.config import Settings
from backend.errors import IntegrationUnavailable
from models.appointment import Appointment

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/calendar.events"]


def _load_creds(token_path: str, creds_path: str):
    creds = None

    # Intentar cargar credenciales existentes
    if token_path and os.path.exists(token_path):
        if os.path.getsize(token_path) > 0:
            try:
                creds = Credentials.from_authorized_user_file(token_path, SCOPES)
            except ValueError as e:
                logger.warning("Token corrupto en %s (%s), se regenerará", token_path, e)
                creds = None
        else:
            logger.warning("Token vacío en %s, se regenerará", token_path)

    if creds and creds.valid:
        return creds

    if creds and creds.expired and creds.refresh_token:
        creds.refresh(Request())
    else:
        if not os.path.exists(creds_path):
            raise IntegrationUnavailable(f"No se encontró el archivo de credenciales de Google: {creds_path}")
        flow = InstalledAppFlow.from_client_secrets_file(creds_path, SCOPES)
        creds = flow.run_local_server(port=0)

    # Guardar token
    if token_path:
        try:
            with open(token_path, "w", encoding="utf-8") as f:
                f.write(creds.to_json())
            logger.info("Token guardado en %s", token_path)
        except OSError as e:
            logger.warning("Error al guardar token: %s", e)

    return creds


def get_service(settings: Settings):
    creds = _load_creds(settings.google_token_path, settings.google_credentials_path)
    return build("calendar", "v3", credentials=creds)


# ============================================================
# FECHAS
# ============================================================

def parse_date_iso(text: str, reference: Optional[datetime] = None) -> Optional[str]:
    """
    Convierte la fecha de la cita a YYYY-MM-DD.
    Acepta ISO ("2026-01-25") o texto en español ("25 de Enero").
    """
    if not text:
        return None
    text = text.strip()
    try:
        return datetime.strptime(text, "%Y-%m-%d").date().isoformat()
    except ValueError:
        pass

    parsed = dateparser.parse(
        text,
        languages=["es"],
        settings={
            "RELATIVE_BASE": reference or datetime.now(),
            "PREFER_DATES_FROM": "future",
        },
    )
    return parsed.date().isoformat() if parsed else None


def parse_time_hhmm(text: str) -> Optional[str]:
    """'16:00 PM' -> '16:00', '09:00 AM' -> '09:00', '4:30 pm' -> '16:30'."""
    if not text:
        return None
    m = re.search(r"(\d{1,2})[:.](\d{2})\s*([ap]\.?\s*m\.?)?", text.strip(), re.IGNORECASE)
    if not m:
        return None
    hour, minute = int(m.group(1)), int(m.group(2))
    period = (m.group(3) or "").lower().replace(".", "").replace(" ", "")
    # El sufijo solo cuenta si la hora viene en formato de 12h
    if period and hour <= 12:
        if period == "pm" and hour < 12:
            hour += 12
        elif period == "am" and hour == 12:
            hour = 0
    if hour > 23 or minute > 59:
        return None
    return f"{hour:02d}:{minute:02d}"


# ============================================================
# EVENTOS
# ============================================================

def create_event(service, summary: str, date_iso: str, time_hhmm: str,
                 timezone: str, calendar_id: str = "primary",
                 duration_minutes: int = 60, description: str = "") -> Dict:
    """
    Crea un evento y devuelve el dict de evento (incluye 'id' y 'htmlLink').
    """
    start_dt = datetime.strptime(f"{date_iso} {time_hhmm}", "%Y-%m-%d %H:%M")
    end_dt = start_dt + timedelta(minutes=duration_minutes)

    tz = pytz.timezone(timezone)
    start = tz.localize(start_dt).isoformat()
    end = tz.localize(end_dt).isoformat()

    event = {
        "summary": summary,
        "description": description,
        "start": {"dateTime": start, "timeZone": timezone},
        "end": {"dateTime": end, "timeZone": timezone},
        "reminders": {"useDefault": False, "overrides": [
            {"method": "popup", "minutes": 30}, {"method": "email", "minutes": 120}
        ]},
    }
    return service.events().insert(calendarId=calendar_id, body=event).execute()


class GoogleCalendarExporter:
    """Añade una cita confirmada al Google Calendar del usuario."""

    def __init__(self, settings: Settings, service_factory=get_service):
        self.settings = settings
        self.service_factory = service_factory

    def export(self, appointment: Appointment) -> Optional[str]:
        if not self.settings.add_to_calendar:
            raise IntegrationUnavailable("La exportación a Google Calendar está desactivada")

        date_iso = parse_date_iso(appointment.date)
        time_hhmm = parse_time_hhmm(appointment.time)
        if not date_iso or not time_hhmm:
            raise IntegrationUnavailable(
                f"No se pudo interpretar la fecha/hora de la cita: {appointment.date} {appointment.time}"
            )

        try:
            service = self.service_factory(self.settings)
            created = create_event(
                service,
                summary=f"{appointment.type.value} - {appointment.doctor}",
                date_iso=date_iso,
                time_hhmm=time_hhmm,
                timezone=self.settings.timezone,
                calendar_id=self.settings.google_calendar_id,
                duration_minutes=self.settings.appointment_duration_minutes,
                description=(
                    f"Semana de embarazo: {appointment.week}\n"
                    f"Centro de salud: {appointment.center}\n"
                    f"Obstetra: {appointment.doctor}\n"
                    "Recuerda llegar 15 min antes. Traer DNI y carnet."
                ),
            )
        except IntegrationUnavailable:
            raise
        except Exception as e:
            logger.warning("No se pudo crear el evento en Google Calendar: %s", e)
            raise IntegrationUnavailable(f"No se pudo crear el evento en Google Calendar: {e}") from e

        logger.info("Evento creado en Google Calendar id=%s cita=%s", created.get("id"), appointment.id)
        return created.get("htmlLink")
