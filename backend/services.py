# backend/services.py
import logging
from typing import List, Protocol

from models.appointment import AvailabilitySlot

logger = logging.getLogger(__name__)


class AvailabilityProvider(Protocol):
    def fetch_availability(self, week: str, type: str, center: str = "", date: str = "") -> List[AvailabilitySlot]:
        ...


# Horarios de demostración (no hay agenda real detrás)
DEMO_SLOTS = [
    AvailabilitySlot(id=1, date="25 de Enero", time="16:00 PM", doctor="Garay, P.", center="Hospital Rebagliati"),
    AvailabilitySlot(id=2, date="26 de Enero", time="09:00 AM", doctor="Mendoza, L.", center="Hospital Almenara"),
]


class MockAvailabilityProvider:
    """
    Devuelve siempre el mismo conjunto de horarios.
    En una app real esto consultaría la agenda del establecimiento.
    """

    def __init__(self, slots: List[AvailabilitySlot] = None):
        self.slots = list(DEMO_SLOTS if slots is None else slots)

    def fetch_availability(self, week: str, type: str, center: str = "", date: str = "") -> List[AvailabilitySlot]:
        logger.debug("Consulta de disponibilidad: semana=%s tipo=%s centro=%s fecha=%s", week, type, center, date)
        # Lista nueva en cada llamada
        return list(self.slots)
