"""Pytest configuration and common fixtures."""

import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest

from backend.booking_flow import BookingFlowController
from backend.config import Settings
from backend.services import MockAvailabilityProvider
from models.appointment import Appointment, AppointmentType


@pytest.fixture
def provider():
    return MockAvailabilityProvider()


@pytest.fixture
def controller(provider):
    return BookingFlowController(provider)


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at files that do not exist."""
    return Settings(
        timezone="America/Lima",
        google_credentials_path=str(tmp_path / "credentials.json"),
        google_token_path=str(tmp_path / "token.json"),
    )


@pytest.fixture
def appointment():
    return Appointment(
        week="12",
        type=AppointmentType.ECOGRAFIA,
        center="Hospital Rebagliati",
        date="25 de Enero",
        time="16:00 PM",
        doctor="Garay, P.",
    )


@pytest.fixture
def book(controller):
    """Recorre el flujo completo hasta confirmar una cita."""

    def _book(week="12", type="Ecografía", slot_id=None):
        controller.start_booking()
        controller.set_week(week)
        controller.set_type(type)
        controller.search_availability()
        if slot_id is not None:
            controller.choose_slot(slot_id)
        controller.confirm_choice()
        return controller.confirm_appointment()

    return _book
