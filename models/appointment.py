# Appointment.py
import uuid
from dataclasses import dataclass, asdict, field
from enum import Enum
from typing import Union


class AppointmentType(str, Enum):
    """Tipos de cita prenatal. Conjunto cerrado: el borrador solo acepta estos valores."""

    CONTROL_REGULAR = "Control regular"
    ALTO_RIESGO = "Alto riesgo"
    ECOGRAFIA = "Ecografía"

    @property
    def description(self) -> str:
        descriptions = {
            "Control regular": "Seguimiento estándar del embarazo",
            "Alto riesgo": "Control especializado con mayor duración",
            "Ecografía": "Examen de ultrasonido obstétrico",
        }
        return descriptions[self.value]


DEFAULT_TYPE = AppointmentType.CONTROL_REGULAR

# Catálogos de la demo
WEEKS = [str(w) for w in range(1, 41)]
CENTERS = [
    "Hospital Rebagliati",
    "Hospital Almenara",
    "Centro de Salud Milagros",
    "R Castilla",
    "Grau",
]


def coerce_type(value: Union[str, AppointmentType]) -> AppointmentType:
    """Devuelve el AppointmentType correspondiente o lanza ValueError."""
    if isinstance(value, AppointmentType):
        return value
    return AppointmentType(value)


@dataclass
class AppointmentDraft:
    week: str = ""           # "1".."40", vacío hasta elegirla
    type: AppointmentType = DEFAULT_TYPE
    center: str = ""
    date: str = ""           # YYYY-MM-DD (fecha tentativa)

    def reset(self):
        self.week = ""
        self.type = DEFAULT_TYPE
        self.center = ""
        self.date = ""

    def copy(self) -> "AppointmentDraft":
        return AppointmentDraft(week=self.week, type=self.type, center=self.center, date=self.date)

    def to_dict(self):
        data = asdict(self)
        data["type"] = self.type.value
        return data


@dataclass(frozen=True)
class AvailabilitySlot:
    id: int
    date: str
    time: str
    doctor: str
    center: str

    @property
    def label(self) -> str:
        return f"{self.date} · {self.time} · {self.doctor} · {self.center}"


@dataclass(frozen=True)
class Appointment:
    week: str
    type: AppointmentType
    center: str
    date: str
    time: str
    doctor: str
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @classmethod
    def from_booking(cls, draft: AppointmentDraft, slot: AvailabilitySlot) -> "Appointment":
        """Crea la cita a partir del borrador y del horario elegido."""
        return cls(
            week=draft.week,
            type=draft.type,
            center=slot.center,
            date=slot.date,
            time=slot.time,
            doctor=slot.doctor,
        )

    def to_dict(self):
        data = asdict(self)
        data["type"] = self.type.value
        return data
