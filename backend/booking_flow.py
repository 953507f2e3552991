# backend/booking_flow.py
import asyncio
import inspect
import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple, Union

from backend.errors import (
    BookingError,
    InvalidTransition,
    MissingFieldError,
    ProviderError,
    ValidationError,
)
from backend.services import AvailabilityProvider
from models.appointment import (
    WEEKS,
    Appointment,
    AppointmentDraft,
    AppointmentType,
    AvailabilitySlot,
    coerce_type,
)

logger = logging.getLogger(__name__)


async def _await(awaitable):
    return await awaitable


def _run_awaitable(awaitable):
    """Resuelve un proveedor asíncrono. Solo se puede desde código síncrono."""
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(_await(awaitable))
    if inspect.iscoroutine(awaitable):
        awaitable.close()
    raise ProviderError(
        "El proveedor de disponibilidad es asíncrono y ya hay un bucle de eventos en marcha; "
        "llama al controlador desde código síncrono"
    )


class Screen(str, Enum):
    HOME = "home"
    SCHEDULE_FORM = "schedule_form"
    AVAILABILITY = "availability"
    CONFIRMATION = "confirmation"
    CONFIRMED = "confirmed"
    MY_APPOINTMENTS = "my_appointments"


@dataclass(frozen=True)
class BookingView:
    """Foto del estado que consume la capa de presentación."""

    screen: Screen
    draft: AppointmentDraft
    results: Tuple[AvailabilitySlot, ...]
    pending_slot: Optional[AvailabilitySlot]
    selected_slot: Optional[AvailabilitySlot]
    appointments: Tuple[Appointment, ...]
    last_confirmed: Optional[Appointment]
    error: Optional[BookingError]
    loading: bool
    can_go_back: bool


class BookingFlowController:
    """
    Máquina de estados del flujo de reserva:
    - Decide qué pantalla se muestra
    - Acumula los datos del borrador entre pantallas
    - Convierte el horario elegido en una cita confirmada

    Una instancia por sesión; se pasa explícitamente a quien la use.
    """

    def __init__(self, provider: AvailabilityProvider):
        self.provider = provider
        self.screen = Screen.HOME
        self.history: List[Screen] = []
        self.draft = AppointmentDraft()
        self.results: List[AvailabilitySlot] = []
        self.pending_slot: Optional[AvailabilitySlot] = None
        self.selected_slot: Optional[AvailabilitySlot] = None
        self.appointments: List[Appointment] = []
        self.last_confirmed: Optional[Appointment] = None
        self.last_error: Optional[BookingError] = None
        self.loading = False

    # ============================================================
    # NAVEGACIÓN
    # ============================================================
    def _require(self, operation: str, *screens: Screen):
        if self.screen not in screens:
            raise InvalidTransition(operation, self.screen)

    def _navigate(self, target: Screen):
        logger.debug("Pantalla %s -> %s", self.screen.value, target.value)
        self.history.append(self.screen)
        self.screen = target
        self.last_error = None

    def _clear_selection(self):
        self.results = []
        self.pending_slot = None
        self.selected_slot = None

    def go_back(self):
        if not self.history:
            return
        previous = self.history.pop()
        logger.debug("Atrás: %s -> %s", self.screen.value, previous.value)
        self.screen = previous
        self.last_error = None

    def go_home(self):
        self._require("go_home", Screen.CONFIRMED)
        self.draft.reset()
        self._clear_selection()
        self.history = []
        self.screen = Screen.HOME
        self.last_error = None

    def start_booking(self):
        self._require("start_booking", Screen.HOME, Screen.CONFIRMED, Screen.MY_APPOINTMENTS)
        self.draft.reset()
        self._clear_selection()
        self._navigate(Screen.SCHEDULE_FORM)

    def view_appointments(self):
        self._require("view_appointments", Screen.HOME, Screen.CONFIRMED)
        self._navigate(Screen.MY_APPOINTMENTS)

    # ============================================================
    # FORMULARIO
    # ============================================================
    def set_week(self, value: Union[str, int]):
        self._require("set_week", Screen.SCHEDULE_FORM)
        week = str(value).strip() if value is not None else ""
        if week and week not in WEEKS:
            raise ValidationError(f"Semana de embarazo inválida: {value!r} (1 a 40)")
        self.draft.week = week

    def set_type(self, value: Union[str, AppointmentType]):
        self._require("set_type", Screen.SCHEDULE_FORM)
        try:
            self.draft.type = coerce_type(value)
        except ValueError:
            raise ValidationError(f"Tipo de cita inválido: {value!r}") from None

    def set_center(self, value: str):
        self._require("set_center", Screen.SCHEDULE_FORM)
        self.draft.center = (value or "").strip()

    def set_date(self, value: str):
        self._require("set_date", Screen.SCHEDULE_FORM)
        self.draft.date = (value or "").strip()

    # ============================================================
    # DISPONIBILIDAD
    # ============================================================
    def search_availability(self) -> List[AvailabilitySlot]:
        self._require("search_availability", Screen.SCHEDULE_FORM)
        # loading solo es True durante la llamada al proveedor: evita búsquedas reentrantes
        if self.loading:
            raise InvalidTransition("search_availability", self.screen)

        self.loading = True
        try:
            result = self.provider.fetch_availability(
                self.draft.week, self.draft.type.value, self.draft.center, self.draft.date
            )
            if inspect.isawaitable(result):
                result = _run_awaitable(result)
            slots = list(result or [])
        except ProviderError as e:
            logger.warning("Fallo al consultar disponibilidad: %s", e)
            self.last_error = e
            raise
        except Exception as e:
            logger.warning("Fallo al consultar disponibilidad: %s", e)
            self.last_error = ProviderError(f"No se pudo consultar la disponibilidad: {e}")
            raise self.last_error from e
        finally:
            self.loading = False

        if not slots:
            logger.warning("Sin horarios para semana=%s tipo=%s", self.draft.week, self.draft.type.value)
            self.last_error = ProviderError("No hay horarios disponibles para los datos indicados.")
            raise self.last_error

        self.results = slots
        self.pending_slot = None
        self.selected_slot = None
        self._navigate(Screen.AVAILABILITY)
        return list(slots)

    def _find_slot(self, slot: Union[AvailabilitySlot, int]) -> Optional[AvailabilitySlot]:
        slot_id = slot.id if isinstance(slot, AvailabilitySlot) else slot
        for candidate in self.results:
            if candidate.id == slot_id and (not isinstance(slot, AvailabilitySlot) or candidate == slot):
                return candidate
        return None

    def choose_slot(self, slot: Union[AvailabilitySlot, int]) -> AvailabilitySlot:
        self._require("choose_slot", Screen.AVAILABILITY)
        found = self._find_slot(slot)
        if found is None:
            raise ValidationError(f"El horario {slot!r} no pertenece a los resultados actuales")
        self.pending_slot = found
        return found

    def confirm_choice(self) -> AvailabilitySlot:
        self._require("confirm_choice", Screen.AVAILABILITY)
        if not self.results:
            raise MissingFieldError("slot", "No hay horarios para elegir")
        # Sin elección explícita se toma el primer horario de la lista
        self.selected_slot = self.pending_slot or self.results[0]
        self._navigate(Screen.CONFIRMATION)
        return self.selected_slot

    # ============================================================
    # CONFIRMACIÓN
    # ============================================================
    def confirm_appointment(self) -> Appointment:
        self._require("confirm_appointment", Screen.CONFIRMATION)
        missing = None
        if self.selected_slot is None:
            missing = MissingFieldError("slot", "Elige un horario antes de confirmar la cita")
        elif not self.draft.week:
            missing = MissingFieldError("week", "Indica la semana de embarazo antes de confirmar la cita")
        if missing:
            self.last_error = missing
            raise missing

        existing = {a.id for a in self.appointments}
        appointment = Appointment.from_booking(self.draft, self.selected_slot)
        while appointment.id in existing:
            appointment = Appointment.from_booking(self.draft, self.selected_slot)

        self.appointments.append(appointment)
        self.last_confirmed = appointment
        logger.info(
            "Cita confirmada id=%s tipo=%s fecha=%s %s medico=%s",
            appointment.id, appointment.type.value, appointment.date, appointment.time, appointment.doctor,
        )

        self.draft.reset()
        self._clear_selection()
        self.history = [Screen.HOME]
        self.screen = Screen.CONFIRMED
        self.last_error = None
        return appointment

    def edit_details(self):
        self._require("edit_details", Screen.CONFIRMATION)
        self._clear_selection()
        # Se vuelve al formulario existente; "atrás" no debe regresar a una confirmación sin horario
        if Screen.SCHEDULE_FORM in self.history:
            self.history = self.history[:self.history.index(Screen.SCHEDULE_FORM)]
        logger.debug("Editar datos: %s -> %s", self.screen.value, Screen.SCHEDULE_FORM.value)
        self.screen = Screen.SCHEDULE_FORM
        self.last_error = None

    # ============================================================
    # PRESENTACIÓN
    # ============================================================
    def snapshot(self) -> BookingView:
        return BookingView(
            screen=self.screen,
            draft=self.draft.copy(),
            results=tuple(self.results),
            pending_slot=self.pending_slot,
            selected_slot=self.selected_slot,
            appointments=tuple(self.appointments),
            last_confirmed=self.last_confirmed,
            error=self.last_error,
            loading=self.loading,
            can_go_back=bool(self.history),
        )
