# streamlit_app.py
import logging
from datetime import date

import streamlit as st

# Backend
from backend.config import load_settings
from backend.booking_flow import BookingFlowController, Screen
from backend.errors import BookingError, IntegrationUnavailable
from backend.services import MockAvailabilityProvider
from backend.google_calendar import GoogleCalendarExporter
from backend.maps import GoogleMapsOpener
from models.appointment import AppointmentType, CENTERS, WEEKS


# ============================
# INICIALIZACIÓN
# ============================
settings = load_settings()
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("vida_materna")

st.set_page_config(page_title="Vida Materna · Citas Prenatales", page_icon="🤰", layout="centered")

# Estado de la sesión: un controlador por usuario conectado
if "booking" not in st.session_state:
    st.session_state.booking = BookingFlowController(MockAvailabilityProvider())
if "notice" not in st.session_state:
    st.session_state.notice = None

booking = st.session_state.booking
calendar_exporter = GoogleCalendarExporter(settings)
map_opener = GoogleMapsOpener()


def run_action(action, *args):
    """Ejecuta una operación del flujo y recarga la pantalla."""
    try:
        action(*args)
    except BookingError as e:
        logger.info("Operación rechazada (%s): %s", getattr(action, "__name__", action), e)
        # Los errores que el controlador ya guarda se muestran en su pantalla
        if booking.last_error is not e:
            st.session_state.notice = str(e)
    st.rerun()


def header(title: str, back_key: str = None):
    cols = st.columns((1, 8))
    with cols[0]:
        if back_key and st.button("←", key=back_key, help="Volver"):
            run_action(booking.go_back)
    with cols[1]:
        st.subheader(title)


def detail(label: str, value):
    st.markdown(f"**{label}:** {value}")


view = booking.snapshot()

notice = st.session_state.notice
if notice:
    st.session_state.notice = None
    st.warning(notice)


# ============================
# INICIO
# ============================
if view.screen == Screen.HOME:
    st.title("Vida Materna")
    st.header("Citas Prenatales")
    st.write(
        "Gestiona tus controles prenatales de manera rápida y segura. "
        "Agenda nuevas citas o revisa las que ya tienes programadas."
    )

    if st.button("AGENDAR NUEVA CITA", key="home_schedule", type="primary"):
        run_action(booking.start_booking)
    if st.button("VER MIS CITAS PROGRAMADAS", key="home_appointments"):
        run_action(booking.view_appointments)


# ============================
# FORMULARIO
# ============================
elif view.screen == Screen.SCHEDULE_FORM:
    header("Agendar Cita", back_key="back_form")
    draft = view.draft

    week_options = [""] + WEEKS
    week = st.selectbox(
        "Semana de embarazo",
        week_options,
        index=week_options.index(draft.week) if draft.week in week_options else 0,
        format_func=lambda w: f"Semana {w}" if w else "Selecciona la semana",
        key="form_week",
    )
    st.caption("Ayuda a priorizar el tipo de control según etapa de gestación")

    type_options = [t.value for t in AppointmentType]
    appointment_type = st.radio(
        "Tipo de cita",
        type_options,
        index=type_options.index(draft.type.value),
        captions=[t.description for t in AppointmentType],
        key="form_type",
    )
    st.caption("El tipo de cita define la duración y requisitos")

    center = st.text_input(
        "Establecimiento de salud",
        value=draft.center,
        placeholder="Buscar establecimiento (nombre o distrito)",
        key="form_center",
    )
    matches = [c for c in CENTERS if center and center.lower() in c.lower() and c != center]
    if matches:
        st.caption("Coincidencias: " + " · ".join(matches))

    tentative = st.date_input(
        "Fecha tentativa",
        value=date.fromisoformat(draft.date) if draft.date else None,
        format="DD/MM/YYYY",
        key="form_date",
    )
    st.caption("La disponibilidad dependerá del establecimiento y el tipo de cita")

    try:
        booking.set_week(week)
        booking.set_type(appointment_type)
        booking.set_center(center)
        booking.set_date(tentative.isoformat() if tentative else "")
    except BookingError as e:
        st.error(str(e))

    if view.error:
        st.error(str(view.error))
    if st.button(
        "REINTENTAR BÚSQUEDA" if view.error else "BUSCAR DISPONIBILIDAD",
        key="form_search",
        type="primary",
        disabled=view.loading,
    ):
        run_action(booking.search_availability)


# ============================
# DISPONIBILIDAD
# ============================
elif view.screen == Screen.AVAILABILITY:
    header("Disponibilidad", back_key="back_availability")
    st.markdown("#### RESULTADOS DE DISPONIBILIDAD")
    st.caption("Encuentra el mejor horario para ti y tu bebé")

    slots_by_id = {s.id: s for s in view.results}
    slot_ids = list(slots_by_id)
    current = view.pending_slot.id if view.pending_slot else slot_ids[0]
    chosen = st.radio(
        "Elige fecha, hora, médico y centro de salud",
        slot_ids,
        index=slot_ids.index(current),
        format_func=lambda i: slots_by_id[i].label,
        key="slot_choice",
    )
    booking.choose_slot(chosen)

    if st.button("CONFIRMAR ELECCIÓN", key="confirm_choice", type="primary"):
        run_action(booking.confirm_choice)


# ============================
# CONFIRMACIÓN
# ============================
elif view.screen == Screen.CONFIRMATION:
    header("Vida Materna", back_key="back_confirmation")
    st.markdown("#### CONFIRMACIÓN DE CITA")
    st.write("Por favor, revisa los detalles de tu cita")

    slot = view.selected_slot
    draft = view.draft.to_dict()
    if slot:
        detail("Fecha y Hora", f"{slot.date} - {slot.time}")
        detail("Centro de salud", slot.center)
        detail("Tipo de cita", draft["type"])
        detail("Semana de embarazo", f"Semana {draft['week']}" if draft["week"] else "-")
        detail("Obstetra a cargo", slot.doctor)

    if view.error:
        st.error(str(view.error))

    if st.button("CONFIRMAR CITA", key="confirm_appointment", type="primary"):
        run_action(booking.confirm_appointment)
    if st.button("REGRESAR Y CAMBIAR DATOS", key="edit_details"):
        run_action(booking.edit_details)


# ============================
# CITA CONFIRMADA
# ============================
elif view.screen == Screen.CONFIRMED:
    st.markdown("#### CITA CONFIRMADA")
    st.success("Tu cita ha sido programada con éxito")

    appt = view.last_confirmed
    detail("Fecha y Hora", f"{appt.date} - {appt.time}")
    detail("Obstetra", appt.doctor)
    detail("Ubicación", appt.center)

    try:
        st.link_button("ABRIR MAPA", map_opener.open(appt))
    except IntegrationUnavailable as e:
        st.button("ABRIR MAPA", key="open_map", disabled=True, help=str(e))

    if st.button("AÑADIR AL CALENDARIO", key="add_calendar"):
        try:
            link = calendar_exporter.export(appt)
            if link:
                st.success(f"📅 Evento creado: [Abrir]({link})")
            else:
                st.success("📅 Evento creado en tu calendario")
        except IntegrationUnavailable as e:
            st.toast(f"⚠️ {e}")

    if st.button("VOLVER AL INICIO", key="go_home", type="primary"):
        run_action(booking.go_home)
    if st.button("VER MIS CITAS", key="confirmed_appointments"):
        run_action(booking.view_appointments)

    st.caption('"Recuerda llegar 15 min antes"')
    st.caption('"Traer DNI y carnet"')


# ============================
# MIS CITAS
# ============================
elif view.screen == Screen.MY_APPOINTMENTS:
    header("Mis Citas", back_key="back_appointments")

    if not view.appointments:
        st.info("No tienes citas programadas aún.")
        if st.button("Agendar ahora", key="empty_schedule"):
            run_action(booking.start_booking)
    else:
        for a in view.appointments:
            data = a.to_dict()
            with st.container(border=True):
                left, right = st.columns((3, 1))
                with left:
                    st.markdown(f"📅 **{data['date']}** · 🕒 {data['time']}")
                with right:
                    st.markdown(f"`Semana {data['week']}`")
                st.markdown(f"📍 {data['center']}")
                st.markdown(f"👤 {data['doctor']}")
                st.markdown(f"🩺 {data['type']}")
                # Reprogramar/cancelar aún no están disponibles
                c1, c2 = st.columns(2)
                c1.button("REPROGRAMAR", key=f"reschedule-{a.id}", disabled=True, help="Próximamente")
                c2.button("CANCELAR", key=f"cancel-{a.id}", disabled=True, help="Próximamente")

        if st.button("➕ AGENDAR OTRA CITA", key="another_schedule", type="primary"):
            run_action(booking.start_booking)


st.markdown("---")
st.caption("VIDA MATERNA © 2026")
