# backend/maps.py
import logging
from urllib.parse import quote_plus

from backend.errors import IntegrationUnavailable
from models.appointment import Appointment

logger = logging.getLogger(__name__)

MAPS_SEARCH_URL = "https://www.google.com/maps/search/?api=1&query={query}"


class GoogleMapsOpener:
    """Devuelve el enlace de Google Maps del centro de salud de la cita."""

    def open(self, appointment: Appointment) -> str:
        center = (appointment.center or "").strip()
        if not center:
            raise IntegrationUnavailable("La cita no tiene centro de salud para mostrar en el mapa")
        url = MAPS_SEARCH_URL.format(query=quote_plus(center))
        logger.debug("Mapa para cita %s: %s", appointment.id, url)
        return url
