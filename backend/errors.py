# backend/errors.py
"""Excepciones del flujo de reserva."""


class BookingError(Exception):
    """Error base del flujo de reserva."""


class ValidationError(BookingError):
    """Dato del formulario inválido o incompleto."""


class MissingFieldError(ValidationError):
    def __init__(self, field: str, message: str = None):
        self.field = field
        super().__init__(message or f"Falta el campo obligatorio: {field}")


class ProviderError(BookingError):
    """La consulta de disponibilidad falló o no devolvió horarios. Se puede reintentar."""


class IntegrationUnavailable(BookingError):
    """No se pudo contactar con la app/servicio externo (calendario, mapa)."""


class InvalidTransition(BookingError):
    def __init__(self, operation: str, screen):
        self.operation = operation
        self.screen = screen
        super().__init__(f"'{operation}' no está permitido desde la pantalla '{getattr(screen, 'value', screen)}'")
