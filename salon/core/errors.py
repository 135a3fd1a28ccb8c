"""Booking error taxonomy shared by the scheduling core and the routes."""


class BookingError(Exception):
    """Base class for errors raised by the booking core."""

    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class InvalidArgumentError(BookingError):
    """Malformed or missing input."""

    status_code = 400


class NotFoundError(BookingError):
    status_code = 404


class ConflictError(BookingError):
    """The requested interval was taken by a concurrent booking."""

    status_code = 409


class InternalError(BookingError):
    status_code = 500


class NotificationError(InternalError):
    """An email or SMS could not be delivered."""
