"""Booking-core error taxonomy.

Each error carries the HTTP status its category maps to; the API layer
turns any BookingError into a ``{"error": message}`` response.
"""


class BookingError(Exception):
    """Base class for business-rule and validation failures."""

    status_code = 400


class InvalidArgumentError(BookingError):
    """Raised for missing or malformed input."""

    status_code = 400


class NotFoundError(BookingError):
    """Raised when a referenced room or reservation does not exist."""

    status_code = 404


class RoomNotFoundError(NotFoundError):
    def __init__(self, room: str) -> None:
        self.room = room
        super().__init__("Room not found")


class ReservationNotFoundError(NotFoundError):
    def __init__(self, reservation_id: str) -> None:
        self.reservation_id = reservation_id
        super().__init__("Reservation not found")


class ConflictError(BookingError):
    """Raised when the current state of the store forbids the operation."""

    status_code = 409


class RoomUnavailableError(ConflictError):
    """Raised when a room under maintenance is booked."""

    def __init__(self, room_name: str) -> None:
        self.room_name = room_name
        super().__init__(
            "This room is under maintenance and cannot be booked at the moment."
        )


class FullyBookedError(ConflictError):
    """Raised when blocking reservations already fill the room's capacity."""

    def __init__(self, room_name: str, capacity: int, blocking: int) -> None:
        self.room_name = room_name
        self.capacity = capacity
        self.blocking = blocking
        super().__init__(
            "Fully booked for the selected dates. "
            "Please choose different dates or another room."
        )


class InvalidTransitionError(ConflictError):
    """Raised when a reservation cannot move from its current status."""

    def __init__(self, current: str, target: str, message: str | None = None) -> None:
        self.current = current
        self.target = target
        super().__init__(
            message or f"Cannot change reservation status from '{current}' to '{target}'"
        )


class CancellationWindowExpiredError(ConflictError):
    def __init__(self, window_minutes: int) -> None:
        self.window_minutes = window_minutes
        super().__init__(
            f"Cancellation window expired ({window_minutes} minutes after booking)"
        )


class PaymentRequiredError(ConflictError):
    def __init__(self) -> None:
        super().__init__("Cannot check out: no completed payment found")


class RoomInUseError(ConflictError):
    """Raised when deleting a room that reservations still reference."""

    def __init__(self, room_id: str) -> None:
        self.room_id = room_id
        super().__init__("Room has reservations and cannot be deleted")
