"""
Error taxonomy for the booking engine.

Every rejection carries a stable ``code`` so the presentation layer can
map it to a user-facing message without parsing text. Only
``StorageUnavailable`` is worth offering a "try again" for; the rest are
business-rule rejections.
"""


class BookingError(Exception):
    """Base class for all booking engine failures."""

    code: str = "BookingError"
    retryable: bool = False

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, object]:
        return {"code": self.code, "message": self.message, "retryable": self.retryable}


class InvalidTeacher(BookingError):
    code = "InvalidTeacher"


class InvalidStudent(BookingError):
    code = "InvalidStudent"


class InvalidTimeRange(BookingError):
    code = "InvalidTimeRange"


class InvalidSeatCount(BookingError):
    code = "InvalidSeatCount"


class InvalidNotes(BookingError):
    code = "InvalidNotes"


class OverlappingSlot(BookingError):
    code = "OverlappingSlot"


class SlotNotFound(BookingError):
    code = "SlotNotFound"


class AppointmentNotFound(BookingError):
    code = "AppointmentNotFound"


class UserNotFound(BookingError):
    code = "UserNotFound"


class DuplicateUser(BookingError):
    code = "DuplicateUser"


class InvalidEmail(BookingError):
    code = "InvalidEmail"


class SlotFull(BookingError):
    code = "SlotFull"


class TooLateToBook(BookingError):
    code = "TooLateToBook"


class TooLateToCancel(BookingError):
    code = "TooLateToCancel"


class ConflictingAppointment(BookingError):
    code = "ConflictingAppointment"


class SlotHasBookings(BookingError):
    code = "SlotHasBookings"


class NotAuthorized(BookingError):
    code = "NotAuthorized"


class InvalidStateTransition(BookingError):
    code = "InvalidStateTransition"


class StorageUnavailable(BookingError):
    """Raised when the persistence medium rejects a read or write."""

    code = "StorageUnavailable"
    retryable = True
