"""
Error taxonomy for the booking API.

Services raise these; the exception handlers in main.py turn them into
JSON bodies of the form {"error": message} (plus "details" for validation
failures). Nothing in this module knows about HTTP frameworks.
"""

from typing import Any, Optional


class BookingAPIError(Exception):
    """Base class for errors that map to a client-visible response"""

    status_code = 500
    message = "Internal server error"

    def __init__(self, message: Optional[str] = None, details: Any = None):
        self.message = message or self.message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict:
        body = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class ValidationFailed(BookingAPIError):
    status_code = 400
    message = "Validation failed"


class MissingParameter(BookingAPIError):
    status_code = 400
    message = "Required parameter is missing"


class InvalidConfirmationCode(BookingAPIError):
    status_code = 400
    message = "Invalid confirmation code"


class Unauthorized(BookingAPIError):
    status_code = 401
    message = "Not authenticated"


class Forbidden(BookingAPIError):
    status_code = 403
    message = "Not allowed to access this practice"


class NotFound(BookingAPIError):
    status_code = 404
    message = "Not found"


class SlotUnavailable(BookingAPIError):
    status_code = 409
    message = "Slot no longer available"


class DuplicateKey(BookingAPIError):
    status_code = 409
    message = "Duplicate booking request"


class InvalidState(BookingAPIError):
    status_code = 409
    message = "Booking is not in pending status"


class RateLimitExceeded(BookingAPIError):
    status_code = 429
    message = "Rate limit exceeded"

    def __init__(self, message: Optional[str] = None, retry_after: int = 0):
        super().__init__(message)
        self.retry_after = retry_after


class InternalError(BookingAPIError):
    status_code = 500
    message = "Internal server error"


# Storage-level failures, raised by storage.py and reclassified by services


class StoreError(Exception):
    """Unclassified failure talking to the document store"""


class ConditionFailed(StoreError):
    """A conditional write was rejected because its condition did not hold"""
