"""Booking and payment errors, each mapped to the HTTP status returned to clients."""

from fastapi import status


class ServiceError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ValidationFailed(ServiceError):
    """Missing or malformed input, or an operation not allowed in the booking's state."""

    status_code = status.HTTP_400_BAD_REQUEST


class SlotConflict(ServiceError):
    """Another non-canceled booking already holds the (date, time) slot."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND


class PaymentNotComplete(ServiceError):
    """The payment provider does not report the intent as succeeded."""

    status_code = status.HTTP_400_BAD_REQUEST


class UpstreamFailure(ServiceError):
    """Payment provider, store or mail transport failed."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
