"""Exceptions for django-care-bookings."""


class CareBookingError(Exception):
    """Base exception for booking reconciliation operations."""

    pass


class AmendmentNotFoundError(CareBookingError):
    """Raised when an amendment log entry does not exist."""

    pass


class AmendmentAlreadyResolvedError(CareBookingError):
    """Raised when approving or rejecting an amendment that is already approved."""

    pass


class InvalidStatusError(CareBookingError):
    """Raised when a status or eligibility name is not recognised."""

    pass


class MalformedStatusError(CareBookingError):
    """Raised when a stored status value cannot be decoded."""

    pass


class QaBatchWriteError(CareBookingError):
    """Raised when a batch of question/answer writes fails and is rolled back."""

    pass
