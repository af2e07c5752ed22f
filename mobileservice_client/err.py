"""
Mobile service client exception classes
"""

from typing import Optional


class MobileServiceException(Exception):
    """
    Base class for all project-wide exceptions

    Every failure of a table operation, whether it happened locally
    during request shaping or remotely while talking to the service,
    is reported as an instance of this class (or a subclass thereof).
    """


class InvalidIdentifier(MobileServiceException, ValueError):
    """
    Exception when an element or id can't be used to address a table row
    """


class MissingIdentifier(InvalidIdentifier):
    """
    Exception when the element or id is absent or has no id property at all
    """


class InvalidIdentifierShape(InvalidIdentifier, TypeError):
    """
    Exception when the id value is neither of string nor of numeric type
    """


class InvalidStringIdentifier(InvalidIdentifier):
    """
    Exception when a string id is empty, too long or contains forbidden characters

    String ids must not exceed 255 characters, must not contain
    control characters or any of ``" + / ? \\ ` `` and must not
    be exactly ``.`` or ``..``. The empty string is the default
    value and therefore rejected by operations needing a real id.
    """


class InvalidNumericIdentifier(InvalidIdentifier):
    """
    Exception when a numeric id is negative, out of range or the default ``0``
    """


class EncodingFailure(MobileServiceException):
    """
    Exception when a part of the request URI can't be percent-encoded
    """


class TransportFailure(MobileServiceException):
    """
    Exception raised when the outbound request failed in the transport layer

    The exception raised by the underlying HTTP library, if any,
    is available as ``__cause__``. No interpretation or retry
    of the failed request takes place in this library.
    """


class ServiceResponseError(TransportFailure):
    """
    Exception when the service answered with a non-successful status code
    """

    def __init__(self, message: str, response: Optional["ServiceResponse"] = None):  # noqa
        super().__init__(message)
        self.response = response

    @property
    def status(self) -> Optional[int]:
        return self.response.status if self.response is not None else None
