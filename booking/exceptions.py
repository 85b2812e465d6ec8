"""All exceptions."""

from booking.results import ErrorKind


class BookingError(Exception):
    """Base class; `kind` is what ends up in a failure envelope."""

    kind = ErrorKind.UNKNOWN


class StoreError(BookingError):
    """Raised when the document store rejects or fails a call."""

    kind = ErrorKind.STORE


class NotFoundError(StoreError):
    """Raised when a document does not exist."""

    kind = ErrorKind.NOT_FOUND


class PermissionDeniedError(StoreError):
    """Raised when the store refuses access to a document or collection."""

    kind = ErrorKind.PERMISSION_DENIED


class AuthenticationError(BookingError):
    """Raised when the identity provider rejects the credentials."""

    kind = ErrorKind.UNAUTHENTICATED


class NotAdminError(BookingError):
    """Raised when a signed-in user is missing from the admin allow-list."""

    kind = ErrorKind.NOT_ADMIN

    def __init__(self, message: str = "Not an admin user"):
        super().__init__(message)
