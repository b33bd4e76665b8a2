"""Error hierarchy for portal operations.

Storage failures are split into transient (should retry) and permanent
failures so tenacity retry decorators can classify them automatically.

Example usage with tenacity:
    @retry(retry=retry_if_exception_type(TransientStorageError), stop=stop_after_attempt(3))
    def load_document(self) -> dict:
        ...
"""


class PortalError(Exception):
    """Base exception for all portal errors."""

    pass


class StorageError(PortalError, OSError):
    """The document store is unreachable or rejected the request.

    Callers must reload current state from the store after a failed save.
    """

    pass


class TransientStorageError(StorageError):
    """Temporary storage failure that may succeed on retry.

    Examples: network timeouts, connection resets, 503 Service Unavailable.
    """

    pass


class ValidationError(PortalError, ValueError):
    """Input rejected before it reaches the store.

    Examples: non-positive cycle length, unknown weekday, missing form field.
    """

    pass


class NotFoundError(PortalError, LookupError):
    """Referenced id or name does not exist."""

    pass


class AuthenticationError(PortalError):
    """Invalid credentials or no active session."""

    pass


class PermissionDeniedError(PortalError):
    """The current user's role does not allow the action."""

    pass
