"""Exception types raised by sonosync."""


class SonosyncError(Exception):
    """Base class for all sonosync errors."""


class RejectedWriteError(SonosyncError):
    """A write targeted a read-only property."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Property {key!r} is read-only")


class InvalidOperationError(SonosyncError):
    """The requested operation is not valid in the current state."""


class RemoteCallError(SonosyncError):
    """A remote command or query failed after all retries.

    Attributes:
        operation: Name of the remote operation that failed.
        attempts: Number of attempts made before giving up.
    """

    def __init__(self, operation: str, attempts: int, reason: str) -> None:
        self.operation = operation
        self.attempts = attempts
        super().__init__(f"{operation} failed after {attempts} attempt(s): {reason}")
