"""
Storage Exceptions — error taxonomy shared by every component.

Each error carries a ``kind`` (stable name reported to callers) and a
human-readable ``reason``. All of them are raised before any state mutation.
"""


class StorageError(Exception):
    """Base class for every failure reported by the storage."""

    kind: str = "StorageError"

    def __init__(self, reason: str = ""):
        self.reason = reason or self.kind
        super().__init__(self.reason)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.reason!r})"


class Unauthorized(StorageError):
    """Caller lacks the role required by the operation."""

    kind = "Unauthorized"


class Forbidden(StorageError):
    """A role-based business rule rejects the call."""

    kind = "Forbidden"


class NotSubscribed(StorageError):
    kind = "NotSubscribed"


class InvalidArgument(StorageError):
    kind = "InvalidArgument"


class InvalidEncoding(StorageError):
    """An argument does not have the expected byte-sequence shape."""

    kind = "InvalidEncoding"


class InvalidHexValue(StorageError):
    kind = "InvalidHexValue"


class InvalidPayment(StorageError):
    kind = "InvalidPayment"


class AlreadySubscribed(StorageError):
    kind = "AlreadySubscribed"


class TrialAlreadyUsed(StorageError):
    kind = "TrialAlreadyUsed"


class NotFound(StorageError):
    """Identifier is missing from the caller's namespace."""

    kind = "NotFound"


class Unsupported(StorageError):
    kind = "Unsupported"
