"""Encrypted Storage — subscription-gated vault of per-caller encrypted records.

Security Note (Threat Model):
    Stored values are ciphertext produced by the client. The storage never
    sees plaintext or key material; anyone holding a snapshot holds the
    ciphertext of every namespace, but nothing that decrypts it.
"""

from .version import __version__
from .config import StorageConfig, TRIAL_PERIOD
from .exceptions import (
    StorageError,
    Unauthorized,
    Forbidden,
    NotSubscribed,
    InvalidArgument,
    InvalidEncoding,
    InvalidHexValue,
    InvalidPayment,
    AlreadySubscribed,
    TrialAlreadyUsed,
    NotFound,
    Unsupported,
)
from .models import Record, Subscription, Event, Call, Response
from .service import EncryptedStorage
from .vault import ZERO_ID

__all__ = [
    "__version__",
    "EncryptedStorage",
    "StorageConfig",
    "TRIAL_PERIOD",
    "ZERO_ID",
    "Record",
    "Subscription",
    "Event",
    "Call",
    "Response",
    "StorageError",
    "Unauthorized",
    "Forbidden",
    "NotSubscribed",
    "InvalidArgument",
    "InvalidEncoding",
    "InvalidHexValue",
    "InvalidPayment",
    "AlreadySubscribed",
    "TrialAlreadyUsed",
    "NotFound",
    "Unsupported",
]
