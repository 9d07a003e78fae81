"""
Record Vault — encrypted records in isolated per-caller namespaces.

Provides the record API of the storage:
- ``store_or_update(caller, id, record)`` — insert (zero id) or overwrite
- ``get_stored_passwords(caller, page_index, limit)`` — ordered pagination
- ``remove_data(caller, id)`` — delete an owned record
- ``count(caller)`` — number of records in the caller's namespace

Security Note:
    Values are ciphertext produced by the client; the vault never decrypts.
    Never log record names, descriptions or values. Only log callers and
    identifiers.
"""
import re
import struct
import logging
from collections.abc import Mapping
from typing import Any

from cryptography.hazmat.primitives import hashes

from .config import MAX_PAGE_SIZE
from .events import EventLog
from .exceptions import (
    InvalidArgument,
    InvalidEncoding,
    InvalidHexValue,
    NotFound,
)
from .models import Record
from .state import VaultState
from .subscription import SubscriptionRegistry

logger = logging.getLogger("encrypted_storage")

ID_SIZE = 32
ZERO_ID = bytes(ID_SIZE)

_HEX_PATTERN = re.compile(rb"(?:0[xX])?(?:[0-9a-fA-F]{2})+")
_RECORD_FIELDS = ("name", "description", "value")


# ---------------------------------------------------------------------------
# Identifier and payload validation
# ---------------------------------------------------------------------------

def validate_identifier(record_id: Any) -> bytes:
    """Return ``record_id`` as bytes if it is a 32-byte identifier.

    Raises:
        InvalidEncoding: If record_id is not exactly 32 bytes.
    """
    if not isinstance(record_id, (bytes, bytearray)):
        raise InvalidEncoding(
            f"Identifier must be bytes, got {type(record_id).__name__}"
        )
    if len(record_id) != ID_SIZE:
        raise InvalidEncoding(
            f"Identifier must be {ID_SIZE} bytes, got {len(record_id)}"
        )
    return bytes(record_id)


def is_hex_text(value: bytes) -> bool:
    """True if ``value`` is hex text: optional 0x, then whole bytes of hex digits."""
    return _HEX_PATTERN.fullmatch(value) is not None


def coerce_record(record: Any) -> Record:
    """Validate the shape of an incoming record.

    Accepts a Record or a mapping with ``name``, ``description`` and
    ``value`` keys holding bytes.

    Raises:
        InvalidEncoding: If the record or one of its fields is malformed.
        InvalidHexValue: If ``value`` is not hex text.
    """
    if isinstance(record, Record):
        fields = {name: getattr(record, name) for name in _RECORD_FIELDS}
    elif isinstance(record, Mapping):
        missing = [name for name in _RECORD_FIELDS if name not in record]
        if missing:
            raise InvalidEncoding(f"Record is missing field(s): {', '.join(missing)}")
        fields = {name: record[name] for name in _RECORD_FIELDS}
    else:
        raise InvalidEncoding(
            f"Record must be a mapping, got {type(record).__name__}"
        )
    for name, data in fields.items():
        if not isinstance(data, (bytes, bytearray)):
            raise InvalidEncoding(
                f"Record field '{name}' must be bytes, got {type(data).__name__}"
            )
        fields[name] = bytes(data)
    if not is_hex_text(fields["value"]):
        raise InvalidHexValue("Record value is not a valid hexadecimal string")
    return Record(**fields)


def derive_identifier(caller: str, nonce: int) -> bytes:
    """SHA-256 over the caller identity and its namespace nonce."""
    digest = hashes.Hash(hashes.SHA256())
    digest.update(caller.encode("utf-8"))
    digest.update(struct.pack("!Q", nonce))
    return digest.finalize()


# ---------------------------------------------------------------------------
# Vault
# ---------------------------------------------------------------------------

class RecordVault:
    """Per-caller encrypted record store.

    Every operation checks access first (administrator or active
    subscriber) and validates its arguments before touching state.
    Namespaces are insertion-ordered dicts, so deletes leave the remaining
    records in order with no gaps.
    """

    def __init__(
        self,
        state: VaultState,
        registry: SubscriptionRegistry,
        events: EventLog,
        max_page_size: int = MAX_PAGE_SIZE,
    ):
        self._state = state
        self._registry = registry
        self._events = events
        self._max_page_size = max_page_size

    def _allocate(self, caller: str, records: dict[bytes, Record]) -> bytes:
        nonce = self._state.nonces.get(caller, 0)
        while True:
            record_id = derive_identifier(caller, nonce)
            nonce += 1
            if record_id != ZERO_ID and record_id not in records:
                break
        self._state.nonces[caller] = nonce
        return record_id

    def store_or_update(self, caller: str, record_id: Any, record: Any) -> bytes:
        """Insert a new record or overwrite an existing one.

        Args:
            caller: Authenticated caller identity.
            record_id: 32-byte identifier; ``ZERO_ID`` creates a new record.
            record: Record (or mapping) of name, description and value bytes.

        Returns:
            The identifier of the stored record.

        Raises:
            NotSubscribed: If caller is neither administrator nor subscribed.
            InvalidEncoding: If the identifier or a record field is malformed.
            InvalidHexValue: If the value is not hex text.
            NotFound: If a non-zero identifier is not in caller's namespace.
        """
        self._registry.require_access(caller)
        record_id = validate_identifier(record_id)
        validated = coerce_record(record)
        records = self._state.namespaces.get(caller)

        if record_id == ZERO_ID:
            if records is None:
                records = {}
            new_id = self._allocate(caller, records)
            records[new_id] = validated
            self._state.namespaces[caller] = records
            logger.debug("Vault store: caller=%s id=%s", caller, new_id.hex())
            self._events.emit("RecordStored", owner=caller, id=new_id.hex())
            return new_id

        if records is None or record_id not in records:
            raise NotFound(f"Record {record_id.hex()} not found")
        records[record_id] = validated
        logger.debug("Vault update: caller=%s id=%s", caller, record_id.hex())
        self._events.emit("RecordUpdated", owner=caller, id=record_id.hex())
        return record_id

    def get_stored_passwords(
        self, caller: str, page_index: int, limit: int,
    ) -> list[tuple[bytes, Record]]:
        """Return one page of the caller's records in insertion order.

        Pages past the end are empty.

        Raises:
            NotSubscribed: If caller is neither administrator nor subscribed.
            InvalidArgument: If limit is outside [1, 255] or page_index < 0.
        """
        self._registry.require_access(caller)
        for name, number in (("page_index", page_index), ("limit", limit)):
            if isinstance(number, bool) or not isinstance(number, int):
                raise InvalidArgument(f"{name} must be an integer")
        if limit < 1 or limit > self._max_page_size:
            raise InvalidArgument("Value out of bounds")
        if page_index < 0:
            raise InvalidArgument("Value out of bounds")
        start = page_index * limit
        items = list(self._state.namespace(caller).items())
        return items[start:start + limit]

    def remove_data(self, caller: str, record_id: Any) -> None:
        """Delete a record from the caller's namespace.

        Raises:
            NotSubscribed: If caller is neither administrator nor subscribed.
            InvalidEncoding: If record_id is not a 32-byte identifier.
            NotFound: If the identifier is not in the caller's namespace.
        """
        self._registry.require_access(caller)
        record_id = validate_identifier(record_id)
        records = self._state.namespaces.get(caller)
        if records is None or record_id not in records:
            raise NotFound(f"Record {record_id.hex()} not found")
        del records[record_id]
        logger.debug("Vault remove: caller=%s id=%s", caller, record_id.hex())
        self._events.emit("RecordRemoved", owner=caller, id=record_id.hex())

    def count(self, caller: str) -> int:
        self._registry.require_access(caller)
        return len(self._state.namespace(caller))
