"""
Storage State — the abstract key-value state behind the service.

Holds the administrator slot, subscription book, fee, fee pool and the
per-caller namespaces. ``dump_state``/``load_state`` turn it into orjson bytes
so a host can persist it however it likes; namespace order survives the
round trip.

Security Note:
    Snapshots contain stored ciphertext. Never log snapshot contents.
"""
import logging
from typing import Any, Optional

import orjson

from .models import Event, Record, Subscription

logger = logging.getLogger("encrypted_storage")

SNAPSHOT_VERSION = 1


class VaultState:
    """All mutable state of one storage instance.

    ``namespaces`` maps caller identity to an insertion-ordered dict of
    identifier -> Record. ``nonces`` only ever grows, so identifiers are
    never reused after a delete.
    """

    def __init__(self, owner: str, fee: int):
        self.owner: str = owner
        self.pending_owner: Optional[str] = None
        self.fee: int = fee
        self.fee_pool: int = 0
        self.subscriptions: dict[str, Subscription] = {}
        self.namespaces: dict[str, dict[bytes, Record]] = {}
        self.nonces: dict[str, int] = {}
        self.events: list[Event] = []

    def namespace(self, caller: str) -> dict[bytes, Record]:
        """Return the caller's namespace, empty dict if never written."""
        return self.namespaces.get(caller, {})

    def subscription(self, caller: str) -> Subscription:
        """Return the caller's subscription, a blank one if never subscribed."""
        return self.subscriptions.get(caller) or Subscription()


def dump_state(state: VaultState) -> bytes:
    """Serialize a VaultState to orjson bytes.

    Bytes (identifiers and record fields) are stored as hex strings.
    Namespaces are written as lists to keep insertion order explicit.
    """
    payload = {
        "version": SNAPSHOT_VERSION,
        "owner": state.owner,
        "pending_owner": state.pending_owner,
        "fee": state.fee,
        "fee_pool": state.fee_pool,
        "subscriptions": {
            caller: sub.model_dump()
            for caller, sub in state.subscriptions.items()
        },
        "namespaces": {
            caller: [
                {
                    "id": record_id.hex(),
                    "name": record.name.hex(),
                    "description": record.description.hex(),
                    "value": record.value.hex(),
                }
                for record_id, record in records.items()
            ]
            for caller, records in state.namespaces.items()
        },
        "nonces": state.nonces,
        "events": [event.model_dump() for event in state.events],
    }
    return orjson.dumps(payload)


def load_state(data: bytes) -> VaultState:
    """Restore a VaultState from ``dump_state`` output.

    Raises:
        ValueError: If the snapshot version is not supported.
    """
    parsed: dict[str, Any] = orjson.loads(data)
    version = parsed.get("version")
    if version != SNAPSHOT_VERSION:
        raise ValueError(f"Unsupported snapshot version: {version!r}")
    state = VaultState(owner=parsed["owner"], fee=parsed["fee"])
    state.pending_owner = parsed.get("pending_owner")
    state.fee_pool = parsed.get("fee_pool", 0)
    state.subscriptions = {
        caller: Subscription(**sub)
        for caller, sub in parsed.get("subscriptions", {}).items()
    }
    for caller, rows in parsed.get("namespaces", {}).items():
        records: dict[bytes, Record] = {}
        for row in rows:
            records[bytes.fromhex(row["id"])] = Record(
                name=bytes.fromhex(row["name"]),
                description=bytes.fromhex(row["description"]),
                value=bytes.fromhex(row["value"]),
            )
        state.namespaces[caller] = records
    state.nonces = dict(parsed.get("nonces", {}))
    state.events = [Event(**event) for event in parsed.get("events", [])]
    logger.debug(
        "Restored state: %d namespace(s), %d subscription(s)",
        len(state.namespaces), len(state.subscriptions),
    )
    return state
