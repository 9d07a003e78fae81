"""
EncryptedStorage — the top-level service object.

Owns the VaultState and wires the Access Controller, Subscription Registry
and Record Vault around it. Every public operation runs under one global
lock, so calls behave as a strictly serialized log of atomic operations.

``dispatch(call)`` is the request/response surface used by a transport:
it maps operation names to methods, converts arguments, and turns
StorageError failures into structured Responses.
"""
import time
import logging
import threading
from collections.abc import Callable
from typing import Any, Optional

from .config import StorageConfig
from .events import EventLog, Listener
from .exceptions import InvalidPayment, StorageError, Unsupported
from .models import Call, Event, Record, Response
from .ownership import AccessController
from .state import VaultState, dump_state, load_state
from .subscription import SubscriptionRegistry
from .vault import ID_SIZE, ZERO_ID, RecordVault

logger = logging.getLogger("encrypted_storage")


def system_clock() -> int:
    """Current time as integer epoch seconds."""
    return int(time.time())


def _to_identifier(value: Any) -> Any:
    """Accept raw bytes or 64-digit hex text, ``0x`` prefix optional.

    Malformed text is returned unchanged; the vault rejects it with
    InvalidEncoding after the access check.
    """
    if isinstance(value, str):
        text = value[2:] if value[:2].lower() == "0x" else value
        if len(text) == ID_SIZE * 2:
            try:
                return bytes.fromhex(text)
            except ValueError:
                return value
    return value


def _to_record(value: Any) -> Any:
    """Encode str record fields as UTF-8, leave everything else as is."""
    if isinstance(value, dict):
        return {
            key: field.encode("utf-8") if isinstance(field, str) else field
            for key, field in value.items()
        }
    return value


class EncryptedStorage:
    """Subscription-gated, per-caller encrypted record storage.

    Args:
        owner: Initial administrator identity, supplied by the deployer.
        config: Storage settings; defaults to ``StorageConfig()``.
        clock: Callable returning the current time in epoch seconds.
        state: Existing state to resume from (see ``restore``).
    """

    def __init__(
        self,
        owner: str,
        config: Optional[StorageConfig] = None,
        clock: Optional[Callable[[], int]] = None,
        state: Optional[VaultState] = None,
    ):
        self._config = config or StorageConfig()
        self._clock = clock or system_clock
        self._lock = threading.RLock()
        self._state = state or VaultState(owner=owner, fee=self._config.initial_fee)
        self._events = EventLog(self._state, self._clock)
        self._access = AccessController(self._state, self._events)
        self._subscriptions = SubscriptionRegistry(
            self._state, self._access, self._config, self._clock, self._events,
        )
        self._vault = RecordVault(
            self._state, self._subscriptions, self._events,
            max_page_size=self._config.max_page_size,
        )
        self._operations: dict[str, Callable[[Call], Any]] = {
            "owner": lambda call: self.owner(),
            "pendingOwner": lambda call: self.pending_owner(),
            "transferOwnership": lambda call: self.transfer_ownership(
                call.caller, call.args.get("new_owner"),
            ),
            "acceptOwnership": lambda call: self.accept_ownership(call.caller),
            "renounceOwnership": lambda call: self.renounce_ownership(call.caller),
            "subscribe": lambda call: self.subscribe(call.caller, call.payment),
            "changeFee": lambda call: self.change_fee(
                call.caller, call.args.get("new_fee"),
            ),
            "fee": lambda call: self.fee(),
            "isSubscribed": lambda call: self.is_subscribed(
                call.args.get("subscriber", call.caller),
            ),
            "subscriptionExpiresAt": lambda call: self.subscription_expires_at(
                call.args.get("subscriber", call.caller),
            ),
            "withdrawFees": lambda call: self.withdraw_fees(call.caller),
            "storeOrUpdate": self._store_call,
            "getStoredPasswords": self._page_call,
            "removeData": lambda call: self.remove_data(
                call.caller, _to_identifier(call.args.get("id")),
            ),
            "count": lambda call: self.count(call.caller),
        }
        logger.info("Encrypted storage ready: owner=%s", self._state.owner)

    # ------------------------------------------------------------------
    # Ownership
    # ------------------------------------------------------------------

    def owner(self) -> str:
        with self._lock:
            return self._access.owner

    def pending_owner(self) -> Optional[str]:
        with self._lock:
            return self._access.pending_owner

    def transfer_ownership(self, caller: str, new_owner: str) -> None:
        with self._lock:
            self._access.request_transfer(caller, new_owner)

    def accept_ownership(self, caller: str) -> None:
        with self._lock:
            self._access.accept_transfer(caller)

    def renounce_ownership(self, caller: str) -> None:
        with self._lock:
            self._access.renounce(caller)

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(self, caller: str, payment: int = 0) -> int:
        with self._lock:
            return self._subscriptions.subscribe(caller, payment)

    def change_fee(self, caller: str, new_fee: int) -> None:
        with self._lock:
            self._subscriptions.change_fee(caller, new_fee)

    def fee(self) -> int:
        with self._lock:
            return self._subscriptions.fee

    def is_subscribed(self, caller: str) -> bool:
        with self._lock:
            return self._subscriptions.is_subscribed(caller)

    def subscription_expires_at(self, caller: str) -> int:
        with self._lock:
            return self._subscriptions.expires_at(caller)

    def withdraw_fees(self, caller: str) -> int:
        with self._lock:
            return self._subscriptions.withdraw_fees(caller)

    def fee_pool(self) -> int:
        with self._lock:
            return self._subscriptions.fee_pool

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    def store_or_update(self, caller: str, record_id: Any, record: Any) -> bytes:
        with self._lock:
            return self._vault.store_or_update(caller, record_id, record)

    def get_stored_passwords(
        self, caller: str, page_index: int, limit: int,
    ) -> list[tuple[bytes, Record]]:
        with self._lock:
            return self._vault.get_stored_passwords(caller, page_index, limit)

    def remove_data(self, caller: str, record_id: Any) -> None:
        with self._lock:
            self._vault.remove_data(caller, record_id)

    def count(self, caller: str) -> int:
        """Number of records in the caller's namespace."""
        with self._lock:
            return self._vault.count(caller)

    # ------------------------------------------------------------------
    # Events and snapshots
    # ------------------------------------------------------------------

    def events(self) -> list[Event]:
        with self._lock:
            return list(self._events)

    def add_listener(self, listener: Listener) -> None:
        with self._lock:
            self._events.add_listener(listener)

    def remove_listener(self, listener: Listener) -> None:
        with self._lock:
            self._events.remove_listener(listener)

    def snapshot(self) -> bytes:
        """Serialize the full state for the host to persist."""
        with self._lock:
            return dump_state(self._state)

    @classmethod
    def restore(
        cls,
        data: bytes,
        config: Optional[StorageConfig] = None,
        clock: Optional[Callable[[], int]] = None,
    ) -> "EncryptedStorage":
        """Rebuild a storage from ``snapshot`` output."""
        state = load_state(data)
        return cls(owner=state.owner, config=config, clock=clock, state=state)

    # ------------------------------------------------------------------
    # Request/response surface
    # ------------------------------------------------------------------

    def _store_call(self, call: Call) -> Response:
        record_id = _to_identifier(call.args.get("id"))
        stored_id = self.store_or_update(
            call.caller, record_id, _to_record(call.args.get("record")),
        )
        created = stored_id.hex() if record_id == ZERO_ID else None
        return Response(ok=True, value=stored_id.hex(), created_id=created)

    def _page_call(self, call: Call) -> list[dict[str, Any]]:
        page = self.get_stored_passwords(
            call.caller, call.args.get("page_index"), call.args.get("limit"),
        )
        return [
            {"id": record_id.hex(), **record.model_dump()}
            for record_id, record in page
        ]

    def _execute(self, call: Call) -> Response:
        handler = self._operations.get(call.operation)
        if handler is None:
            raise Unsupported(f"Unknown operation: {call.operation}")
        if call.payment and call.operation != "subscribe":
            raise InvalidPayment(
                f"Operation {call.operation} does not accept a payment"
            )
        result = handler(call)
        if isinstance(result, Response):
            return result
        return Response(ok=True, value=result)

    def dispatch(self, call: Call) -> Response:
        """Execute a named call and return a structured Response.

        StorageError failures become ``ok=False`` responses carrying the
        error kind and reason; any other exception propagates.
        """
        try:
            with self._lock:
                return self._execute(call)
        except StorageError as err:
            logger.debug(
                "Call %s from %s failed: %s (%s)",
                call.operation, call.caller, err.kind, err.reason,
            )
            return Response(ok=False, error=err.kind, reason=err.reason)
