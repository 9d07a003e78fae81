"""
Access Controller — two-step ownership transfer.

States::

    Stable(owner) -> PendingTransfer(owner, pending) -> Stable(pending)

There is no renounce path: the administrator slot can never become empty.
"""
import logging
from typing import Optional

from .events import EventLog
from .exceptions import InvalidArgument, Unauthorized, Unsupported
from .state import VaultState

logger = logging.getLogger("encrypted_storage")

ZERO_ADDRESS = "0x" + "0" * 40


def is_null_identity(identity: Optional[str]) -> bool:
    """True for None, the empty string and the zero address."""
    if identity is None:
        return True
    if not isinstance(identity, str):
        return False
    value = identity.strip()
    return value == "" or value.lower() == ZERO_ADDRESS


class AccessController:
    """Owns the administrator slot of a VaultState."""

    def __init__(self, state: VaultState, events: EventLog):
        if is_null_identity(state.owner):
            raise InvalidArgument("Initial owner cannot be the null identity")
        self._state = state
        self._events = events

    @property
    def owner(self) -> str:
        return self._state.owner

    @property
    def pending_owner(self) -> Optional[str]:
        return self._state.pending_owner

    def is_owner(self, caller: str) -> bool:
        return caller == self._state.owner

    def require_owner(self, caller: str) -> None:
        """Raise Unauthorized unless ``caller`` is the current owner."""
        if not self.is_owner(caller):
            logger.warning("Rejected admin call from non-owner %s", caller)
            raise Unauthorized(f"Caller {caller} is not the owner")

    def request_transfer(self, caller: str, new_owner: str) -> None:
        """Start a transfer of ownership to ``new_owner``.

        A later request replaces any transfer still pending.

        Raises:
            Unauthorized: If caller is not the current owner.
            InvalidArgument: If new_owner is not a string or is the null identity.
        """
        self.require_owner(caller)
        if new_owner is not None and not isinstance(new_owner, str):
            raise InvalidArgument(
                f"New owner must be a string, got {type(new_owner).__name__}"
            )
        if is_null_identity(new_owner):
            raise InvalidArgument("New owner cannot be the null identity")
        self._state.pending_owner = new_owner
        logger.info(
            "Ownership transfer started: %s -> %s", caller, new_owner,
        )
        self._events.emit(
            "OwnershipTransferStarted",
            previous_owner=caller, new_owner=new_owner,
        )

    def accept_transfer(self, caller: str) -> None:
        """Complete a pending transfer; only the pending owner may call it.

        Raises:
            Unauthorized: If caller is not the pending owner.
        """
        pending = self._state.pending_owner
        if pending is None or caller != pending:
            logger.warning("Rejected ownership accept from %s", caller)
            raise Unauthorized(f"Caller {caller} is not the pending owner")
        previous = self._state.owner
        self._state.owner = pending
        self._state.pending_owner = None
        logger.info("Ownership transferred: %s -> %s", previous, pending)
        self._events.emit(
            "OwnershipTransferred",
            previous_owner=previous, new_owner=pending,
        )

    def renounce(self, caller: str) -> None:
        """Always fails: the administrator role cannot be left empty."""
        raise Unsupported("Renouncing ownership is not supported")
