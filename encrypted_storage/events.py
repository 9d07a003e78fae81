"""Audit event log with synchronous listeners."""
import logging
from collections.abc import Callable
from typing import Any

from .models import Event
from .state import VaultState

logger = logging.getLogger("encrypted_storage")

Listener = Callable[[Event], None]


class EventLog:
    """Appends events to the state and notifies listeners.

    Components call ``emit`` only after their mutation is committed, so
    listeners always observe the post-operation state. A failing listener
    is logged and never changes the outcome of the operation.
    """

    def __init__(self, state: VaultState, clock: Callable[[], int]):
        self._state = state
        self._clock = clock
        self._listeners: list[Listener] = []

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        self._listeners.remove(listener)

    def emit(self, name: str, **args: Any) -> Event:
        event = Event(name=name, args=args, timestamp=self._clock())
        self._state.events.append(event)
        logger.debug("Event %s: %s", name, args)
        for listener in list(self._listeners):
            try:
                listener(event.model_copy(deep=True))
            except Exception:
                logger.exception(
                    "Listener %r failed on event %s", listener, name,
                )
        return event

    def __iter__(self):
        # copies keep the stored audit trail read-only for callers
        return iter([event.model_copy(deep=True) for event in self._state.events])

    def __len__(self) -> int:
        return len(self._state.events)
