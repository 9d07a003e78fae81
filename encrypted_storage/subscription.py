"""
Subscription Registry — trial and paid subscriptions gating the vault.

Expiry is evaluated lazily against the injected clock; nothing is swept.
A caller may consume the free trial once ever. Paid subscriptions must
attach exactly the current fee.
"""
import logging
from collections.abc import Callable

from .config import StorageConfig
from .events import EventLog
from .exceptions import (
    AlreadySubscribed,
    Forbidden,
    InvalidArgument,
    InvalidPayment,
    NotSubscribed,
    TrialAlreadyUsed,
)
from .models import Subscription
from .ownership import AccessController
from .state import VaultState

logger = logging.getLogger("encrypted_storage")


class SubscriptionRegistry:
    """Tracks per-caller subscriptions, the fee and the fee pool."""

    def __init__(
        self,
        state: VaultState,
        access: AccessController,
        config: StorageConfig,
        clock: Callable[[], int],
        events: EventLog,
    ):
        self._state = state
        self._access = access
        self._config = config
        self._clock = clock
        self._events = events

    @property
    def fee(self) -> int:
        return self._state.fee

    @property
    def fee_pool(self) -> int:
        return self._state.fee_pool

    def expires_at(self, caller: str) -> int:
        """Return the caller's expiry timestamp, 0 if never subscribed."""
        return self._state.subscription(caller).expires_at

    def is_subscribed(self, caller: str) -> bool:
        return self._state.subscription(caller).is_active(self._clock())

    def require_access(self, caller: str) -> None:
        """Administrator or an active subscriber, otherwise NotSubscribed."""
        if self._access.is_owner(caller):
            return
        if not self.is_subscribed(caller):
            raise NotSubscribed(f"Caller {caller} has no active subscription")

    def subscribe(self, caller: str, payment: int) -> int:
        """Start, or re-establish, the caller's subscription.

        A zero payment from a caller who never used the trial grants the
        trial. Anything else must pay exactly the current fee.

        Args:
            caller: Authenticated caller identity.
            payment: Amount attached to the call, smallest payment unit.

        Returns:
            The new expiry timestamp.

        Raises:
            Forbidden: If the administrator tries to subscribe.
            AlreadySubscribed: Trial requested while active, or a paid
                re-subscribe while active under the ``reject`` policy.
            TrialAlreadyUsed: Zero payment while an active subscriber has
                already consumed the trial.
            InvalidPayment: If payment does not equal the current fee.
        """
        if self._access.is_owner(caller):
            raise Forbidden("Administrator may not subscribe")
        if isinstance(payment, bool) or not isinstance(payment, int) or payment < 0:
            raise InvalidPayment(f"Invalid payment amount: {payment!r}")

        now = self._clock()
        current = self._state.subscription(caller)
        active = current.is_active(now)
        fee = self._state.fee

        if payment == 0 and not current.has_used_trial:
            if active:
                raise AlreadySubscribed(f"Caller {caller} is already subscribed")
            updated = Subscription(
                expires_at=now + self._config.trial_period,
                has_used_trial=True,
            )
            self._state.subscriptions[caller] = updated
            logger.debug("Trial granted: caller=%s expires_at=%d", caller, updated.expires_at)
            self._events.emit(
                "TrialStarted", subscriber=caller, expires_at=updated.expires_at,
            )
            return updated.expires_at

        if payment == 0 and active and fee != 0:
            raise TrialAlreadyUsed(f"Caller {caller} has already used the trial")
        if payment != fee:
            raise InvalidPayment(
                f"Payment {payment} does not match subscription fee {fee}"
            )
        if active:
            if not self._config.extends_active:
                raise AlreadySubscribed(f"Caller {caller} is already subscribed")
            expires_at = current.expires_at + self._config.paid_period
        else:
            expires_at = now + self._config.paid_period

        self._state.subscriptions[caller] = Subscription(
            expires_at=expires_at, has_used_trial=current.has_used_trial,
        )
        self._state.fee_pool += payment
        logger.debug(
            "Subscription paid: caller=%s amount=%d expires_at=%d",
            caller, payment, expires_at,
        )
        self._events.emit(
            "Subscribed", subscriber=caller, amount=payment, expires_at=expires_at,
        )
        return expires_at

    def change_fee(self, caller: str, new_fee: int) -> None:
        """Replace the subscription fee; applies to later subscribe calls only.

        Raises:
            Unauthorized: If caller is not the owner.
            InvalidArgument: If new_fee is not a non-negative integer.
        """
        self._access.require_owner(caller)
        if isinstance(new_fee, bool) or not isinstance(new_fee, int) or new_fee < 0:
            raise InvalidArgument(f"Invalid fee: {new_fee!r}")
        previous = self._state.fee
        self._state.fee = new_fee
        logger.info("Subscription fee changed: %d -> %d", previous, new_fee)
        self._events.emit("FeeChanged", previous_fee=previous, new_fee=new_fee)

    def withdraw_fees(self, caller: str) -> int:
        """Hand the accumulated fee pool to the owner and zero it.

        Returns:
            The withdrawn amount.
        """
        self._access.require_owner(caller)
        amount = self._state.fee_pool
        self._state.fee_pool = 0
        logger.info("Fees withdrawn by %s: %d", caller, amount)
        self._events.emit("FeesWithdrawn", recipient=caller, amount=amount)
        return amount
