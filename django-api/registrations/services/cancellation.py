"""Refund computation for cancelled registrations."""

from collections.abc import Callable
from datetime import datetime, timedelta
from decimal import Decimal

from django.utils import timezone

from registrations.domain import CancellationPolicy, Event, Money, RefundDecision, Registration

DEFAULT_POLICY_REASON = "full refund - default policy"


class CancellationPolicyEvaluator:
    """Computes (refund amount, reason) without touching registration state.

    Bands are evaluated top-down and the first match wins:

    * days until start >= full_refund_deadline_days: total minus fee
    * days until start >= partial_refund_deadline_days: (total minus fee) * percentage
    * anything closer: nothing
    """

    def __init__(self, clock: Callable[[], datetime] = timezone.now) -> None:
        self._clock = clock

    def evaluate(
        self,
        registration: Registration,
        event: Event,
        policy: CancellationPolicy | None,
        now: datetime | None = None,
    ) -> RefundDecision:
        total = registration.total_amount.amount
        if policy is None:
            return RefundDecision(amount=Money.of(total), reason=DEFAULT_POLICY_REASON)

        now = now or self._clock()
        days_until_event = (event.start_date - now) / timedelta(days=1)
        fee = policy.cancellation_fee.amount if policy.cancellation_fee else Decimal("0")

        if days_until_event >= policy.full_refund_deadline_days:
            refund = total - fee
            reason = "full refund - cancelled well in advance"
        elif days_until_event >= policy.partial_refund_deadline_days:
            refund = (total - fee) * (Decimal(policy.partial_refund_percentage) / Decimal(100))
            reason = f"partial refund - {policy.partial_refund_percentage}% refund"
        elif days_until_event >= policy.no_refund_after_days:
            refund = Decimal("0")
            reason = "no refund - too close to event date"
        else:
            refund = Decimal("0")
            reason = "no refund - past no-refund deadline"

        return RefundDecision(amount=Money.of(refund), reason=reason)
