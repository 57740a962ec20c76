"""Accrual scheduling: decide what interest an account is owed.

Planning is pure. It looks at an account and the current instant and
returns the interest events for every whole day elapsed since the
account's last accrual. Applying the plan (and persisting it) is the
ledger writer's job.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal

from kidsmoney.domain.entities import Account, AccrualEvent, require_aware
from kidsmoney.domain.interest import accrued_interest
from kidsmoney.domain.rates import INTEREST_BEARING

logger = logging.getLogger(__name__)

MATERIALITY_FLOOR = Decimal("0.01")
ONE_DAY = timedelta(days=1)


@dataclass(frozen=True)
class AccrualPlan:
    """Interest an account should receive for the days elapsed so far."""

    account_id: int
    days_passed: int
    events: tuple[AccrualEvent, ...] = ()

    @property
    def is_noop(self) -> bool:
        """True when less than one whole day has elapsed."""
        return self.days_passed < 1

    @property
    def total(self) -> Decimal:
        return sum((event.amount for event in self.events), Decimal("0.00"))


def elapsed_days(last_accrual_at: datetime, now: datetime) -> int:
    """Whole days between the last accrual and ``now``.

    A clock that reads earlier than the last accrual counts as zero days.
    """
    require_aware(last_accrual_at, "last_accrual_at")
    require_aware(now)
    if now <= last_accrual_at:
        return 0
    return (now - last_accrual_at) // ONE_DAY


def plan_accrual(account: Account, now: datetime) -> AccrualPlan:
    """Work out the interest events owed to an account at ``now``.

    Cash never accrues. Savings and investments accrue on positive
    balances, compounding daily over the whole elapsed window, and only
    amounts of at least one cent are posted.
    """
    days_passed = elapsed_days(account.last_accrual_at, now)
    if days_passed < 1:
        return AccrualPlan(account_id=account.id, days_passed=0)

    events = []
    for category in INTEREST_BEARING:
        balance = account.balance(category)
        if balance <= 0:
            continue
        interest = accrued_interest(balance, account.effective_rate(category), days_passed)
        if interest < MATERIALITY_FLOOR:
            logger.debug(
                "Account %s %s interest %s below floor for %d day(s)",
                account.id, category, interest, days_passed,
            )
            continue
        events.append(
            AccrualEvent(
                account_id=account.id,
                category=category,
                amount=interest,
                days_passed=days_passed,
            )
        )

    return AccrualPlan(account_id=account.id, days_passed=days_passed, events=tuple(events))
