"""Domain model entities for kidsmoney.

These are pure data classes representing business concepts, independent of
database schema. The account is an immutable, versioned aggregate: every
change goes through one of its mutation methods, which return the new
account together with the ledger records the change produces. The store
persists both in a single unit of work.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, date, UTC
from decimal import Decimal
from typing import Optional, Sequence

from kidsmoney.domain.errors import (
    PreconditionError,
    ValidationError,
    insufficient_balance,
)
from kidsmoney.domain.interest import ZERO, to_cents
from kidsmoney.domain.rates import (
    CATEGORIES,
    INTEREST_BEARING,
    annual_rate_for,
    validate_category,
    validate_rate,
)

CREDIT = "credit"
DEBIT = "debit"
DIRECTIONS = (CREDIT, DEBIT)


def utcnow() -> datetime:
    """Current instant in UTC."""
    return datetime.now(UTC)


def require_aware(instant: datetime, name: str = "now") -> datetime:
    """Reject naive datetimes; all instants are compared in UTC."""
    if instant.tzinfo is None or instant.utcoffset() is None:
        raise PreconditionError(f"'{name}' must be timezone-aware, got {instant!r}")
    return instant


def zero_balances() -> dict[str, Decimal]:
    """Return a fresh balance mapping with every category at zero."""
    return {category: ZERO for category in CATEGORIES}


@dataclass(frozen=True)
class NewTransaction:
    """Ledger record that has not been assigned an ID yet."""

    account_id: int
    amount: Decimal
    direction: str
    category: str
    occurred_at: Optional[datetime] = None
    is_interest: bool = False
    description: Optional[str] = None

    def __post_init__(self):
        if self.amount <= 0:
            raise ValidationError(f"Transaction amount must be positive, got {self.amount}")
        if self.direction not in DIRECTIONS:
            raise ValidationError(f"Unknown direction '{self.direction}'")
        validate_category(self.category)


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity.

    ``amount`` is always positive; the sign lives in ``direction``.
    """

    id: int
    account_id: int
    occurred_at: datetime
    amount: Decimal
    direction: str
    category: str
    is_interest: bool = False
    description: Optional[str] = None

    @property
    def signed_amount(self) -> Decimal:
        return self.amount if self.direction == CREDIT else -self.amount

    @property
    def day(self) -> date:
        return self.occurred_at.date()


@dataclass(frozen=True)
class AccountMutation:
    """Result of applying a change to an account."""

    account: "Account"
    transactions: tuple[NewTransaction, ...] = ()


@dataclass(frozen=True)
class Account:
    """Child savings account aggregate."""

    id: int
    name: str
    last_accrual_at: datetime
    created_at: datetime
    balances: dict[str, Decimal] = field(default_factory=zero_balances)
    rate_overrides: dict[str, Decimal] = field(default_factory=dict)
    version: int = 1

    def balance(self, category: str) -> Decimal:
        """Return the balance held in a category."""
        return self.balances.get(validate_category(category), ZERO)

    @property
    def total(self) -> Decimal:
        return sum(self.balances.values(), ZERO)

    def effective_rate(self, category: str) -> Decimal:
        """Annual rate for a category, honoring this account's override."""
        category = validate_category(category)
        return annual_rate_for(category, self.rate_overrides.get(category))

    def _evolve(self, **changes) -> "Account":
        return replace(self, version=self.version + 1, **changes)

    def _with_balance(self, category: str, amount: Decimal) -> dict[str, Decimal]:
        balances = dict(self.balances)
        balances[category] = to_cents(amount)
        return balances

    def renamed(self, name: str) -> "Account":
        name = name.strip()
        if not name:
            raise ValidationError("Account name must not be empty")
        return self._evolve(name=name)

    def with_rate(self, category: str, rate: Optional[Decimal]) -> "Account":
        """Set or clear (``rate=None``) the rate override for a category."""
        category = validate_category(category)
        overrides = dict(self.rate_overrides)
        if rate is None:
            overrides.pop(category, None)
        else:
            overrides[category] = validate_rate(category, rate)
        return self._evolve(rate_overrides=overrides)

    def apply_manual_transaction(
        self,
        category: str,
        direction: str,
        amount: Decimal,
        now: datetime,
        description: Optional[str] = None,
    ) -> AccountMutation:
        """Add money to or subtract money from one balance.

        Raises:
            ValidationError: If amount is not positive or a debit exceeds
                the current balance
        """
        category = validate_category(category)
        require_aware(now)
        amount = to_cents(amount)
        if amount <= 0:
            raise ValidationError(f"Amount must be positive, got {amount}")

        current = self.balance(category)
        if direction == DEBIT:
            if amount > current:
                raise ValidationError(insufficient_balance(category, current, amount))
            new_balance = current - amount
        elif direction == CREDIT:
            new_balance = current + amount
        else:
            raise ValidationError(f"Unknown direction '{direction}'")

        txn = NewTransaction(
            account_id=self.id,
            amount=amount,
            direction=direction,
            category=category,
            occurred_at=now,
            description=description,
        )
        return AccountMutation(
            account=self._evolve(balances=self._with_balance(category, new_balance)),
            transactions=(txn,),
        )

    def set_balance(self, category: str, amount: Decimal, now: datetime) -> AccountMutation:
        """Overwrite a balance, recording the difference as an adjustment."""
        category = validate_category(category)
        require_aware(now)
        amount = to_cents(amount)
        if amount < 0:
            raise ValidationError(f"Balance must not be negative, got {amount}")

        delta = amount - self.balance(category)
        if delta == 0:
            return AccountMutation(account=self)

        txn = NewTransaction(
            account_id=self.id,
            amount=abs(delta),
            direction=CREDIT if delta > 0 else DEBIT,
            category=category,
            occurred_at=now,
            description="Balance adjustment",
        )
        return AccountMutation(
            account=self._evolve(balances=self._with_balance(category, amount)),
            transactions=(txn,),
        )

    def apply_accrual(
        self,
        events: Sequence["AccrualEvent"],
        now: datetime,
        advance_clock: bool = True,
    ) -> AccountMutation:
        """Post interest events and advance the accrual clock to ``now``.

        The clock advances even when ``events`` is empty so the same days
        are never evaluated twice.
        """
        require_aware(now)
        if advance_clock and now < self.last_accrual_at:
            raise PreconditionError(
                f"Accrual clock for account {self.id} cannot move backwards "
                f"({self.last_accrual_at.isoformat()} -> {now.isoformat()})"
            )

        balances = dict(self.balances)
        transactions = []
        for event in events:
            if event.account_id != self.id:
                raise PreconditionError(
                    f"Accrual event for account {event.account_id} applied to account {self.id}"
                )
            if event.category not in INTEREST_BEARING:
                raise PreconditionError(f"Category '{event.category}' does not accrue interest")
            balances[event.category] = to_cents(balances[event.category] + event.amount)
            transactions.append(
                NewTransaction(
                    account_id=self.id,
                    amount=event.amount,
                    direction=CREDIT,
                    category=event.category,
                    occurred_at=now,
                    is_interest=True,
                    description=f"Interest for {event.days_passed} day{'s' if event.days_passed != 1 else ''}",
                )
            )

        changes = {"balances": balances}
        if advance_clock:
            changes["last_accrual_at"] = now
        return AccountMutation(account=self._evolve(**changes), transactions=tuple(transactions))


@dataclass(frozen=True)
class AccrualEvent:
    """Material interest to post for one category of one account."""

    account_id: int
    category: str
    amount: Decimal
    days_passed: int


@dataclass(frozen=True)
class DailyActivity:
    """Money added, withdrawn and earned as interest on one calendar day."""

    day: date
    added: Decimal = ZERO
    withdrawn: Decimal = ZERO
    interest: Decimal = ZERO
