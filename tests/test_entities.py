"""Tests for domain entities."""

import pytest
from datetime import datetime, timedelta, UTC
from decimal import Decimal

from kidsmoney.domain.entities import (
    CREDIT,
    DEBIT,
    Account,
    AccrualEvent,
    NewTransaction,
    Transaction,
)
from kidsmoney.domain.errors import PreconditionError, ValidationError

T0 = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def account():
    return Account(
        id=1,
        name="Emma",
        last_accrual_at=T0,
        created_at=T0,
        balances={
            "cash": Decimal("20.00"),
            "savings": Decimal("100.00"),
            "investments": Decimal("0.00"),
        },
    )


class TestAccount:
    """Tests for Account entity."""

    def test_account_immutability(self, account):
        """Test that Account entities are immutable."""
        with pytest.raises(Exception):  # dataclass frozen raises FrozenInstanceError
            account.name = "New Name"

    def test_balances_and_total(self, account):
        """Test reading balances."""
        assert account.balance("cash") == Decimal("20.00")
        assert account.balance("Savings") == Decimal("100.00")
        assert account.total == Decimal("120.00")

    def test_effective_rate(self, account):
        """Test default and overridden rates."""
        assert account.effective_rate("savings") == Decimal("0.045")
        assert account.effective_rate("cash") == Decimal("0")
        updated = account.with_rate("savings", Decimal("0.05"))
        assert updated.effective_rate("savings") == Decimal("0.05")
        assert updated.with_rate("savings", None).effective_rate("savings") == Decimal("0.045")

    def test_mutations_bump_version(self, account):
        """Test that every mutation yields a new version."""
        renamed = account.renamed("Emma B.")
        assert renamed.name == "Emma B."
        assert renamed.version == account.version + 1
        assert account.name == "Emma"

    def test_empty_name_rejected(self, account):
        """Test that names must not be blank."""
        with pytest.raises(ValidationError):
            account.renamed("   ")

    def test_credit(self, account):
        """Test adding money."""
        mutation = account.apply_manual_transaction("cash", CREDIT, Decimal("5"), T0, "Allowance")
        assert mutation.account.balance("cash") == Decimal("25.00")
        (txn,) = mutation.transactions
        assert txn.amount == Decimal("5.00")
        assert txn.direction == CREDIT
        assert txn.description == "Allowance"
        assert not txn.is_interest

    def test_debit(self, account):
        """Test subtracting money."""
        mutation = account.apply_manual_transaction("savings", DEBIT, Decimal("40"), T0)
        assert mutation.account.balance("savings") == Decimal("60.00")
        assert mutation.transactions[0].direction == DEBIT

    def test_debit_beyond_balance_rejected(self, account):
        """Test that balances never go negative."""
        with pytest.raises(ValidationError, match="balance is only 20.00"):
            account.apply_manual_transaction("cash", DEBIT, Decimal("20.01"), T0)

    def test_non_positive_amount_rejected(self, account):
        """Test that amounts must be positive."""
        with pytest.raises(ValidationError):
            account.apply_manual_transaction("cash", CREDIT, Decimal("0"), T0)
        with pytest.raises(ValidationError):
            account.apply_manual_transaction("cash", CREDIT, Decimal("0.004"), T0)

    def test_naive_instant_rejected(self, account):
        """Test that transactions need an aware timestamp."""
        with pytest.raises(PreconditionError):
            account.apply_manual_transaction("cash", CREDIT, Decimal("1"), datetime(2024, 1, 1))

    def test_set_balance_records_difference(self, account):
        """Test editing a balance directly."""
        mutation = account.set_balance("cash", Decimal("12.50"), T0)
        assert mutation.account.balance("cash") == Decimal("12.50")
        (txn,) = mutation.transactions
        assert txn.direction == DEBIT
        assert txn.amount == Decimal("7.50")
        assert txn.description == "Balance adjustment"

    def test_set_balance_unchanged(self, account):
        """Test that setting the same balance records nothing."""
        mutation = account.set_balance("cash", Decimal("20"), T0)
        assert mutation.account is account
        assert mutation.transactions == ()

    def test_apply_accrual(self, account):
        """Test posting interest advances the accrual clock."""
        now = T0 + timedelta(days=3)
        event = AccrualEvent(account_id=1, category="savings", amount=Decimal("0.04"), days_passed=3)
        mutation = account.apply_accrual([event], now)

        assert mutation.account.balance("savings") == Decimal("100.04")
        assert mutation.account.last_accrual_at == now
        (txn,) = mutation.transactions
        assert txn.is_interest
        assert txn.direction == CREDIT
        assert txn.description == "Interest for 3 days"

    def test_apply_accrual_without_events_moves_clock(self, account):
        """Test that the clock moves even when nothing is posted."""
        now = T0 + timedelta(days=1)
        mutation = account.apply_accrual([], now)
        assert mutation.account.last_accrual_at == now
        assert mutation.transactions == ()

    def test_apply_accrual_keeps_clock_when_asked(self, account):
        """Test posting a single event without touching the clock."""
        event = AccrualEvent(account_id=1, category="savings", amount=Decimal("0.01"), days_passed=1)
        mutation = account.apply_accrual([event], T0 + timedelta(days=1), advance_clock=False)
        assert mutation.account.last_accrual_at == T0
        assert mutation.transactions[0].description == "Interest for 1 day"

    def test_accrual_clock_never_moves_backwards(self, account):
        """Test that an earlier instant cannot rewind the clock."""
        with pytest.raises(PreconditionError, match="backwards"):
            account.apply_accrual([], T0 - timedelta(days=1))

    def test_accrual_rejects_cash_and_foreign_events(self, account):
        """Test that events must target this account's interest-bearing balances."""
        cash_event = AccrualEvent(account_id=1, category="cash", amount=Decimal("1"), days_passed=1)
        with pytest.raises(PreconditionError):
            account.apply_accrual([cash_event], T0 + timedelta(days=1))
        foreign = AccrualEvent(account_id=2, category="savings", amount=Decimal("1"), days_passed=1)
        with pytest.raises(PreconditionError):
            account.apply_accrual([foreign], T0 + timedelta(days=1))


class TestTransaction:
    """Tests for transaction entities."""

    def test_signed_amount(self):
        """Test that debits read as negative amounts."""
        debit = Transaction(
            id=1,
            account_id=1,
            occurred_at=T0,
            amount=Decimal("3.50"),
            direction=DEBIT,
            category="cash",
        )
        assert debit.signed_amount == Decimal("-3.50")
        assert debit.day == T0.date()

    def test_new_transaction_validation(self):
        """Test that invalid records cannot be built."""
        with pytest.raises(ValidationError):
            NewTransaction(account_id=1, amount=Decimal("-1"), direction=CREDIT, category="cash")
        with pytest.raises(ValidationError):
            NewTransaction(account_id=1, amount=Decimal("1"), direction="sideways", category="cash")
        with pytest.raises(ValidationError):
            NewTransaction(account_id=1, amount=Decimal("1"), direction=CREDIT, category="bonds")
