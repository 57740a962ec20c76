"""Tests for the accrual engine."""

import logging
import pytest
from datetime import datetime, timedelta, UTC
from decimal import Decimal

from kidsmoney.database.models import Account
from kidsmoney.domain.engine import (
    ACCRUED,
    FAILED,
    SKIPPED,
    AccrualEngine,
    run_periodically,
)
from kidsmoney.domain.errors import PreconditionError, StoreUnavailableError
from kidsmoney.domain.interest import accrued_interest

T0 = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def two_accounts(account_service):
    """Two accounts with savings, created at T0."""
    emma = account_service.create_account(name="Emma", now=T0)
    noah = account_service.create_account(name="Noah", now=T0)
    account_service.deposit(emma, "savings", Decimal("1000.00"), now=T0)
    account_service.deposit(noah, "savings", Decimal("200.00"), now=T0)
    return emma, noah


class TestRunAccrualPass:
    """Tests for run_accrual_pass."""

    def test_posts_one_event_per_material_balance(self, engine, two_accounts):
        """Test a pass over several accounts."""
        result = engine.run_accrual_pass(T0 + timedelta(days=30))

        assert [r.status for r in result.results] == [ACCRUED, ACCRUED]
        assert len(result.events) == 2
        assert result.events[0].amount == Decimal("3.71")
        assert result.total_interest == sum(e.amount for e in result.events)
        assert result.failed == ()

    def test_second_pass_at_same_instant_changes_nothing(self, engine, temp_db, two_accounts):
        """Test that passes are idempotent for a fixed instant."""
        now = T0 + timedelta(days=30)
        engine.run_accrual_pass(now)
        balances = [acc.balances for acc in temp_db.list_accounts()]

        again = engine.run_accrual_pass(now)

        assert again.events == ()
        assert [r.status for r in again.results] == [SKIPPED, SKIPPED]
        assert [acc.balances for acc in temp_db.list_accounts()] == balances

    def test_catch_up_after_long_gap(self, engine, temp_db, two_accounts):
        """Test that 400 missed days are posted in a single compounded event."""
        emma, _ = two_accounts
        result = engine.run_accrual_pass(T0 + timedelta(days=400))

        emma_events = [e for e in result.events if e.account_id == emma]
        assert len(emma_events) == 1
        assert emma_events[0].days_passed == 400
        assert emma_events[0].amount == accrued_interest(Decimal("1000.00"), Decimal("0.045"), 400)
        assert temp_db.get_account(emma).balance("savings") == Decimal("1050.55")

    def test_catch_up_matches_daily_passes(self, temp_db, account_service):
        """Test that one catch-up pass and daily passes agree within rounding."""
        days = 60
        daily_id = account_service.create_account(name="Daily", now=T0)
        catch_up_id = account_service.create_account(name="CatchUp", now=T0)
        for account_id in (daily_id, catch_up_id):
            account_service.deposit(account_id, "investments", Decimal("1000.00"), now=T0)

        engine = AccrualEngine(temp_db)
        for day in range(1, days + 1):
            engine.accrue_account(daily_id, T0 + timedelta(days=day))
        engine.accrue_account(catch_up_id, T0 + timedelta(days=days))

        daily = temp_db.get_account(daily_id).balance("investments")
        catch_up = temp_db.get_account(catch_up_id).balance("investments")
        assert abs(daily - catch_up) <= Decimal("0.005") * days

    def test_half_day_pass_posts_nothing(self, engine, temp_db, two_accounts):
        """Test that less than one elapsed day is a no-op."""
        emma, _ = two_accounts
        result = engine.run_accrual_pass(T0 + timedelta(hours=12))

        assert result.events == ()
        assert temp_db.get_account(emma).last_accrual_at == T0

    def test_clock_behind_last_accrual(self, engine, temp_db, two_accounts):
        """Test that a clock reading in the past is a no-op, not an error."""
        emma, _ = two_accounts
        result = engine.run_accrual_pass(T0 - timedelta(days=2))

        assert result.events == ()
        assert result.failed == ()
        assert temp_db.get_account(emma).last_accrual_at == T0

    def test_cash_only_account_never_accrues(self, engine, account_service, temp_db):
        """Test that cash balances never receive interest."""
        account_id = account_service.create_account(name="Piggy", now=T0)
        account_service.deposit(account_id, "cash", Decimal("500.00"), now=T0)

        result = engine.run_accrual_pass(T0 + timedelta(days=365))

        assert result.events == ()
        assert temp_db.get_account(account_id).balance("cash") == Decimal("500.00")
        assert temp_db.get_account(account_id).last_accrual_at == T0 + timedelta(days=365)

    def test_naive_now_rejected(self, engine):
        """Test that the evaluation instant must be timezone-aware."""
        with pytest.raises(PreconditionError):
            engine.run_accrual_pass(datetime(2024, 2, 1))

    def test_failing_account_is_isolated(self, engine, temp_db, two_accounts, monkeypatch):
        """Test that one account's store failure does not affect the others."""
        emma, noah = two_accounts
        original = temp_db.update_account

        def failing_for_noah(account_id, mutator):
            if account_id == noah:
                raise StoreUnavailableError(f"Could not update account {account_id}: disk full")
            return original(account_id, mutator)

        monkeypatch.setattr(temp_db, "update_account", failing_for_noah)
        now = T0 + timedelta(days=30)

        result = engine.run_accrual_pass(now)

        assert [r.account_id for r in result.accrued] == [emma]
        (failure,) = result.failed
        assert failure.account_id == noah
        assert failure.retryable
        assert "disk full" in failure.error
        assert temp_db.get_account(noah).last_accrual_at == T0

        # The next pass retries the whole window
        monkeypatch.setattr(temp_db, "update_account", original)
        retry = engine.run_accrual_pass(now)
        (event,) = retry.events
        assert event.account_id == noah
        assert event.days_passed == 30

    def test_deleted_account_is_reported(self, engine, temp_db, two_accounts, monkeypatch):
        """Test that an account deleted mid-pass is reported, not raised."""
        emma, noah = two_accounts
        original_list = temp_db.list_accounts

        def list_then_delete():
            accounts = original_list()
            temp_db.delete_account(noah)
            return accounts

        monkeypatch.setattr(temp_db, "list_accounts", list_then_delete)

        result = engine.run_accrual_pass(T0 + timedelta(days=1))

        (failure,) = result.failed
        assert failure.account_id == noah
        assert not failure.retryable
        assert result.results[0].ok
        assert noah not in engine._account_locks

    def test_invalid_stored_rate_does_not_stop_pass(self, engine, temp_db, two_accounts):
        """Test that an account with a corrupt rate fails alone."""
        emma, noah = two_accounts
        with temp_db._session_scope() as session:
            session.query(Account).filter_by(id=emma).update({"savings_rate": Decimal("1.5")})

        now = T0 + timedelta(days=30)
        result = engine.run_accrual_pass(now)

        (failure,) = result.failed
        assert failure.account_id == emma
        assert "between 0% and 100%" in failure.error
        assert not failure.retryable
        (event,) = result.events
        assert event.account_id == noah
        assert temp_db.get_account(noah).last_accrual_at == now
        assert temp_db.get_account(emma).last_accrual_at == T0

    def test_unexpected_error_does_not_stop_pass(self, engine, two_accounts, monkeypatch, caplog):
        """Test that a non-domain error is logged and reported per account."""
        emma, noah = two_accounts
        original = engine.writer.accrue_account

        def exploding(account_id, now):
            if account_id == emma:
                raise RuntimeError("boom")
            return original(account_id, now)

        monkeypatch.setattr(engine.writer, "accrue_account", exploding)

        with caplog.at_level(logging.ERROR, logger="kidsmoney"):
            result = engine.run_accrual_pass(T0 + timedelta(days=30))

        (failure,) = result.failed
        assert failure.account_id == emma
        assert failure.error == "boom"
        assert [r.status for r in result.results] == [FAILED, ACCRUED]
        assert "Unexpected error while accruing account" in caplog.text

    def test_naive_now_for_single_account(self, engine, two_accounts):
        """Test that accruing one account still requires an aware instant."""
        emma, _ = two_accounts
        with pytest.raises(PreconditionError):
            engine.accrue_account(emma, datetime(2024, 2, 1))

    def test_unreadable_account_list_propagates(self, engine, temp_db, monkeypatch):
        """Test that a pass which cannot list accounts fails as a whole."""

        def broken():
            raise StoreUnavailableError("Could not list accounts: database is locked")

        monkeypatch.setattr(temp_db, "list_accounts", broken)

        with pytest.raises(StoreUnavailableError):
            engine.run_accrual_pass(T0)

    def test_logs_postings(self, engine, two_accounts, caplog):
        """Test that postings are logged at INFO."""
        with caplog.at_level(logging.INFO, logger="kidsmoney"):
            engine.run_accrual_pass(T0 + timedelta(days=30))

        assert "Posted 3.71 savings interest to account Emma" in caplog.text
        assert "Accrual pass at" in caplog.text

    def test_projections_have_no_side_effects(self, engine, temp_db, two_accounts):
        """Test that projecting never touches the store."""
        emma, _ = two_accounts
        before = temp_db.get_account(emma)

        projections = engine.projections(Decimal("1000.00"), "savings", (30,))

        assert projections[30] > Decimal("1003.70")
        assert temp_db.get_account(emma) == before


class TestRunPeriodically:
    """Tests for the periodic runner."""

    def test_runs_requested_number_of_passes(self, engine, temp_db, two_accounts):
        """Test that passes happen once per interval on the injected clock."""
        ticks = iter([T0 + timedelta(days=day) for day in (1, 2, 3)])
        sleeps = []
        results = []

        passes = run_periodically(
            engine,
            timedelta(days=1),
            clock=lambda: next(ticks),
            sleep=sleeps.append,
            max_passes=3,
            on_result=results.append,
        )

        assert passes == 3
        assert sleeps == [86400.0, 86400.0]
        assert [len(r.events) for r in results] == [2, 2, 2]
        emma, _ = two_accounts
        assert temp_db.get_account(emma).last_accrual_at == T0 + timedelta(days=3)

    def test_store_outage_is_retried_next_tick(self):
        """Test that an unreadable store skips the tick instead of stopping."""

        class OutageEngine:
            calls = 0

            def run_accrual_pass(self, now):
                self.calls += 1
                if self.calls == 1:
                    raise StoreUnavailableError("database is locked")
                return "ok"

        fake = OutageEngine()
        results = []

        passes = run_periodically(
            fake,
            timedelta(hours=1),
            clock=lambda: T0,
            sleep=lambda seconds: None,
            max_passes=2,
            on_result=results.append,
        )

        assert passes == 2
        assert results == ["ok"]

    def test_interval_must_be_positive(self, engine):
        """Test that a zero interval is rejected."""
        with pytest.raises(ValueError):
            run_periodically(engine, timedelta(0), max_passes=1)
