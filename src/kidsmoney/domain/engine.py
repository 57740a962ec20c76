"""Accrual engine: the entry points the application shell drives.

``run_accrual_pass`` evaluates every account once. It is safe to call as
often as the host likes: a second pass at the same instant finds no whole
day elapsed and changes nothing. A failing account is reported in the pass
result and left untouched so the next pass retries its full window.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal
from typing import TYPE_CHECKING, Callable, Iterable, Optional

from kidsmoney.domain.entities import AccrualEvent, require_aware, utcnow
from kidsmoney.domain.errors import DomainError, NotFoundError
from kidsmoney.domain.interest import DEFAULT_HORIZONS, compute_projections
from kidsmoney.domain.ledger import DEFAULT_MAX_ATTEMPTS, LedgerWriter

if TYPE_CHECKING:
    from kidsmoney.database.base import Database

logger = logging.getLogger(__name__)

ACCRUED = "accrued"
SKIPPED = "skipped"
FAILED = "failed"


@dataclass(frozen=True)
class AccountAccrualResult:
    """Outcome of one account within an accrual pass."""

    account_id: int
    status: str
    days_passed: int = 0
    events: tuple[AccrualEvent, ...] = ()
    error: Optional[str] = None
    retryable: bool = False

    @property
    def ok(self) -> bool:
        return self.status != FAILED


@dataclass(frozen=True)
class AccrualPassResult:
    """Outcome of one accrual pass across all accounts."""

    now: datetime
    results: tuple[AccountAccrualResult, ...] = field(default_factory=tuple)

    @property
    def events(self) -> tuple[AccrualEvent, ...]:
        """Every interest event posted during the pass, in account order."""
        return tuple(event for result in self.results for event in result.events)

    @property
    def accrued(self) -> tuple[AccountAccrualResult, ...]:
        return tuple(r for r in self.results if r.status == ACCRUED)

    @property
    def failed(self) -> tuple[AccountAccrualResult, ...]:
        return tuple(r for r in self.results if r.status == FAILED)

    @property
    def total_interest(self) -> Decimal:
        return sum((event.amount for event in self.events), Decimal("0.00"))


class AccrualEngine:
    """Runs accrual passes against a store.

    Passes never overlap: a second caller waits for the running pass to
    finish. Each account update additionally holds a per-account lock, and
    the store's version check covers writers in other processes.
    """

    def __init__(
        self,
        db: Database,
        writer: Optional[LedgerWriter] = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ):
        """Initialize accrual engine.

        Args:
            db: Database instance
            writer: Ledger writer to post through (built from db if omitted)
            max_attempts: Attempts per account on version conflicts
        """
        self.db = db
        self.writer = writer or LedgerWriter(db, max_attempts=max_attempts)
        self._pass_lock = threading.Lock()
        self._locks_guard = threading.Lock()
        self._account_locks: dict[int, threading.Lock] = {}

    def _account_lock(self, account_id: int) -> threading.Lock:
        with self._locks_guard:
            return self._account_locks.setdefault(account_id, threading.Lock())

    def _forget_account(self, account_id: int) -> None:
        with self._locks_guard:
            self._account_locks.pop(account_id, None)

    def run_accrual_pass(self, now: Optional[datetime] = None) -> AccrualPassResult:
        """Accrue interest for every account up to ``now``.

        Args:
            now: Evaluation instant (timezone-aware); defaults to the current time

        Returns:
            Per-account results; ``.events`` lists every posting made

        Raises:
            StoreUnavailableError: If the account list itself cannot be read
        """
        now = require_aware(now if now is not None else utcnow())
        with self._pass_lock:
            accounts = self.db.list_accounts()
            logger.info("Starting accrual pass at %s for %d account(s)", now.isoformat(), len(accounts))
            results = tuple(self.accrue_account(account.id, now) for account in accounts)

        pass_result = AccrualPassResult(now=now, results=results)
        logger.info(
            "Accrual pass at %s posted %d event(s) totalling %s; %d account(s) failed",
            now.isoformat(), len(pass_result.events), pass_result.total_interest, len(pass_result.failed),
        )
        return pass_result

    def accrue_account(self, account_id: int, now: datetime) -> AccountAccrualResult:
        """Accrue one account, reporting failures instead of raising them.

        Raises:
            PreconditionError: If now is naive
        """
        now = require_aware(now)
        try:
            with self._account_lock(account_id):
                plan, account, _ = self.writer.accrue_account(account_id, now)
        except NotFoundError as e:
            # Deleted between listing and updating.
            logger.info("Account %s disappeared during accrual: %s", account_id, e)
            self._forget_account(account_id)
            return AccountAccrualResult(account_id=account_id, status=FAILED, error=str(e))
        except DomainError as e:
            if e.retryable:
                logger.warning("Accrual failed for account %s, will retry next pass: %s", account_id, e)
            else:
                logger.error("Accrual failed for account %s: %s", account_id, e)
            return AccountAccrualResult(
                account_id=account_id, status=FAILED, error=str(e), retryable=e.retryable
            )
        except Exception as e:
            logger.exception("Unexpected error while accruing account %s", account_id)
            return AccountAccrualResult(
                account_id=account_id, status=FAILED, error=str(e) or type(e).__name__
            )

        if plan.is_noop:
            return AccountAccrualResult(account_id=account_id, status=SKIPPED)

        for event in plan.events:
            logger.info(
                "Posted %s %s interest to account %s (%d day(s))",
                event.amount, event.category, account.name, event.days_passed,
            )
        return AccountAccrualResult(
            account_id=account_id,
            status=ACCRUED,
            days_passed=plan.days_passed,
            events=plan.events,
        )

    def projections(
        self,
        principal: Decimal,
        category: str,
        horizons: Iterable[int] = DEFAULT_HORIZONS,
        annual_rate: Optional[Decimal] = None,
    ) -> dict[int, Decimal]:
        """Projected balances for display; no side effects."""
        return compute_projections(principal, category, horizons, annual_rate)


def run_periodically(
    engine: AccrualEngine,
    interval: timedelta,
    clock: Callable[[], datetime] = utcnow,
    sleep: Optional[Callable[[float], None]] = None,
    max_passes: Optional[int] = None,
    on_result: Optional[Callable[[AccrualPassResult], None]] = None,
) -> int:
    """Run a pass immediately, then one pass per ``interval``.

    A pass that cannot read the store is logged and retried at the next
    tick. Runs forever unless ``max_passes`` is given.

    Returns:
        Number of passes attempted
    """
    if interval <= timedelta(0):
        raise ValueError("interval must be positive")
    sleep = sleep or time.sleep

    passes = 0
    while max_passes is None or passes < max_passes:
        try:
            result = engine.run_accrual_pass(clock())
        except DomainError as e:
            if not e.retryable:
                raise
            logger.warning("Accrual pass failed, retrying in %s: %s", interval, e)
        else:
            if on_result is not None:
                on_result(result)
        passes += 1
        if max_passes is not None and passes >= max_passes:
            break
        sleep(interval.total_seconds())
    return passes
