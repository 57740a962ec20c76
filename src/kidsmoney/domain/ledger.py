"""Ledger writer: turn account changes into persisted balances and records.

Every write goes through ``Database.update_account`` so the balance change
and the transaction that explains it are committed together. Optimistic
version conflicts are retried from a fresh read, which makes a second
writer see the already-advanced accrual clock instead of posting the same
days twice.
"""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from kidsmoney.domain.accrual import AccrualPlan, plan_accrual
from kidsmoney.domain.entities import (
    Account,
    AccrualEvent,
    Transaction,
    require_aware,
)
from kidsmoney.domain.errors import ConflictError

if TYPE_CHECKING:
    from kidsmoney.database.base import AccountMutator, Database

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 3


class LedgerWriter:
    """Applies accruals and manual actions to the store atomically."""

    def __init__(self, db: Database, max_attempts: int = DEFAULT_MAX_ATTEMPTS):
        """Initialize ledger writer.

        Args:
            db: Database instance
            max_attempts: Attempts per write when the account version conflicts
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.db = db
        self.max_attempts = max_attempts

    def update(self, account_id: int, mutator: AccountMutator) -> tuple[Account, list[Transaction]]:
        """Run ``mutator`` against the stored account, retrying on conflicts.

        Raises:
            NotFoundError: If the account does not exist
            ConflictError: If every attempt conflicted
            StoreUnavailableError: If the store failed; nothing was written
        """
        for attempt in range(1, self.max_attempts + 1):
            try:
                return self.db.update_account(account_id, mutator)
            except ConflictError:
                if attempt == self.max_attempts:
                    raise
                logger.info(
                    "Account %s changed during update, retrying (attempt %d of %d)",
                    account_id, attempt + 1, self.max_attempts,
                )
        raise AssertionError("unreachable")

    def accrue_account(
        self, account_id: int, now: datetime
    ) -> tuple[AccrualPlan, Account, list[Transaction]]:
        """Plan and post the interest owed to one account.

        The plan is computed from the state read inside the store update,
        never from a copy read earlier.

        Returns:
            Tuple of (plan that was applied, stored account, interest transactions)
        """
        require_aware(now)
        applied: dict[str, AccrualPlan] = {}

        def mutator(account: Account):
            plan = plan_accrual(account, now)
            applied["plan"] = plan
            if plan.is_noop:
                return None
            return account.apply_accrual(plan.events, now)

        account, transactions = self.update(account_id, mutator)
        plan = applied["plan"]
        if not plan.is_noop:
            logger.debug(
                "Account %s accrued %s over %d day(s) in %d posting(s)",
                account_id, plan.total, plan.days_passed, len(transactions),
            )
        return plan, account, transactions

    def apply_accrual_event(self, event: AccrualEvent, now: datetime) -> tuple[Account, Transaction]:
        """Post a single interest event without moving the accrual clock."""
        require_aware(now)
        account, transactions = self.update(
            event.account_id,
            lambda account: account.apply_accrual([event], now, advance_clock=False),
        )
        return account, transactions[0]

    def apply_manual_transaction(
        self,
        account_id: int,
        category: str,
        direction: str,
        amount: Decimal,
        now: datetime,
        description: Optional[str] = None,
    ) -> tuple[Account, Transaction]:
        """Add to or subtract from a balance, recording the transaction."""
        account, transactions = self.update(
            account_id,
            lambda account: account.apply_manual_transaction(
                category, direction, amount, now, description=description
            ),
        )
        return account, transactions[0]

    def set_balance(
        self, account_id: int, category: str, amount: Decimal, now: datetime
    ) -> tuple[Account, Optional[Transaction]]:
        """Overwrite a balance; the difference is recorded as an adjustment."""
        account, transactions = self.update(
            account_id, lambda account: account.set_balance(category, amount, now)
        )
        return account, transactions[0] if transactions else None
