"""Transaction domain service."""

from __future__ import annotations

from datetime import UTC, date, datetime, time, timedelta
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from kidsmoney.domain.entities import (
    CREDIT,
    DailyActivity,
    Transaction as TransactionEntity,
)
from kidsmoney.domain.errors import NotFoundError, account_not_found
from kidsmoney.domain.rates import validate_category

if TYPE_CHECKING:
    from kidsmoney.database.base import Database


def _day_start(day: date, tz) -> datetime:
    return datetime.combine(day, time.min, tzinfo=tz)


class TransactionService:
    """Read-side service for the transaction ledger."""

    def __init__(self, db: Database):
        """Initialize transaction service.

        Args:
            db: Database instance
        """
        self.db = db

    def get_transaction(self, transaction_id: int) -> Optional[TransactionEntity]:
        """Get transaction by ID.

        Args:
            transaction_id: Transaction ID

        Returns:
            Transaction entity or None if not found
        """
        return self.db.get_transaction(transaction_id)

    def list_transactions(
        self,
        account_id: Optional[int] = None,
        category: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        interest_only: bool = False,
        tz=None,
    ) -> list[TransactionEntity]:
        """List transactions, newest first.

        Args:
            account_id: Optional account filter
            category: Optional category filter (cash, savings, investments)
            start_date: Optional first day to include
            end_date: Optional last day to include
            interest_only: Only return interest postings
            tz: Timezone the date bounds refer to (UTC when omitted)

        Returns:
            List of transaction entities

        Raises:
            NotFoundError: If account_id is given and does not exist
            ValidationError: If category is unknown
        """
        tz = tz or UTC
        if account_id is not None and self.db.get_account(account_id) is None:
            raise NotFoundError(account_not_found(account_id))
        if category is not None:
            category = validate_category(category)

        start = _day_start(start_date, tz) if start_date is not None else None
        # Inclusive end date: everything before the following midnight.
        end = _day_start(end_date + timedelta(days=1), tz) if end_date is not None else None

        transactions = self.db.query_transactions(
            account_id=account_id, category=category, start=start, end=end
        )
        if interest_only:
            transactions = [t for t in transactions if t.is_interest]
        return sorted(transactions, key=lambda t: (t.occurred_at, t.id), reverse=True)

    def daily_history(
        self,
        account_id: int,
        category: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        tz=None,
    ) -> list[DailyActivity]:
        """Aggregate an account's transactions per calendar day.

        Credits tagged as interest are reported separately from money
        added by hand. Days are returned most recent first.
        """
        transactions = self.list_transactions(
            account_id=account_id,
            category=category,
            start_date=start_date,
            end_date=end_date,
            tz=tz,
        )

        totals: dict[date, dict[str, Decimal]] = {}
        for txn in transactions:
            day = txn.occurred_at.astimezone(tz).date() if tz is not None else txn.day
            bucket = totals.setdefault(
                day, {"added": Decimal("0.00"), "withdrawn": Decimal("0.00"), "interest": Decimal("0.00")}
            )
            if txn.is_interest:
                bucket["interest"] += txn.amount
            elif txn.direction == CREDIT:
                bucket["added"] += txn.amount
            else:
                bucket["withdrawn"] += txn.amount

        return [DailyActivity(day=day, **totals[day]) for day in sorted(totals, reverse=True)]
