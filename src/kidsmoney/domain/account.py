"""Account domain service."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Callable, Iterable, Optional

from kidsmoney.domain.entities import (
    CREDIT,
    DEBIT,
    Account as AccountEntity,
    AccountMutation,
    Transaction as TransactionEntity,
    require_aware,
    utcnow,
)
from kidsmoney.domain.errors import (
    ConflictError,
    DependencyError,
    NotFoundError,
    ValidationError,
    account_delete_blocked,
    account_name_taken,
    account_not_found,
)
from kidsmoney.domain.interest import DEFAULT_HORIZONS, compute_projections
from kidsmoney.domain.ledger import LedgerWriter

if TYPE_CHECKING:
    from kidsmoney.database.base import Database


class AccountService:
    """Service for managing accounts and their balances."""

    def __init__(self, db: Database, clock: Callable[[], datetime] = utcnow):
        """Initialize account service.

        Args:
            db: Database instance
            clock: Source of the current instant for recorded transactions
        """
        self.db = db
        self.clock = clock
        self.writer = LedgerWriter(db)

    def _now(self, now: Optional[datetime]) -> datetime:
        return require_aware(now if now is not None else self.clock())

    def create_account(self, name: str, now: Optional[datetime] = None) -> int:
        """Create a new account with zero balances.

        The accrual clock starts at ``now``.

        Args:
            name: Account name
            now: Creation instant (defaults to the current time)

        Returns:
            Account ID

        Raises:
            ValidationError: If the name is empty
            ConflictError: If account name already exists
        """
        name = name.strip()
        if not name:
            raise ValidationError("Account name must not be empty")
        if self.db.get_account_by_name(name) is not None:
            raise ConflictError(account_name_taken(name))

        return self.db.create_account(name=name, now=self._now(now))

    def get_account(self, account_id: int) -> Optional[AccountEntity]:
        """Get account by ID.

        Args:
            account_id: Account ID

        Returns:
            Account entity or None if not found
        """
        return self.db.get_account(account_id)

    def require_account(self, account_id: int) -> AccountEntity:
        """Get account by ID, raising NotFoundError when it is missing."""
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        return account

    def list_accounts(self) -> list[AccountEntity]:
        """List all accounts.

        Returns:
            List of account entities
        """
        return self.db.list_accounts()

    def rename_account(self, account_id: int, name: str) -> AccountEntity:
        """Rename an account.

        Raises:
            NotFoundError: If account not found
            ConflictError: If another account already has the name
        """
        self.require_account(account_id)

        existing = self.db.get_account_by_name(name.strip())
        if existing is not None and existing.id != account_id:
            raise ConflictError(account_name_taken(name.strip()))

        account, _ = self.writer.update(
            account_id, lambda account: AccountMutation(account=account.renamed(name))
        )
        return account

    def delete_account(self, account_id: int, force: bool = False) -> None:
        """Delete an account.

        Args:
            account_id: Account ID to delete
            force: Delete even when the account has ledger history

        Raises:
            NotFoundError: If account not found
            DependencyError: If account has transactions and force is False
        """
        self.require_account(account_id)

        transaction_count = self.db.count_transactions(account_id)
        if transaction_count > 0 and not force:
            raise DependencyError(account_delete_blocked(account_id, transaction_count))

        self.db.delete_account(account_id)

    def deposit(
        self,
        account_id: int,
        category: str,
        amount: Decimal,
        description: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> TransactionEntity:
        """Add money to one of the account's balances."""
        _, txn = self.writer.apply_manual_transaction(
            account_id, category, CREDIT, amount, self._now(now), description=description
        )
        return txn

    def withdraw(
        self,
        account_id: int,
        category: str,
        amount: Decimal,
        description: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> TransactionEntity:
        """Subtract money from one of the account's balances.

        Raises:
            ValidationError: If the balance is smaller than amount
        """
        _, txn = self.writer.apply_manual_transaction(
            account_id, category, DEBIT, amount, self._now(now), description=description
        )
        return txn

    def set_balance(
        self,
        account_id: int,
        category: str,
        amount: Decimal,
        now: Optional[datetime] = None,
    ) -> Optional[TransactionEntity]:
        """Edit a balance directly.

        Returns:
            The adjustment transaction, or None when the balance was unchanged
        """
        _, txn = self.writer.set_balance(account_id, category, amount, self._now(now))
        return txn

    def set_rate(self, account_id: int, category: str, rate: Optional[Decimal]) -> AccountEntity:
        """Override (or with ``rate=None``, reset) a category's annual rate.

        Args:
            account_id: Account ID
            category: savings or investments
            rate: Annual rate as a fraction between 0 and 1

        Raises:
            ValidationError: If the category does not earn interest or the
                rate is out of range
        """
        account, _ = self.writer.update(
            account_id, lambda account: AccountMutation(account=account.with_rate(category, rate))
        )
        return account

    def clear_rate(self, account_id: int, category: str) -> AccountEntity:
        """Go back to the default rate for a category."""
        return self.set_rate(account_id, category, None)

    def projections(
        self,
        account_id: int,
        category: str,
        horizons: Iterable[int] = DEFAULT_HORIZONS,
    ) -> dict[int, Decimal]:
        """Project one of the account's balances using its effective rate."""
        account = self.require_account(account_id)
        return compute_projections(
            account.balance(category),
            category,
            horizons,
            annual_rate=account.effective_rate(category),
        )
