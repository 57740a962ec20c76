"""Abstract database interface.

A ``Database`` is both the account store and the transaction ledger.
``update_account`` is the only way account state changes after creation:
it reads the account, hands it to a mutator and persists the resulting
account and transactions as one unit of work.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Callable, Optional

# Import entities directly to avoid circular import through domain/__init__.py
from kidsmoney.domain.entities import (
    Account,
    AccountMutation,
    NewTransaction,
    Transaction,
)

AccountMutator = Callable[[Account], Optional[AccountMutation]]


class Database(ABC):
    """Abstract database interface for kidsmoney."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Account store
    @abstractmethod
    def create_account(self, name: str, now: datetime) -> int:
        """Create an account with zero balances. Returns account ID."""
        pass

    @abstractmethod
    def get_account(self, account_id: int) -> Optional[Account]:
        """Get account by ID."""
        pass

    @abstractmethod
    def get_account_by_name(self, name: str) -> Optional[Account]:
        """Get account by name."""
        pass

    @abstractmethod
    def list_accounts(self) -> list[Account]:
        """List all accounts."""
        pass

    @abstractmethod
    def update_account(
        self, account_id: int, mutator: AccountMutator
    ) -> tuple[Account, list[Transaction]]:
        """Atomically read, mutate and write an account.

        ``mutator`` receives the current account and returns an
        ``AccountMutation`` (or None for no change). The new account state
        and every transaction in the mutation are committed together, or
        not at all.

        Returns:
            Tuple of (stored account, appended transactions)

        Raises:
            NotFoundError: If the account does not exist
            ConflictError: If the account changed underneath the update
            StoreUnavailableError: If the write failed; nothing was stored
        """
        pass

    @abstractmethod
    def delete_account(self, account_id: int) -> None:
        """Delete an account and its ledger history."""
        pass

    # Transaction ledger
    @abstractmethod
    def append_transaction(self, transaction: NewTransaction) -> Transaction:
        """Append a transaction that has no balance effect of its own.

        Assigns the ID, and ``occurred_at`` when it is missing.
        """
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def query_transactions(
        self,
        account_id: Optional[int] = None,
        category: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[Transaction]:
        """Query transactions. Callers must not rely on the order."""
        pass

    @abstractmethod
    def count_transactions(self, account_id: int) -> int:
        """Count transactions recorded for an account."""
        pass
