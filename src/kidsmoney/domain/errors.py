"""Shared domain error messages and error types."""

from decimal import Decimal


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """

    retryable = False


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations or a stale account version."""

    retryable = True


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data."""


class PreconditionError(DomainError):
    """A caller broke the contract of a calculation (negative rate, naive instant, ...)."""


class StoreUnavailableError(DomainError):
    """The account store or ledger could not complete a read or write.

    Nothing was persisted when this is raised; the operation may be retried.
    """

    retryable = True


def account_not_found(account_id: int) -> str:
    """Return message for missing account."""
    return f"Account {account_id} not found"


def account_name_taken(name: str) -> str:
    """Return message for a duplicate account name."""
    return f"Account with name '{name}' already exists"


def unknown_category(category: str) -> str:
    """Return message for a category outside cash/savings/investments."""
    return f"Unknown category '{category}'. Expected one of: cash, savings, investments"


def insufficient_balance(category: str, balance: Decimal, amount: Decimal) -> str:
    """Return message when a debit would take a balance below zero."""
    return f"Cannot subtract {amount:.2f} from {category}: balance is only {balance:.2f}"


def account_delete_blocked(account_id: int, transaction_count: int) -> str:
    """Return message when account still has ledger history."""
    return (
        f"Cannot delete account {account_id}: it has {transaction_count} "
        f"transaction{'s' if transaction_count != 1 else ''}. "
        "Use --force to delete the account together with its history."
    )
