"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic. The domain keeps balances and
rate overrides in per-category mappings; the schema spreads them over one
column per category.
"""

from decimal import Decimal

from kidsmoney.domain import entities as domain
from kidsmoney.domain.rates import CATEGORIES, INTEREST_BEARING
from kidsmoney.database.models import (
    Account as ORMAccount,
    Transaction as ORMTransaction,
)


def _balance_column(category: str) -> str:
    return f"{category}_balance"


def _rate_column(category: str) -> str:
    return f"{category}_rate"


def _money(value) -> Decimal:
    return Decimal(value if value is not None else 0).quantize(Decimal("0.01"))


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    balances = {
        category: _money(getattr(orm_account, _balance_column(category)))
        for category in CATEGORIES
    }
    overrides = {}
    for category in INTEREST_BEARING:
        rate = getattr(orm_account, _rate_column(category))
        if rate is not None:
            overrides[category] = Decimal(rate)
    return domain.Account(
        id=orm_account.id,
        name=orm_account.name,
        last_accrual_at=orm_account.last_accrual_at,
        created_at=orm_account.created_at,
        balances=balances,
        rate_overrides=overrides,
        version=orm_account.version,
    )


def apply_account_to_orm(account: domain.Account, orm_account: ORMAccount) -> None:
    """Copy mutable domain Account state onto an existing ORM row.

    ``id``, ``created_at`` and ``version`` are owned by the database.
    """
    orm_account.name = account.name
    for category in CATEGORIES:
        setattr(orm_account, _balance_column(category), account.balance(category))
    for category in INTEREST_BEARING:
        setattr(orm_account, _rate_column(category), account.rate_overrides.get(category))
    orm_account.last_accrual_at = account.last_accrual_at


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        account_id=orm_transaction.account_id,
        occurred_at=orm_transaction.occurred_at,
        amount=_money(orm_transaction.amount),
        direction=orm_transaction.direction,
        category=orm_transaction.category,
        is_interest=bool(orm_transaction.is_interest),
        description=orm_transaction.description,
    )


def new_transaction_to_orm(transaction: domain.NewTransaction) -> ORMTransaction:
    """Build an ORM Transaction row from a domain NewTransaction."""
    return ORMTransaction(
        account_id=transaction.account_id,
        occurred_at=transaction.occurred_at,
        amount=transaction.amount,
        direction=transaction.direction,
        category=transaction.category,
        is_interest=transaction.is_interest,
        description=transaction.description,
    )
