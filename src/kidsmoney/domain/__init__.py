"""Domain layer for kidsmoney application."""

from kidsmoney.domain.account import AccountService
from kidsmoney.domain.transaction import TransactionService
from kidsmoney.domain.ledger import LedgerWriter
from kidsmoney.domain.engine import AccrualEngine, run_periodically
from kidsmoney.domain.interest import accrued_interest, compute_projections, projected_balance

__all__ = [
    "AccountService",
    "TransactionService",
    "LedgerWriter",
    "AccrualEngine",
    "run_periodically",
    "accrued_interest",
    "compute_projections",
    "projected_balance",
]
