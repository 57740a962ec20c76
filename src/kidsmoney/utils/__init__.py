"""Utility functions for kidsmoney."""

from kidsmoney.utils.date_parser import parse_date, parse_instant
from kidsmoney.utils.amount_parser import parse_amount
from kidsmoney.utils.account_resolver import resolve_account

__all__ = ["parse_date", "parse_instant", "parse_amount", "resolve_account"]
