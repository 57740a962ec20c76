"""Daily-compounding interest calculations.

All functions here are pure. Interest compounds once per elapsed whole day
at ``annual_rate / 365``. Posted interest is rounded to cents with
ROUND_HALF_UP, which rounds halves away from zero for the non-negative
amounts these functions produce. Projections keep full precision and are
only rounded for display.
"""

from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Iterable, Optional

from kidsmoney.domain.errors import PreconditionError
from kidsmoney.domain.rates import annual_rate_for

DAYS_PER_YEAR = Decimal("365")
CENT = Decimal("0.01")
ZERO = Decimal("0.00")

# Enough digits that a five-year horizon keeps sub-cent accuracy.
_PRECISION = 40

# Projection horizons shown next to savings and investment balances.
DEFAULT_HORIZONS = (14, 30, 180, 365, 1825)
HORIZON_LABELS = {
    14: "2 Weeks",
    30: "30 Days",
    180: "6 Months",
    365: "1 Year",
    1825: "5 Years",
}


def to_cents(amount: Decimal) -> Decimal:
    """Round an amount to cents, halves away from zero."""
    return Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


def _check_rate(annual_rate: Decimal) -> Decimal:
    annual_rate = Decimal(annual_rate)
    if annual_rate < 0:
        raise PreconditionError(f"Annual rate must not be negative, got {annual_rate}")
    return annual_rate


def _check_days(days: int) -> int:
    if isinstance(days, bool) or not isinstance(days, int):
        raise PreconditionError(f"Days must be a whole number, got {days!r}")
    if days < 0:
        raise PreconditionError(f"Days must not be negative, got {days}")
    return days


def growth_factor(annual_rate: Decimal, days: int) -> Decimal:
    """Return ``(1 + annual_rate/365) ** days``."""
    annual_rate = _check_rate(annual_rate)
    days = _check_days(days)
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        return (Decimal(1) + annual_rate / DAYS_PER_YEAR) ** days


def projected_balance(principal: Decimal, annual_rate: Decimal, days: int) -> Decimal:
    """Project a balance forward by a number of whole days.

    Args:
        principal: Starting balance, must not be negative
        annual_rate: Nominal annual rate as a fraction
        days: Whole days to compound

    Returns:
        ``principal * (1 + annual_rate/365) ** days`` at full precision.
        ``principal`` itself when ``days`` is 0.

    Raises:
        PreconditionError: On negative principal, negative rate or
            negative/fractional days
    """
    principal = Decimal(principal)
    if principal < 0:
        raise PreconditionError(f"Principal must not be negative, got {principal}")
    factor = growth_factor(annual_rate, days)
    if days == 0:
        return principal
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        return principal * factor


def accrued_interest(principal: Decimal, annual_rate: Decimal, days_passed: int) -> Decimal:
    """Interest earned on ``principal`` over ``days_passed`` days, in cents.

    Non-positive balances and zero elapsed days earn exactly nothing.

    Raises:
        PreconditionError: On negative rate or negative/fractional days
    """
    principal = Decimal(principal)
    factor = growth_factor(annual_rate, days_passed)
    if principal <= 0 or days_passed <= 0:
        return ZERO
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        interest = principal * (factor - Decimal(1))
    return to_cents(interest)


def compute_projections(
    principal: Decimal,
    category: str,
    horizons: Iterable[int] = DEFAULT_HORIZONS,
    annual_rate: Optional[Decimal] = None,
) -> dict[int, Decimal]:
    """Project a balance over several horizons.

    Args:
        principal: Current balance
        category: Balance category, used for the default rate
        horizons: Horizons in whole days
        annual_rate: Optional per-account override of the category rate

    Returns:
        Mapping of horizon (days) to projected balance
    """
    rate = annual_rate_for(category, annual_rate)
    return {days: projected_balance(principal, rate, days) for days in horizons}
