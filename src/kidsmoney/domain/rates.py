"""Balance categories and their default annual interest rates."""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional

from kidsmoney.domain.errors import ValidationError, unknown_category

CASH = "cash"
SAVINGS = "savings"
INVESTMENTS = "investments"

CATEGORIES = (CASH, SAVINGS, INVESTMENTS)
INTEREST_BEARING = (SAVINGS, INVESTMENTS)

# Nominal annual rates, compounded daily. Investments use the middle of an
# 8-12% expected-return range.
DEFAULT_ANNUAL_RATES = {
    CASH: Decimal("0"),
    SAVINGS: Decimal("0.045"),
    INVESTMENTS: Decimal("0.10"),
}

MIN_RATE = Decimal("0")
MAX_RATE = Decimal("1")
# Rates are stored with six decimal places.
RATE_QUANTUM = Decimal("0.000001")


def validate_category(category: str) -> str:
    """Return the normalized category name.

    Raises:
        ValidationError: If category is not cash, savings or investments
    """
    normalized = category.strip().lower() if isinstance(category, str) else category
    if normalized not in CATEGORIES:
        raise ValidationError(unknown_category(category))
    return normalized


def validate_rate(category: str, rate: Decimal) -> Decimal:
    """Validate a per-account rate override for a category.

    Args:
        category: Category the override applies to
        rate: Annual rate as a fraction (0.045 for 4.5%)

    Returns:
        The rate as a Decimal, rounded to six decimal places

    Raises:
        ValidationError: If the category does not bear interest or the rate
            falls outside [0, 1]
    """
    category = validate_category(category)
    if category not in INTEREST_BEARING:
        raise ValidationError(f"Category '{category}' does not earn interest")
    try:
        rate = Decimal(rate)
    except (InvalidOperation, TypeError) as e:
        raise ValidationError(f"Invalid rate '{rate}': {e}")
    if not rate.is_finite() or rate < MIN_RATE or rate > MAX_RATE:
        raise ValidationError(
            f"Interest rate must be between 0% and 100%, got {rate_to_percent(rate)}%"
        )
    return rate.quantize(RATE_QUANTUM, rounding=ROUND_HALF_UP)


def annual_rate_for(category: str, override: Optional[Decimal] = None) -> Decimal:
    """Return the annual rate that applies to a category.

    Cash never earns interest, whatever the override says.
    """
    category = validate_category(category)
    if category == CASH:
        return DEFAULT_ANNUAL_RATES[CASH]
    if override is not None:
        return validate_rate(category, override)
    return DEFAULT_ANNUAL_RATES[category]


def rate_from_percent(percent: Decimal | str) -> Decimal:
    """Convert a 0-100 percentage into a fractional rate."""
    try:
        return Decimal(str(percent).strip().rstrip("%")) / Decimal("100")
    except InvalidOperation:
        raise ValidationError(f"Could not parse rate '{percent}'")


def rate_to_percent(rate: Decimal) -> Decimal:
    """Convert a fractional rate into a percentage for display (0.045 -> 4.5)."""
    percent = Decimal(rate) * Decimal("100")
    if not percent.is_finite():
        return percent
    if percent == percent.to_integral_value():
        return percent.quantize(Decimal("1"))
    return percent.normalize()
