"""
Presentation formatting for the fixed French locale (fr-FR, EUR).

These helpers only build display strings; stored amounts keep full precision.
"""
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Optional

DECIMAL_SEPARATOR = ","
GROUP_SEPARATOR = "\u202f"  # narrow no-break space
CURRENCY_SUFFIX = "\u00a0€"

_ONE = Decimal("1")
_CENTS = Decimal("0.01")


def _to_decimal(x) -> Decimal:
    if isinstance(x, Decimal):
        return x
    return Decimal(str(x))


def _round(value: Decimal, exp: Decimal) -> Decimal:
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, value.adjusted() - exp.as_tuple().exponent + 2)
        return value.quantize(exp, rounding=ROUND_HALF_UP)


def _localize(text: str) -> str:
    """Swap the separators of a ``{:,}``-formatted number for French ones."""
    return text.replace(",", GROUP_SEPARATOR).replace(".", DECIMAL_SEPARATOR)


def percent_formatted(x) -> str:
    """0.2 -> '20 %'."""
    value = _round(_to_decimal(x) * 100, _ONE)
    return f"{value} %"


def default_formatted(x) -> str:
    """Whole numbers without decimals, others rounded to at most 2 decimals.

    3 -> '3', 3.5 -> '3,5', 1234.567 -> '1 234,57'
    """
    value = _to_decimal(x)
    if value == value.to_integral_value():
        return _localize(f"{_round(value, _ONE):,f}")
    rounded = _round(value, _CENTS)
    text = f"{rounded:,.2f}".rstrip("0").rstrip(".")
    return _localize(text)


def finance_formatted(x) -> str:
    """Two decimals and a trailing euro sign: 1234.5 -> '1 234,50 €'."""
    rounded = _round(_to_decimal(x), _CENTS)
    return _localize(f"{rounded:,.2f}") + CURRENCY_SUFFIX


def date_formatted(d: Optional[date]) -> str:
    if d is None:
        return ""
    return d.strftime("%d/%m/%Y")


def period_formatted(date_from: date, date_to: Optional[date]) -> str:
    """Service period as printed in the line-item table."""
    if date_to is None:
        return date_formatted(date_from)
    return f"{date_formatted(date_from)} au {date_formatted(date_to)}"
