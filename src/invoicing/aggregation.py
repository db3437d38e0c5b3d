"""
Invoice-level totals over an ordered sequence of services.

Each service's derived amounts are exact Decimal values, so the sums carry no
rounding. Rounding happens only when amounts are formatted for display.
"""
from dataclasses import dataclass
from decimal import Decimal, Inexact, localcontext
from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from src.invoicing.models import Service

ZERO = Decimal("0")


@dataclass(frozen=True)
class InvoiceTotals:
    without_tax: Decimal
    tax: Decimal
    tax_included: Decimal


def exact_sum(values: Iterable[Decimal]) -> Decimal:
    """Sum with enough precision that no digit is dropped."""
    values = list(values)
    if not values:
        return ZERO
    lowest = min(0, *(v.as_tuple().exponent for v in values))
    highest = max(v.adjusted() for v in values)
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, highest - lowest + len(str(len(values))) + 1)
        ctx.traps[Inexact] = True
        return sum(values, ZERO)


def without_tax_total(services: Iterable["Service"]) -> Decimal:
    return exact_sum(s.without_tax_amount for s in services)


def tax_total(services: Iterable["Service"]) -> Decimal:
    return exact_sum(s.tax_amount for s in services)


def tax_included_total(services: Iterable["Service"]) -> Decimal:
    return exact_sum(s.tax_included_amount for s in services)


def compute_totals(services: Iterable["Service"]) -> InvoiceTotals:
    """Compute the three footer totals in one pass over a materialized list."""
    services = list(services)
    return InvoiceTotals(
        without_tax=without_tax_total(services),
        tax=tax_total(services),
        tax_included=tax_included_total(services),
    )
