"""Invoice domain entities: Client, Service, Invoice."""
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, Inexact, localcontext
from typing import Optional

from src.invoicing.aggregation import tax_included_total, tax_total, without_tax_total

VAT_RATE = Decimal("0.2")


def _exact_precision(quantity: Decimal, unit_price: Decimal, vat_rate: Decimal) -> int:
    """Digits needed so q*p, q*p*vat and their sum are computed without rounding."""
    digits = sum(len(d.as_tuple().digits) for d in (quantity, unit_price, vat_rate))
    return digits + abs(vat_rate.as_tuple().exponent) + 1


@dataclass(frozen=True)
class Client:
    """Client snapshot printed on the invoice. Address fields may span lines."""
    name: str
    address: str = ""
    intracommunity_number: str = ""
    invoice_address: str = ""
    delivery_address: str = ""


@dataclass(frozen=True)
class Service:
    """A billable line item.

    Derived amounts are computed once in ``__post_init__`` from the instance's
    own quantity, unit price and VAT rate. ``vat_rate`` defaults to the module
    constant read at construction time, so existing services keep the rate
    they were created with.
    """
    id: str
    date_from: date
    date_to: Optional[date]
    title: str
    quantity: Decimal
    unit_price: Decimal
    vat_rate: Decimal = field(default_factory=lambda: VAT_RATE)
    without_tax_amount: Decimal = field(init=False)
    tax_amount: Decimal = field(init=False)
    tax_included_amount: Decimal = field(init=False)

    def __post_init__(self):
        with localcontext() as ctx:
            ctx.prec = max(ctx.prec, _exact_precision(self.quantity, self.unit_price, self.vat_rate))
            ctx.traps[Inexact] = True
            without_tax = self.quantity * self.unit_price
            tax = without_tax * self.vat_rate
            tax_included = without_tax + tax
        object.__setattr__(self, "without_tax_amount", without_tax)
        object.__setattr__(self, "tax_amount", tax)
        object.__setattr__(self, "tax_included_amount", tax_included)


@dataclass(frozen=True)
class Invoice:
    """A printed invoice. Services are captured as an ordered tuple."""
    invoice_number: str
    date: date
    payment_date: date
    client: Client
    services: tuple[Service, ...]

    def without_tax_total_amount(self) -> Decimal:
        return without_tax_total(self.services)

    def tax_total_amount(self) -> Decimal:
        return tax_total(self.services)

    def tax_included_total_amount(self) -> Decimal:
        return tax_included_total(self.services)
