"""
Append-only history of printed invoices.

The whole history lives in one named storage entry. ``append`` is a plain
read-modify-write with no locking: two writers racing on the same entry lose
one update. The app runs a single session, so that is accepted.
"""
import logging
from datetime import date
from typing import Optional

from src.invoicing.models import Invoice, Service
from src.invoicing.storage.backends import KeyValueStorage

log = logging.getLogger(__name__)

DEFAULT_HISTORY_KEY = "invoices"


def _date_text(d: Optional[date]) -> Optional[str]:
    return d.isoformat() if d is not None else None


def service_to_record(s: Service) -> dict:
    return {
        "id": s.id,
        "date": {"from": _date_text(s.date_from), "to": _date_text(s.date_to)},
        "title": s.title,
        "quantity": str(s.quantity),
        "unit_price": str(s.unit_price),
        "vat_rate": str(s.vat_rate),
        "without_tax_amount": str(s.without_tax_amount),
        "tax_amount": str(s.tax_amount),
        "tax_included_amount": str(s.tax_included_amount),
    }


def invoice_to_record(invoice: Invoice) -> dict:
    """Serialize an invoice; dates become ISO text and amounts decimal strings."""
    c = invoice.client
    return {
        "invoice_number": invoice.invoice_number,
        "date": _date_text(invoice.date),
        "payment_date": _date_text(invoice.payment_date),
        "client": {
            "name": c.name,
            "address": c.address,
            "intracommunity_number": c.intracommunity_number,
            "invoice_address": c.invoice_address,
            "delivery_address": c.delivery_address,
        },
        "services": [service_to_record(s) for s in invoice.services],
    }


class InvoiceRepository:
    """History of printed invoices over a key/value storage backend."""

    def __init__(self, storage: KeyValueStorage, key: str = DEFAULT_HISTORY_KEY):
        self.storage = storage
        self.key = key

    def load(self) -> list[dict]:
        """Stored invoice records in insertion order; empty when nothing was saved."""
        return list(self.storage.get(self.key) or [])

    def append(self, invoice: Invoice) -> int:
        """Append the invoice and write back the full history. Returns the new length."""
        history = self.load()
        history.append(invoice_to_record(invoice))
        self.storage.set(self.key, history)
        log.info("Appended invoice %r to history (%d stored)", invoice.invoice_number, len(history))
        return len(history)
