"""
Print side effects, fired once per print request.

``RequestPrint`` only marks the form; ``PrintWorkflow.flush`` performs the
print and the history append, then clears the mark. Flushing again without a
new request does nothing.
"""
import logging
from typing import Any, Protocol

from src.invoicing.form_state import FormState, PrintCompleted, reduce
from src.invoicing.models import Invoice
from src.invoicing.storage.invoice_repository import InvoiceRepository

log = logging.getLogger(__name__)


class InvoicePrinter(Protocol):
    def print_invoice(self, invoice: Invoice) -> Any: ...


class PrintWorkflow:
    def __init__(self, repository: InvoiceRepository, printer: InvoicePrinter):
        self.repository = repository
        self.printer = printer
        self.last_output: Any = None

    def flush(self, state: FormState) -> FormState:
        if not state.print_requested or state.pending_invoice is None:
            return state
        invoice = state.pending_invoice
        self.last_output = self.printer.print_invoice(invoice)
        self.repository.append(invoice)
        log.info("Printed invoice %r with %d line(s)", invoice.invoice_number, len(invoice.services))
        return reduce(state, PrintCompleted()).value
