"""
Preconditions for turning the current form into a printed invoice.

The invoice number is shown on the document but deliberately not required.
"""
from enum import Enum
from typing import TYPE_CHECKING

from src.invoicing.results import Err, Ok, Result

if TYPE_CHECKING:
    from src.invoicing.form_state import FormState


class PrintBlocker(str, Enum):
    PAYMENT_DATE_MISSING = "payment_date"
    CLIENT_NAME_MISSING = "client_name"
    ADDRESS_MISSING = "client_address"
    NO_SERVICES = "services"


def print_blockers(state: "FormState") -> list[PrintBlocker]:
    """Every unmet requirement, in a fixed order."""
    blockers = []
    if state.payment_date is None:
        blockers.append(PrintBlocker.PAYMENT_DATE_MISSING)
    if not state.client_name.strip():
        blockers.append(PrintBlocker.CLIENT_NAME_MISSING)
    if not any(line.strip() for line in state.client_address):
        blockers.append(PrintBlocker.ADDRESS_MISSING)
    if not state.services:
        blockers.append(PrintBlocker.NO_SERVICES)
    return blockers


def check_print_gate(state: "FormState") -> Result[None, tuple[PrintBlocker, ...]]:
    blockers = print_blockers(state)
    if blockers:
        return Err(tuple(blockers))
    return Ok(None)


def can_print(state: "FormState") -> bool:
    return not print_blockers(state)
