"""
Immutable invoice form state and its transitions.

``reduce(state, action)`` returns ``Ok(new_state)`` or ``Err(reason)``. On
failure the caller keeps the previous state, so a rejected action never leaves
a half-applied change behind.
"""
from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum
from typing import Any, Mapping, Optional

from src.invoicing.ids import IdProvider, uuid4_ids
from src.invoicing.models import Client, Invoice, Service
from src.invoicing.print_gate import check_print_gate
from src.invoicing.results import Err, Ok, Result
from src.invoicing.service_factory import create_service

ADDRESS_FIELDS = {"client_address", "client_invoice_address", "client_delivery_address"}
DATE_FIELDS = {"invoice_date", "payment_date"}
FORM_FIELDS = {
    "invoice_number", "invoice_date", "payment_date",
    "client_name", "client_intracommunity_number",
} | ADDRESS_FIELDS
DRAFT_FIELDS = {"start_date", "end_date", "description", "quantity", "unit_price"}
DRAFT_TEXT_FIELDS = {"description", "quantity", "unit_price"}


class FormError(str, Enum):
    UNKNOWN_SERVICE = "service_id"


@dataclass(frozen=True)
class ServiceDraft:
    """Raw input of the line being added, before validation."""
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    description: str = ""
    quantity: str = ""
    unit_price: str = ""


@dataclass(frozen=True)
class FormState:
    invoice_number: str = ""
    invoice_date: date = field(default_factory=date.today)
    payment_date: Optional[date] = None
    client_name: str = ""
    client_address: tuple[str, ...] = ()
    client_intracommunity_number: str = ""
    client_invoice_address: tuple[str, ...] = ()
    client_delivery_address: tuple[str, ...] = ()
    draft: ServiceDraft = field(default_factory=ServiceDraft)
    services: tuple[Service, ...] = ()
    pending_invoice: Optional[Invoice] = None
    print_requested: bool = False

    def client_snapshot(self) -> Client:
        return Client(
            name=self.client_name,
            address="\n".join(self.client_address),
            intracommunity_number=self.client_intracommunity_number,
            invoice_address="\n".join(self.client_invoice_address),
            delivery_address="\n".join(self.client_delivery_address),
        )


# ── Actions ──

@dataclass(frozen=True)
class EditFields:
    changes: Mapping[str, Any]


@dataclass(frozen=True)
class EditDraft:
    changes: Mapping[str, Any]


@dataclass(frozen=True)
class AddService:
    pass


@dataclass(frozen=True)
class RemoveService:
    service_id: str
    confirmed: bool = False


@dataclass(frozen=True)
class RequestPrint:
    pass


@dataclass(frozen=True)
class PrintCompleted:
    pass


def _text(value) -> str:
    return "" if value is None else str(value)


def _lines(value) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, (list, tuple)):
        return tuple(_text(line) for line in value)
    value = _text(value)
    return tuple(value.split("\n")) if value else ()


def _edit_fields(state: FormState, changes: Mapping[str, Any]) -> FormState:
    updates = {}
    for k, v in changes.items():
        if k not in FORM_FIELDS:
            continue
        if k in ADDRESS_FIELDS:
            v = _lines(v)
        elif k not in DATE_FIELDS:
            v = _text(v)
        updates[k] = v
    if "invoice_date" in updates and updates["invoice_date"] is None:
        del updates["invoice_date"]
    return replace(state, **updates)


def _edit_draft(state: FormState, changes: Mapping[str, Any]) -> FormState:
    updates = {}
    for k, v in changes.items():
        if k not in DRAFT_FIELDS:
            continue
        if k in DRAFT_TEXT_FIELDS:
            v = _text(v)
        updates[k] = v
    return replace(state, draft=replace(state.draft, **updates))


def reduce(state: FormState, action, ids: IdProvider = uuid4_ids) -> Result[FormState, Any]:
    """Apply one action to the form state."""
    if isinstance(action, EditFields):
        return Ok(_edit_fields(state, action.changes))

    if isinstance(action, EditDraft):
        return Ok(_edit_draft(state, action.changes))

    if isinstance(action, AddService):
        d = state.draft
        result = create_service(d.start_date, d.end_date, d.description, d.quantity, d.unit_price, ids=ids)
        if not result.ok:
            return result
        return Ok(replace(state, services=state.services + (result.value,), draft=ServiceDraft()))

    if isinstance(action, RemoveService):
        if not any(s.id == action.service_id for s in state.services):
            return Err(FormError.UNKNOWN_SERVICE)
        if not action.confirmed:
            return Ok(state)
        remaining = tuple(s for s in state.services if s.id != action.service_id)
        return Ok(replace(state, services=remaining))

    if isinstance(action, RequestPrint):
        gate = check_print_gate(state)
        if not gate.ok:
            return gate
        invoice = Invoice(
            invoice_number=state.invoice_number,
            date=state.invoice_date,
            payment_date=state.payment_date,
            client=state.client_snapshot(),
            services=state.services,
        )
        return Ok(replace(state, pending_invoice=invoice, print_requested=True))

    if isinstance(action, PrintCompleted):
        return Ok(replace(state, print_requested=False))

    raise TypeError(f"Unknown form action: {action!r}")
