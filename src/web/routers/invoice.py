"""Invoice router - entry form, line items, print and history endpoints."""
import logging
from datetime import date
from pathlib import Path

from fastapi import APIRouter, Query, Request
from fastapi.responses import FileResponse, JSONResponse

from src.invoicing.aggregation import compute_totals
from src.invoicing.form_state import (
    AddService,
    EditDraft,
    EditFields,
    FormState,
    RemoveService,
    RequestPrint,
    reduce,
)
from src.invoicing.formatting import (
    date_formatted,
    default_formatted,
    finance_formatted,
    percent_formatted,
    period_formatted,
)
from src.invoicing.models import VAT_RATE
from src.invoicing.print_gate import print_blockers
from src.invoicing.storage.invoice_repository import invoice_to_record
from src.shared.app_state import LATE_PAYMENT_NOTICE
from src.shared.errors import AppErrors, format_validation_error
from src.web.dependencies import (
    discard_form_state,
    get_form_state,
    get_invoice_repository,
    get_last_pdf,
    get_print_workflow,
    get_template_context,
    save_form_state,
    set_last_pdf,
    templates,
)

log = logging.getLogger(__name__)
router = APIRouter()

FORM_DATE_FIELDS = ("invoice_date", "payment_date")
DRAFT_DATE_FIELDS = ("start_date", "end_date")


def _iso(d: date | None) -> str | None:
    return d.isoformat() if d else None


def _service_to_dict(s):
    return {
        "id": s.id,
        "date_from": _iso(s.date_from),
        "date_to": _iso(s.date_to),
        "period": period_formatted(s.date_from, s.date_to),
        "title": s.title,
        "quantity": str(s.quantity),
        "unit_price": str(s.unit_price),
        "vat_rate": str(s.vat_rate),
        "without_tax_amount": str(s.without_tax_amount),
        "tax_amount": str(s.tax_amount),
        "tax_included_amount": str(s.tax_included_amount),
        "display": {
            "quantity": default_formatted(s.quantity),
            "unit_price": finance_formatted(s.unit_price),
            "vat_rate": percent_formatted(s.vat_rate),
            "without_tax_amount": finance_formatted(s.without_tax_amount),
            "tax_amount": finance_formatted(s.tax_amount),
            "tax_included_amount": finance_formatted(s.tax_included_amount),
        },
    }


def _totals_to_dict(services):
    totals = compute_totals(services)
    return {
        "without_tax": str(totals.without_tax),
        "tax": str(totals.tax),
        "tax_included": str(totals.tax_included),
        "display": {
            "without_tax": finance_formatted(totals.without_tax),
            "tax": finance_formatted(totals.tax),
            "tax_included": finance_formatted(totals.tax_included),
        },
    }


def _blockers_to_list(blockers):
    return [{"field": b.value, "message": format_validation_error(b)} for b in blockers]


def _form_to_dict(form: FormState):
    d = form.draft
    return {
        "invoice_number": form.invoice_number,
        "invoice_date": _iso(form.invoice_date),
        "payment_date": _iso(form.payment_date),
        "client_name": form.client_name,
        "client_address": "\n".join(form.client_address),
        "client_intracommunity_number": form.client_intracommunity_number,
        "client_invoice_address": "\n".join(form.client_invoice_address),
        "client_delivery_address": "\n".join(form.client_delivery_address),
        "draft": {
            "start_date": _iso(d.start_date),
            "end_date": _iso(d.end_date),
            "description": d.description,
            "quantity": d.quantity,
            "unit_price": d.unit_price,
        },
        "services": [_service_to_dict(s) for s in form.services],
        "totals": _totals_to_dict(form.services),
        "can_print": not print_blockers(form),
        "blockers": _blockers_to_list(print_blockers(form)),
    }


async def _json_object(request: Request) -> dict | None:
    """Request body as a JSON object; {} when empty, None when it is not an object."""
    if not await request.body():
        return {}
    try:
        body = await request.json()
    except ValueError:
        return None
    return body if isinstance(body, dict) else None


def _invalid_body():
    return JSONResponse({"error": AppErrors.INVALID_BODY}, status_code=400)


def _parse_dates(body: dict, fields) -> tuple[dict, str | None]:
    """Replace ISO date strings in body with date objects. Returns (body, error)."""
    parsed = dict(body)
    for field in fields:
        if field not in parsed:
            continue
        raw = parsed[field]
        if raw in (None, ""):
            parsed[field] = None
            continue
        try:
            parsed[field] = date.fromisoformat(str(raw))
        except ValueError:
            return parsed, field
    return parsed, None


# ── Pages ──

@router.get("/invoice")
async def invoice_page(request: Request):
    ctx = get_template_context(request)
    ctx["form"] = _form_to_dict(get_form_state(request))
    return templates.TemplateResponse(request, "invoice_form.html", ctx)


@router.get("/invoice/print")
async def invoice_print_page(request: Request):
    form = get_form_state(request)
    invoice = form.pending_invoice
    if invoice is None:
        return JSONResponse({"error": AppErrors.NO_PRINTED_INVOICE}, status_code=404)
    ctx = get_template_context(request)
    ctx.update({
        "invoice": invoice,
        "totals": compute_totals(invoice.services),
        "auto_print": request.session.pop("print_dialog", False),
        "date_formatted": date_formatted,
        "default_formatted": default_formatted,
        "finance_formatted": finance_formatted,
        "percent_formatted": percent_formatted,
        "period_formatted": period_formatted,
        "vat_rate": VAT_RATE,
        "late_payment_notice": LATE_PAYMENT_NOTICE,
    })
    return templates.TemplateResponse(request, "invoice_print.html", ctx)


# ── Form API ──

@router.get("/api/invoice/form")
async def get_form(request: Request):
    return _form_to_dict(get_form_state(request))


@router.put("/api/invoice/form")
async def update_form(request: Request):
    body = await _json_object(request)
    if body is None:
        return _invalid_body()
    changes, bad_field = _parse_dates(body, FORM_DATE_FIELDS)
    if bad_field:
        return JSONResponse({"error": AppErrors.invalid_date(bad_field), "field": bad_field}, status_code=400)
    form = reduce(get_form_state(request), EditFields(changes)).value
    save_form_state(request, form)
    return _form_to_dict(form)


@router.put("/api/invoice/draft")
async def update_draft(request: Request):
    body = await _json_object(request)
    if body is None:
        return _invalid_body()
    changes, bad_field = _parse_dates(body, DRAFT_DATE_FIELDS)
    if bad_field:
        return JSONResponse({"error": AppErrors.invalid_date(bad_field), "field": bad_field}, status_code=400)
    form = reduce(get_form_state(request), EditDraft(changes)).value
    save_form_state(request, form)
    return _form_to_dict(form)


@router.post("/api/invoice/reset")
async def reset_form(request: Request):
    discard_form_state(request)
    return _form_to_dict(get_form_state(request))


# ── Services API ──

@router.post("/api/invoice/services")
async def add_service(request: Request):
    body = await _json_object(request)
    if body is None:
        return _invalid_body()
    form = get_form_state(request)
    if body:
        changes, bad_field = _parse_dates(body, DRAFT_DATE_FIELDS)
        if bad_field:
            return JSONResponse({"error": AppErrors.invalid_date(bad_field), "field": bad_field}, status_code=400)
        form = reduce(form, EditDraft(changes)).value
        save_form_state(request, form)
    result = reduce(form, AddService())
    if not result.ok:
        log.info("Rejected service line: %s", result.reason.value)
        return JSONResponse(
            {"error": format_validation_error(result.reason), "field": result.reason.value},
            status_code=400,
        )
    save_form_state(request, result.value)
    return _form_to_dict(result.value)


@router.delete("/api/invoice/services/{service_id}")
async def remove_service(service_id: str, request: Request, confirmed: bool = Query(default=False)):
    body = await _json_object(request)
    if body is None:
        return _invalid_body()
    if "confirmed" in body:
        confirmed = body["confirmed"] is True
    result = reduce(get_form_state(request), RemoveService(service_id, confirmed=confirmed))
    if not result.ok:
        return JSONResponse({"error": format_validation_error(result.reason)}, status_code=404)
    save_form_state(request, result.value)
    data = _form_to_dict(result.value)
    data["removed"] = confirmed
    return data


# ── Print API ──

@router.post("/api/invoice/print")
async def print_invoice(request: Request):
    result = reduce(get_form_state(request), RequestPrint())
    if not result.ok:
        blockers = result.reason
        log.info("Print blocked: %s", ", ".join(b.value for b in blockers))
        return JSONResponse(
            {"error": format_validation_error(blockers[0]), "blockers": _blockers_to_list(blockers)},
            status_code=400,
        )
    pending = result.value.pending_invoice
    try:
        workflow = get_print_workflow()
        form = workflow.flush(result.value)
    except Exception:
        log.exception("Print failed for invoice %r", pending.invoice_number)
        return JSONResponse({"error": AppErrors.PRINT_FAILED}, status_code=500)
    save_form_state(request, form)
    set_last_pdf(request, workflow.last_output)
    request.session["print_dialog"] = True
    invoice = form.pending_invoice
    return {
        "invoice": invoice_to_record(invoice),
        "totals": _totals_to_dict(invoice.services),
        "print_url": "/invoice/print",
        "pdf_url": "/api/invoice/print/pdf",
    }


@router.get("/api/invoice/print/pdf")
async def download_pdf(request: Request):
    last_pdf = get_last_pdf(request)
    if not last_pdf or not Path(last_pdf).exists():
        return JSONResponse({"error": AppErrors.NO_PRINTED_INVOICE}, status_code=404)
    return FileResponse(path=last_pdf, filename=Path(last_pdf).name, media_type="application/pdf")


# ── History API ──

@router.get("/api/invoices/history")
async def invoice_history():
    records = get_invoice_repository().load()
    return {"invoices": records, "count": len(records)}
