"""
Dependency injection for FastAPI routes.
"""
import os
import uuid
from collections import OrderedDict
from pathlib import Path

from fastapi import Request
from fastapi.templating import Jinja2Templates

from src.invoicing.form_state import FormState
from src.invoicing.pdf.invoice_pdf import PdfInvoicePrinter
from src.invoicing.print_workflow import PrintWorkflow
from src.invoicing.storage.backends import SqliteStorage
from src.invoicing.storage.invoice_repository import InvoiceRepository
from src.shared.app_state import DEFAULT_PAYMENT_METHOD, AppState, IssuerDetails

_HERE = Path(__file__).resolve().parent
templates = Jinja2Templates(directory=_HERE / "templates")

DATA_ROOT = Path(os.environ.get("INVOICE_DATA_ROOT", "./data"))

# Working form state per browser, keyed by the id kept in the session cookie.
# Least recently used forms are dropped past MAX_FORMS.
MAX_FORMS = 256
_FORMS: "OrderedDict[str, FormState]" = OrderedDict()


def _env_lines(name: str) -> list[str]:
    value = os.environ.get(name, "")
    return [line for line in value.replace("\\n", "\n").split("\n") if line.strip()]


def get_state() -> AppState:
    """Build AppState from the environment."""
    return AppState(
        data_root=DATA_ROOT,
        history_key=os.environ.get("INVOICE_HISTORY_KEY", "invoices"),
        payment_method=os.environ.get("INVOICE_PAYMENT_METHOD", DEFAULT_PAYMENT_METHOD),
        issuer=IssuerDetails(
            name=os.environ.get("INVOICE_COMPANY_NAME", ""),
            address_lines=_env_lines("INVOICE_COMPANY_ADDRESS"),
            legal_lines=_env_lines("INVOICE_COMPANY_LEGAL"),
            vat_number=os.environ.get("INVOICE_COMPANY_VAT_NUMBER", ""),
        ),
    )


def get_invoice_repository(state: AppState | None = None) -> InvoiceRepository:
    """Get InvoiceRepository over the SQLite file under the data root."""
    state = state or get_state()
    state.data_root.mkdir(parents=True, exist_ok=True)
    return InvoiceRepository(SqliteStorage(state.db_path), key=state.history_key)


def get_print_workflow() -> PrintWorkflow:
    state = get_state()
    printer = PdfInvoicePrinter(state.pdf_dir, state.issuer, state.payment_method)
    return PrintWorkflow(get_invoice_repository(state), printer)


def _form_id(request: Request) -> str:
    form_id = request.session.get("form_id")
    if not form_id:
        form_id = str(uuid.uuid4())
        request.session["form_id"] = form_id
    return form_id


def get_form_state(request: Request) -> FormState:
    form_id = _form_id(request)
    if form_id in _FORMS:
        _FORMS.move_to_end(form_id)
        return _FORMS[form_id]
    return FormState()


def save_form_state(request: Request, form: FormState) -> None:
    form_id = _form_id(request)
    _FORMS[form_id] = form
    _FORMS.move_to_end(form_id)
    while len(_FORMS) > MAX_FORMS:
        _FORMS.popitem(last=False)


def discard_form_state(request: Request) -> None:
    """Forget the working form of this browser; the next request starts fresh."""
    form_id = request.session.pop("form_id", None)
    if form_id:
        _FORMS.pop(form_id, None)


def get_last_pdf(request: Request) -> str | None:
    return request.session.get("last_pdf")


def set_last_pdf(request: Request, path: Path) -> None:
    request.session["last_pdf"] = str(path)


def get_template_context(request: Request) -> dict:
    """Build common template context."""
    state = get_state()
    return {
        "request": request,
        "issuer": state.issuer,
        "payment_method": state.payment_method,
    }
