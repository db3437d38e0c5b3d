"""
Tests for the print side effects and the PDF printer.
"""
from dataclasses import replace
from datetime import date

from src.invoicing.form_state import AddService, EditDraft, EditFields, FormState, RequestPrint, reduce
from src.invoicing.ids import SequentialIds
from src.invoicing.pdf.invoice_pdf import PdfInvoicePrinter, generate_invoice_pdf
from src.invoicing.print_workflow import PrintWorkflow
from src.invoicing.storage.backends import InMemoryStorage
from src.invoicing.storage.invoice_repository import InvoiceRepository
from src.shared.app_state import IssuerDetails


class FakePrinter:
    def __init__(self):
        self.printed = []

    def print_invoice(self, invoice):
        self.printed.append(invoice)
        return f"printed-{len(self.printed)}"


def _requested_state():
    state = reduce(FormState(), EditFields({
        "invoice_number": "F-42",
        "payment_date": date(2024, 4, 30),
        "client_name": "Dupont SARL",
        "client_address": "3 place Bellecour\n69002 Lyon",
    })).value
    state = reduce(state, EditDraft({
        "start_date": date(2024, 4, 1),
        "end_date": date(2024, 4, 30),
        "description": "Régie",
        "quantity": "12,5",
        "unit_price": "480",
    })).value
    state = reduce(state, AddService(), ids=SequentialIds()).value
    return reduce(state, RequestPrint()).value


class TestPrintWorkflow:
    def test_flush_prints_and_records_once(self):
        printer, repo = FakePrinter(), InvoiceRepository(InMemoryStorage())
        workflow = PrintWorkflow(repo, printer)

        state = workflow.flush(_requested_state())
        assert state.print_requested is False
        assert len(printer.printed) == 1
        assert len(repo.load()) == 1
        assert workflow.last_output == "printed-1"

        workflow.flush(state)
        assert len(printer.printed) == 1
        assert len(repo.load()) == 1

    def test_flush_without_request_does_nothing(self):
        printer, repo = FakePrinter(), InvoiceRepository(InMemoryStorage())
        state = FormState()
        assert PrintWorkflow(repo, printer).flush(state) is state
        assert printer.printed == []
        assert repo.load() == []

    def test_second_request_appends_again(self):
        printer, repo = FakePrinter(), InvoiceRepository(InMemoryStorage())
        workflow = PrintWorkflow(repo, printer)
        state = workflow.flush(_requested_state())
        state = reduce(state, RequestPrint()).value
        workflow.flush(state)
        assert len(printer.printed) == 2
        assert [r["invoice_number"] for r in repo.load()] == ["F-42", "F-42"]

    def test_recorded_invoice_matches_printed(self):
        printer, repo = FakePrinter(), InvoiceRepository(InMemoryStorage())
        PrintWorkflow(repo, printer).flush(_requested_state())
        record = repo.load()[0]
        assert record["client"]["name"] == "Dupont SARL"
        assert record["services"][0]["title"] == "Régie"
        assert record["services"][0]["quantity"] == "12.5"


class TestPdfPrinter:
    def test_generate_pdf(self, tmp_path):
        invoice = _requested_state().pending_invoice
        issuer = IssuerDetails(
            name="Ma Société",
            address_lines=["10 avenue des Champs", "75008 Paris"],
            legal_lines=["SAS au capital de 1 000 €", "RCS Paris 123 456 789"],
            vat_number="FR00123456789",
        )
        path = generate_invoice_pdf(invoice, issuer, tmp_path / "out" / "facture.pdf")
        assert path.exists()
        assert path.read_bytes().startswith(b"%PDF")

    def test_printer_writes_into_output_dir(self, tmp_path):
        printer = PdfInvoicePrinter(tmp_path / "printed")
        path = printer.print_invoice(_requested_state().pending_invoice)
        assert path.parent == tmp_path / "printed"
        assert path.name.startswith("facture_F-42_")
        assert path.suffix == ".pdf"

    def test_pdf_name_without_number(self, tmp_path):
        invoice = _requested_state().pending_invoice
        name = PdfInvoicePrinter(tmp_path).pdf_name(replace(invoice, invoice_number=""))
        assert name.startswith("facture_sans-numero_")

    def test_workflow_with_pdf_printer(self, tmp_path):
        repo = InvoiceRepository(InMemoryStorage())
        workflow = PrintWorkflow(repo, PdfInvoicePrinter(tmp_path))
        workflow.flush(_requested_state())
        assert workflow.last_output.exists()
        assert len(repo.load()) == 1
