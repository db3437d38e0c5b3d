"""Invoice PDF generation using reportlab."""
import logging
import re
from datetime import datetime
from pathlib import Path
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_RIGHT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from src.invoicing.formatting import (
    date_formatted,
    default_formatted,
    finance_formatted,
    percent_formatted,
    period_formatted,
)
from src.invoicing.models import VAT_RATE, Invoice
from src.shared.app_state import DEFAULT_PAYMENT_METHOD, LATE_PAYMENT_NOTICE, IssuerDetails

log = logging.getLogger(__name__)


def _pdf_text(text: str) -> str:
    # Standard Type1 fonts have no narrow no-break space glyph.
    return text.replace("\u202f", "\u00a0")


def _para(text: str, style) -> Paragraph:
    return Paragraph(escape(_pdf_text(text)).replace("\n", "<br/>"), style)


def generate_invoice_pdf(
    invoice: Invoice,
    issuer: IssuerDetails,
    output_path: Path,
    payment_method: str = DEFAULT_PAYMENT_METHOD,
) -> Path:
    """Generate a PDF invoice and save to output_path. Returns the path."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    doc = SimpleDocTemplate(
        str(output_path),
        pagesize=A4,
        leftMargin=15 * mm,
        rightMargin=15 * mm,
        topMargin=15 * mm,
        bottomMargin=15 * mm,
        title=f"Facture {invoice.invoice_number}".strip(),
    )

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        "InvoiceTitle", parent=styles["Title"], fontSize=24, spaceAfter=6 * mm,
    )
    normal_style = ParagraphStyle("Cell", parent=styles["Normal"], fontSize=8, leading=10)
    bold_style = ParagraphStyle("CellBold", parent=normal_style, fontName="Helvetica-Bold")
    right_style = ParagraphStyle("Right", parent=styles["Normal"], alignment=TA_RIGHT)
    small_style = ParagraphStyle(
        "Small", parent=styles["Normal"], fontSize=8, textColor=colors.grey,
    )

    elements = []
    elements.append(Paragraph("Facture", title_style))

    # Issuer / invoice reference
    issuer_lines = [f"<b>{escape(issuer.name)}</b>"] if issuer.name else []
    issuer_lines += [escape(line) for line in issuer.address_lines]
    issuer_lines += [escape(line) for line in issuer.legal_lines]
    if issuer.vat_number:
        issuer_lines.append(f"TVA intracommunautaire: {escape(issuer.vat_number)}")
    reference = (
        f"Date : {date_formatted(invoice.date)}<br/>"
        f"<b>Facture n° {escape(invoice.invoice_number)}</b>"
    )
    head_table = Table(
        [[Paragraph("<br/>".join(issuer_lines), styles["Normal"]), Paragraph(reference, right_style)]],
        colWidths=[100 * mm, 80 * mm],
    )
    head_table.setStyle(TableStyle([("VALIGN", (0, 0), (-1, -1), "TOP")]))
    elements.append(head_table)
    elements.append(Spacer(1, 6 * mm))

    # Client references
    client = invoice.client
    client_data = [
        ["Références client", "", "Adresse de facturation", "Adresse de livraison"],
        ["Nom :", _para(client.name, normal_style),
         _para(client.invoice_address, normal_style), _para(client.delivery_address, normal_style)],
        ["Adresse :", _para(client.address, normal_style), "", ""],
        ["N° intracommunautaire :", _para(client.intracommunity_number, normal_style), "", ""],
    ]
    client_table = Table(client_data, colWidths=[38 * mm, 52 * mm, 45 * mm, 45 * mm])
    client_table.setStyle(TableStyle([
        ("SPAN", (0, 0), (1, 0)),
        ("SPAN", (2, 1), (2, 3)),
        ("SPAN", (3, 1), (3, 3)),
        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#f3f4f6")),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTNAME", (0, 1), (0, -1), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 8),
        ("ALIGN", (0, 1), (0, -1), "RIGHT"),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ("BOX", (0, 0), (-1, -1), 0.5, colors.black),
        ("LINEAFTER", (1, 0), (2, -1), 0.5, colors.black),
        ("LINEBELOW", (0, 0), (-1, 0), 0.5, colors.black),
    ]))
    elements.append(client_table)
    elements.append(Spacer(1, 6 * mm))

    # Line items
    header = [
        "Date", "Désignation de la prestation", "Quantité", "Prix unitaire",
        "Taux de TVA", "Montant total HT", "Montant TVA", "Montant TTC",
    ]
    table_data = [header]
    for s in invoice.services:
        table_data.append([
            _para(period_formatted(s.date_from, s.date_to), normal_style),
            _para(s.title, normal_style),
            _pdf_text(default_formatted(s.quantity)),
            _pdf_text(finance_formatted(s.unit_price)),
            percent_formatted(s.vat_rate),
            _pdf_text(finance_formatted(s.without_tax_amount)),
            _pdf_text(finance_formatted(s.tax_amount)),
            _pdf_text(finance_formatted(s.tax_included_amount)),
        ])
    without_tax = _pdf_text(finance_formatted(invoice.without_tax_total_amount()))
    tax = _pdf_text(finance_formatted(invoice.tax_total_amount()))
    tax_included = _pdf_text(finance_formatted(invoice.tax_included_total_amount()))
    table_data.append([Paragraph("Totaux", bold_style), "", "", "", "", without_tax, tax, tax_included])

    col_widths = [24 * mm, 46 * mm, 15 * mm, 20 * mm, 13 * mm, 22 * mm, 20 * mm, 20 * mm]
    items_table = Table(table_data, colWidths=col_widths, repeatRows=1)
    items_table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#f3f4f6")),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 7),
        ("ALIGN", (2, 1), (4, -1), "CENTER"),
        ("ALIGN", (5, 1), (-1, -1), "RIGHT"),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ("GRID", (0, 0), (-1, -1), 0.5, colors.HexColor("#d1d5db")),
        ("LINEABOVE", (0, -1), (-1, -1), 1, colors.black),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
        ("TOPPADDING", (0, 0), (-1, -1), 4),
    ]))
    elements.append(items_table)
    elements.append(Spacer(1, 8 * mm))

    # Payment conditions / amounts due
    conditions = Table([
        ["Conditions de règlement", ""],
        ["Date de règlement :", date_formatted(invoice.payment_date)],
        ["Mode de règlement :", payment_method],
        ["Conditions d'escompte :", ""],
    ], colWidths=[40 * mm, 45 * mm])
    conditions.setStyle(TableStyle([
        ("SPAN", (0, 0), (1, 0)),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 8),
        ("ALIGN", (0, 1), (0, -1), "RIGHT"),
        ("BOX", (0, 0), (-1, -1), 0.5, colors.black),
    ]))
    to_pay = Table([
        ["Somme à payer (HT)", without_tax],
        [f"TVA ({percent_formatted(VAT_RATE)})", tax],
        ["Somme à payer (TTC)", tax_included],
    ], colWidths=[45 * mm, 35 * mm])
    to_pay.setStyle(TableStyle([
        ("FONTNAME", (0, 0), (-1, -1), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 9),
        ("ALIGN", (0, 0), (-1, -1), "RIGHT"),
        ("BOX", (0, 0), (-1, -1), 0.5, colors.black),
        ("LINEABOVE", (0, -1), (-1, -1), 1, colors.black),
    ]))
    footer = Table([[conditions, to_pay]], colWidths=[95 * mm, 85 * mm])
    footer.setStyle(TableStyle([("VALIGN", (0, 0), (-1, -1), "TOP")]))
    elements.append(footer)

    elements.append(Spacer(1, 8 * mm))
    elements.append(Paragraph(escape(LATE_PAYMENT_NOTICE), small_style))

    doc.build(elements)
    return output_path


class PdfInvoicePrinter:
    """Print side effect: writes each printed invoice to a PDF under output_dir."""

    def __init__(
        self,
        output_dir: Path,
        issuer: IssuerDetails | None = None,
        payment_method: str = DEFAULT_PAYMENT_METHOD,
    ):
        self.output_dir = Path(output_dir)
        self.issuer = issuer or IssuerDetails()
        self.payment_method = payment_method

    def pdf_name(self, invoice: Invoice) -> str:
        number = re.sub(r"[^\w.-]", "_", invoice.invoice_number) or "sans-numero"
        stamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
        return f"facture_{number}_{stamp}.pdf"

    def print_invoice(self, invoice: Invoice) -> Path:
        path = generate_invoice_pdf(
            invoice, self.issuer, self.output_dir / self.pdf_name(invoice), self.payment_method,
        )
        log.info("Wrote invoice PDF %s", path)
        return path
