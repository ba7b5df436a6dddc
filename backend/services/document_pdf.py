"""
Business document PDF layouts.

Each layout takes the normalised document returned by the matching generator
in tools/business.py. Business cards are drawn directly on a 3.5in x 2in
canvas; everything else is a platypus flow on A4.
"""
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from reportlab.lib.enums import TA_RIGHT
from reportlab.pdfgen import canvas
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle
from xml.sax.saxutils import escape
from typing import Dict, Any, List, Callable
import io

HEADER_COLOR = colors.Color(0.12, 0.16, 0.22)
ACCENT_COLOR = colors.Color(0.23, 0.51, 0.96)
CARD_SIZE = (3.5 * inch, 2 * inch)

_styles = getSampleStyleSheet()
STYLES = {
    "title": ParagraphStyle('DocTitle', parent=_styles['Title'], textColor=HEADER_COLOR, fontSize=22, alignment=0),
    "heading": ParagraphStyle('DocHeading', parent=_styles['Heading3'], textColor=ACCENT_COLOR, spaceBefore=10),
    "body": ParagraphStyle('DocBody', parent=_styles['Normal'], fontSize=10, leading=14),
    "right": ParagraphStyle('DocRight', parent=_styles['Normal'], fontSize=10, alignment=TA_RIGHT),
}


def _p(text: Any, style: str = "body") -> Paragraph:
    return Paragraph(escape(str(text)).replace("\n", "<br/>"), STYLES[style])


def _money(value: Any, currency: str = "") -> str:
    amount = f"{float(value):,.2f}"
    return f"{currency} {amount}".strip()


def _table_style(header: bool = True) -> TableStyle:
    commands = [
        ('FONTNAME', (0, 0), (-1, -1), 'Helvetica'),
        ('FONTSIZE', (0, 0), (-1, -1), 9),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.Color(0.85, 0.85, 0.85)),
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
        ('TOPPADDING', (0, 0), (-1, -1), 5),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 5),
    ]
    if header:
        commands += [
            ('BACKGROUND', (0, 0), (-1, 0), HEADER_COLOR),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ]
    return TableStyle(commands)


def _grid(columns: List[str], rows: List[List[Any]], col_widths=None) -> Table:
    table = Table([columns] + [[str(c) for c in row] for row in rows], colWidths=col_widths, repeatRows=1)
    table.setStyle(_table_style())
    return table


def _party_block(label: str, party: Dict[str, str]) -> List[Any]:
    lines = [party.get(field) for field in ("name", "address", "phone", "email") if party.get(field)]
    return [_p(label, "heading"), _p("\n".join(lines))]


def _totals(rows: List[List[str]]) -> Table:
    table = Table(rows, colWidths=[380, 115], hAlign="RIGHT")
    table.setStyle(TableStyle([
        ('ALIGN', (0, 0), (-1, -1), 'RIGHT'),
        ('FONTNAME', (0, -1), (-1, -1), 'Helvetica-Bold'),
        ('LINEABOVE', (0, -1), (-1, -1), 1, HEADER_COLOR),
    ]))
    return table


def _build(elements: List[Any], title: str) -> bytes:
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=A4, rightMargin=50, leftMargin=50, topMargin=50, bottomMargin=50,
                            title=title)
    doc.build(elements)
    return buffer.getvalue()


# ============================================================================
# Layouts
# ============================================================================

def _priced(doc: Dict[str, Any], title: str, number_label: str, number: str, date_lines: List[str]) -> bytes:
    currency = doc.get("currency", "")
    elements = [_p(title, "title")]
    meta = [f"{number_label}: {number}"] if number else []
    elements.append(_p("\n".join(meta + [line for line in date_lines if line])))
    elements.append(Spacer(1, 12))

    parties = Table([[_party_block("From", doc["company"]), _party_block("Bill To", doc["client"])]], colWidths=[250, 250])
    parties.setStyle(TableStyle([('VALIGN', (0, 0), (-1, -1), 'TOP')]))
    elements.extend([parties, Spacer(1, 16)])

    rows = [[i["description"], i["quantity"], _money(i["price"], currency), _money(i["total"], currency)] for i in doc["items"]]
    elements.append(_grid(["Description", "Qty", "Unit Price", "Total"], rows, [245, 50, 100, 100]))
    elements.append(Spacer(1, 10))

    totals = [["Subtotal", _money(doc["subtotal"], currency)]]
    if doc.get("discount"):
        totals.append([f"Discount ({doc['discount_rate']}%)", f"-{_money(doc['discount'], currency)}"])
    if doc.get("tax"):
        totals.append([f"Tax ({doc['tax_rate']}%)", _money(doc["tax"], currency)])
    totals.append(["Total", _money(doc["total"], currency)])
    elements.append(_totals(totals))

    if doc.get("notes"):
        elements.extend([Spacer(1, 16), _p("Notes", "heading"), _p(doc["notes"])])
    return _build(elements, title)


def invoice_pdf(doc: Dict[str, Any]) -> bytes:
    return _priced(doc, "INVOICE", "Invoice #", doc.get("invoice_number"),
                   [f"Date: {doc['date']}" if doc.get("date") else "",
                    f"Due: {doc['due_date']}" if doc.get("due_date") else ""])


def quotation_pdf(doc: Dict[str, Any]) -> bytes:
    return _priced(doc, "QUOTATION", "Quotation #", doc.get("quotation_number"),
                   [f"Date: {doc['date']}" if doc.get("date") else "",
                    f"Valid until: {doc['validity_date']}" if doc.get("validity_date") else ""])


def receipt_pdf(doc: Dict[str, Any]) -> bytes:
    currency = doc.get("currency", "")
    elements = [_p("RECEIPT", "title")]
    meta = [
        f"Receipt #: {doc['receipt_number']}" if doc.get("receipt_number") else "",
        f"Date: {doc['date']}" if doc.get("date") else "",
        f"Received from: {doc['payer']}",
        f"Payment method: {doc['payment_method']}" if doc.get("payment_method") else "",
    ]
    elements.extend([_p("\n".join(line for line in meta if line)), Spacer(1, 14)])
    rows = [[i["description"], _money(i["amount"], currency)] for i in doc["items"]]
    elements.extend([_grid(["Description", "Amount"], rows, [380, 115]), Spacer(1, 10)])
    elements.append(_totals([["Total Paid", _money(doc["total"], currency)]]))
    return _build(elements, "Receipt")


def purchase_order_pdf(doc: Dict[str, Any]) -> bytes:
    currency = doc.get("currency", "")
    elements = [_p("PURCHASE ORDER", "title"), _p(f"PO #: {doc['po_number']}")]
    if doc.get("date"):
        elements.append(_p(f"Date: {doc['date']}"))
    elements.extend(_party_block("Supplier", doc["supplier"]))
    elements.append(Spacer(1, 12))
    rows = [[i["description"], i["quantity"], _money(i["price"], currency), _money(i["total"], currency)] for i in doc["items"]]
    elements.extend([_grid(["Description", "Qty", "Unit Price", "Total"], rows, [245, 50, 100, 100]), Spacer(1, 10)])
    elements.append(_totals([["Total", _money(doc["total"], currency)]]))
    if doc.get("payment_terms"):
        elements.extend([_p("Payment Terms", "heading"), _p(doc["payment_terms"])])
    if doc.get("notes"):
        elements.extend([_p("Notes", "heading"), _p(doc["notes"])])
    return _build(elements, "Purchase Order")


def expense_report_pdf(doc: Dict[str, Any]) -> bytes:
    elements = [_p(doc.get("title") or "Expense Report", "title")]
    meta = [f"Employee: {doc['employee']}" if doc.get("employee") else "",
            f"Period: {doc['period']}" if doc.get("period") else ""]
    if any(meta):
        elements.append(_p("\n".join(line for line in meta if line)))
    elements.append(Spacer(1, 12))
    rows = [[e["date"], e["category"], e["description"], _money(e["amount"])] for e in doc["expenses"]]
    elements.extend([_grid(["Date", "Category", "Description", "Amount"], rows, [80, 100, 215, 100]), Spacer(1, 10)])
    elements.append(_totals([["Total", _money(doc["total"])]]))
    elements.append(_p("By Category", "heading"))
    elements.append(_grid(["Category", "Total"], [[k, _money(v)] for k, v in doc["by_category"].items()], [300, 120]))
    return _build(elements, "Expense Report")


def timesheet_pdf(doc: Dict[str, Any]) -> bytes:
    elements = [_p("Timesheet", "title"), Spacer(1, 8)]
    rows = [[e["date"], e["employee"], e["task"], e["hours"]] for e in doc["entries"]]
    elements.extend([_grid(["Date", "Employee", "Task", "Hours"], rows, [80, 130, 215, 70]), Spacer(1, 10)])
    elements.append(_totals([["Total Hours", str(doc["total_hours"])]]))
    elements.append(_p("Hours by Employee", "heading"))
    elements.append(_grid(["Employee", "Hours"], [[k, v] for k, v in doc["hours_by_employee"].items()], [300, 120]))
    return _build(elements, "Timesheet")


def work_schedule_pdf(doc: Dict[str, Any]) -> bytes:
    elements = [_p(doc.get("title") or "Work Schedule", "title")]
    if doc.get("week_of"):
        elements.append(_p(f"Week of {doc['week_of']}"))
    elements.append(Spacer(1, 10))
    for day, shifts in doc["days"].items():
        elements.append(_p(day, "heading"))
        if not shifts:
            elements.append(_p("No shifts scheduled"))
            continue
        table = _grid(["Name", "Time", "Task"], [[s["name"], s["time"], s["task"]] for s in shifts], [150, 120, 225])
        for row, shift in enumerate(shifts, start=1):
            table.setStyle(TableStyle([('LINEBEFORE', (0, row), (0, row), 4, colors.HexColor(shift["color"]))]))
        elements.append(table)
    return _build(elements, "Work Schedule")


def meeting_minutes_pdf(doc: Dict[str, Any]) -> bytes:
    elements = [_p(doc["title"], "title")]
    when = " ".join(part for part in (doc.get("date"), doc.get("time")) if part)
    if when:
        elements.append(_p(when))
    for label, key in (("Attendees", "attendees"), ("Agenda", "agenda")):
        if doc.get(key):
            elements.extend([_p(label, "heading"), _p("\n".join(f"• {item}" for item in doc[key]))])
    if doc.get("notes"):
        elements.extend([_p("Discussion Notes", "heading"), _p(doc["notes"])])
    if doc.get("decisions"):
        elements.extend([_p("Decisions", "heading"),
                         _p("\n".join(f"{i}. {item}" for i, item in enumerate(doc["decisions"], start=1)))])
    return _build(elements, doc["title"])


def business_card_pdf(doc: Dict[str, Any]) -> bytes:
    width, height = CARD_SIZE
    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=CARD_SIZE)
    pdf.setTitle(f"Business Card - {doc['name']}")
    pdf.setFillColor(ACCENT_COLOR)
    pdf.rect(0, height - 6, width, 6, stroke=0, fill=1)

    centered = doc.get("alignment") == "center"
    margin = 0.25 * inch

    def line(text: str, y: float, font: str, size: float, color=HEADER_COLOR):
        if not text:
            return
        pdf.setFont(font, size)
        pdf.setFillColor(color)
        if centered:
            pdf.drawCentredString(width / 2, y, text)
        else:
            pdf.drawString(margin, y, text)

    line(doc["name"], height - 0.6 * inch, "Helvetica-Bold", 14)
    line(doc.get("title"), height - 0.82 * inch, "Helvetica", 9, colors.gray)
    line(doc.get("company"), height - 1.1 * inch, "Helvetica-Bold", 10, ACCENT_COLOR)
    line(doc.get("contact"), 0.3 * inch, "Helvetica", 7.5)

    pdf.showPage()
    pdf.save()
    return buffer.getvalue()


LAYOUTS: Dict[str, Callable[[Dict[str, Any]], bytes]] = {
    "invoice": invoice_pdf,
    "quotation": quotation_pdf,
    "receipt": receipt_pdf,
    "purchase_order": purchase_order_pdf,
    "expense_report": expense_report_pdf,
    "timesheet": timesheet_pdf,
    "work_schedule": work_schedule_pdf,
    "meeting_minutes": meeting_minutes_pdf,
    "business_card": business_card_pdf,
}


def render_document_pdf(layout: str, document: Dict[str, Any]) -> bytes:
    return LAYOUTS[layout](document)
