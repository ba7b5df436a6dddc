"""
Export Service - ToolHub
Renders a tool result as CSV, PDF, JSON or SVG. Exports are premium only;
the route enforces that before calling in here.

Tabular data comes from result["table"] ({"columns", "rows"}). Scalar fields
make up the summary block of the generic PDF.
"""
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle
from reportlab.lib.enums import TA_CENTER
from datetime import datetime, timezone
from typing import Dict, Any, Tuple, List
import csv
import io
import json
import logging

from models import ExportFormat
from tools.catalog import tool_name
from tools.registry import ToolDefinition
from services.document_pdf import render_document_pdf

logger = logging.getLogger(__name__)

BRAND_COLOR = colors.Color(0.23, 0.51, 0.96)

MEDIA_TYPES = {
    ExportFormat.CSV.value: "text/csv",
    ExportFormat.PDF.value: "application/pdf",
    ExportFormat.JSON.value: "application/json",
    ExportFormat.SVG.value: "image/svg+xml",
}


class ExportNotSupportedError(ValueError):
    def __init__(self, slug: str, fmt: str, supported):
        self.slug = slug
        self.format = fmt
        allowed = ", ".join(supported) or "none"
        super().__init__(f"{tool_name(slug)} does not support {fmt.upper()} export (available: {allowed})")


def _label(key: str) -> str:
    return key.replace("_", " ").title()


def summary_rows(result: Dict[str, Any]) -> List[List[str]]:
    """Scalar fields of a result as [label, value] rows."""
    rows = []
    for key, value in result.items():
        if key in ("table", "locked_features", "svg") or isinstance(value, (dict, list)):
            continue
        if value is None:
            continue
        rows.append([_label(key), str(value)])
    return rows


def to_csv(result: Dict[str, Any]) -> bytes:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    data = result.get("table")
    if data:
        writer.writerow(data["columns"])
        writer.writerows(data["rows"])
    else:
        writer.writerow(["Field", "Value"])
        writer.writerows(summary_rows(result))
    return buffer.getvalue().encode("utf-8")


def create_table_style() -> TableStyle:
    return TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), BRAND_COLOR),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, 0), 10),
        ('BOTTOMPADDING', (0, 0), (-1, 0), 8),
        ('TOPPADDING', (0, 0), (-1, 0), 8),
        ('FONTNAME', (0, 1), (-1, -1), 'Helvetica'),
        ('FONTSIZE', (0, 1), (-1, -1), 9),
        ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, colors.Color(0.97, 0.97, 0.97)]),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.Color(0.8, 0.8, 0.8)),
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
    ])


def to_pdf(slug: str, result: Dict[str, Any]) -> bytes:
    """Generic layout: title, key/value summary, then the rows table."""
    styles = getSampleStyleSheet()
    title_style = ParagraphStyle('ToolTitle', parent=styles['Title'], textColor=BRAND_COLOR, fontSize=22)
    footer_style = ParagraphStyle('ToolFooter', parent=styles['Normal'], textColor=colors.gray,
                                  fontSize=8, alignment=TA_CENTER)

    buffer = io.BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=A4, rightMargin=50, leftMargin=50, topMargin=50, bottomMargin=50,
                            title=tool_name(slug))
    elements = [
        Paragraph(tool_name(slug), title_style),
        Paragraph(f"Generated {datetime.now(timezone.utc).strftime('%d %B %Y at %H:%M UTC')}", styles['Normal']),
        Spacer(1, 16),
    ]

    summary = summary_rows(result)
    if summary:
        elements.append(Paragraph("Summary", styles['Heading2']))
        summary_table = Table([["Field", "Value"]] + summary, colWidths=[180, 300])
        summary_table.setStyle(create_table_style())
        elements.extend([summary_table, Spacer(1, 16)])

    data = result.get("table")
    if data and data["rows"]:
        elements.append(Paragraph("Details", styles['Heading2']))
        rows = [[str(cell) for cell in row] for row in data["rows"]]
        details = Table([data["columns"]] + rows, repeatRows=1)
        details.setStyle(create_table_style())
        elements.append(details)

    elements.extend([Spacer(1, 24), Paragraph("Generated with ToolHub", footer_style)])
    doc.build(elements)
    return buffer.getvalue()


def build_export(definition: ToolDefinition, result: Dict[str, Any], fmt: str) -> Tuple[bytes, str, str]:
    """Returns (content, media_type, filename). Raises ExportNotSupportedError."""
    if fmt not in definition.exports:
        raise ExportNotSupportedError(definition.slug, fmt, definition.exports)

    if fmt == ExportFormat.CSV.value:
        content = to_csv(result)
    elif fmt == ExportFormat.PDF.value:
        if definition.document:
            content = render_document_pdf(definition.document, result)
        else:
            content = to_pdf(definition.slug, result)
    elif fmt == ExportFormat.JSON.value:
        content = json.dumps(result, indent=2, default=str).encode("utf-8")
    else:
        content = result["svg"].encode("utf-8")

    logger.info(f"Export built: {definition.slug} as {fmt} ({len(content)} bytes)")
    return content, MEDIA_TYPES[fmt], f"{definition.slug}.{fmt}"
