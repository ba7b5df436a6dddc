"""
Business Documents: generator totals and validation, plus the dedicated PDF
layouts and the CSV fallback used by the export service.
"""
import pytest

from tools.registry import get_tool
from tools.business import (
    business_card_maker,
    expense_report,
    invoice_generator,
    meeting_minutes,
    purchase_order_generator,
    quotation_generator,
    receipt_maker,
    timesheet_generator,
    work_schedule_maker,
)
from services.document_pdf import render_document_pdf
from services.export_service import build_export, to_csv, ExportNotSupportedError

COMPANY = {"name": "Acme Ltd", "email": "billing@acme.test"}
CLIENT = {"name": "Globex", "address": "1 Main St"}
ITEMS = [
    {"description": "Design", "quantity": 2, "price": 500},
    {"description": "Hosting", "quantity": 1, "price": 100},
]


def invoice_inputs(**overrides):
    inputs = {"company": COMPANY, "client": CLIENT, "items": ITEMS, "tax_rate": 18, "discount_rate": 10,
              "invoice_number": "INV-001", "currency": "eur"}
    inputs.update(overrides)
    return inputs


class TestPricedDocuments:
    def test_invoice_discount_applies_before_tax(self):
        result = invoice_generator(invoice_inputs())

        assert result["subtotal"] == 1100.0
        assert result["discount"] == 110.0
        assert result["tax"] == 178.2
        assert result["total"] == 1168.2
        assert result["currency"] == "EUR"
        assert result["invoice_number"] == "INV-001"
        assert result["table"]["rows"][0] == ["Design", 2.0, 500.0, 1000.0]

    def test_party_defaults(self):
        result = invoice_generator(invoice_inputs())
        assert result["client"] == {"name": "Globex", "address": "1 Main St", "phone": "", "email": ""}

    def test_quotation_shares_totals(self):
        result = quotation_generator(invoice_inputs(validity_date="2024-02-01"))

        assert result["total"] == 1168.2
        assert result["validity_date"] == "2024-02-01"

    @pytest.mark.parametrize("overrides,message", [
        ({"items": []}, "Add at least one item"),
        ({"items": ["Design"]}, "Each item must be an object"),
        ({"items": [{"description": "", "price": 1}]}, "Please enter an item description"),
        ({"items": [{"description": "x", "quantity": 0, "price": 1}]}, "Quantity must be greater than zero"),
        ({"discount_rate": 120}, "Discount rate cannot exceed 100%"),
        ({"client": {"address": "nowhere"}}, "Please enter the client name"),
        ({"company": "Acme"}, "Company details must be an object"),
    ])
    def test_invoice_validation(self, overrides, message):
        with pytest.raises(ValueError, match=message):
            invoice_generator(invoice_inputs(**overrides))

    def test_receipt(self):
        result = receipt_maker({
            "payer": "Jane", "items": [{"description": "Lunch", "amount": 12.5}, {"description": "Tip", "amount": 2}],
        })

        assert result["total"] == 14.5
        assert result["currency"] == "USD"
        assert result["table"]["columns"] == ["Description", "Amount"]

    def test_purchase_order_requires_number(self):
        with pytest.raises(ValueError, match="Please enter a PO number"):
            purchase_order_generator({"supplier": {"name": "Parts Co"}, "items": ITEMS})

        result = purchase_order_generator({"po_number": "PO-9", "supplier": {"name": "Parts Co"}, "items": ITEMS})
        assert result["total"] == 1100.0


class TestReportsAndSchedules:
    def test_expense_report_groups_by_category(self):
        result = expense_report({"expenses": [
            {"category": "Travel", "amount": 120},
            {"category": "Meals", "amount": 30.5},
            {"category": "Travel", "amount": 80},
            {"amount": 5},
        ]})

        assert result["total"] == 235.5
        assert result["by_category"] == {"Travel": 200.0, "Meals": 30.5, "Other": 5.0}
        assert result["title"] == "Expense Report"

    def test_timesheet_totals(self):
        result = timesheet_generator({"entries": [
            {"employee": "Ann", "hours": 8}, {"employee": "Bob", "hours": 6.5}, {"employee": "Ann", "hours": 4},
        ]})

        assert result["total_hours"] == 18.5
        assert result["hours_by_employee"] == {"Ann": 12.0, "Bob": 6.5}

    def test_timesheet_entry_limit(self):
        with pytest.raises(ValueError, match="cannot exceed 24"):
            timesheet_generator({"entries": [{"employee": "Ann", "hours": 25}]})

    def test_work_schedule_orders_by_weekday(self):
        result = work_schedule_maker({"shifts": [
            {"day": "friday", "name": "Ann", "time": "9-5"},
            {"day": "Monday", "name": "Bob", "time": "12-8"},
        ]})

        assert result["shift_count"] == 2
        assert [row[0] for row in result["table"]["rows"]] == ["Monday", "Friday"]
        assert result["days"]["Friday"][0]["color"] == "#3b82f6"

    def test_work_schedule_rejects_unknown_day(self):
        with pytest.raises(ValueError, match="Invalid day 'Someday'"):
            work_schedule_maker({"shifts": [{"day": "Someday", "name": "Ann"}]})

    def test_work_schedule_rejects_bad_color(self):
        with pytest.raises(ValueError, match="Invalid shift color 'blue'"):
            work_schedule_maker({"shifts": [{"day": "Monday", "name": "Ann", "color": "blue"}]})

    def test_meeting_minutes_accepts_text_lists(self):
        result = meeting_minutes({
            "title": "Weekly sync", "attendees": "Ann, Bob\nCarl", "agenda": ["Budget", " "], "decisions": "",
        })

        assert result["attendees"] == ["Ann", "Bob", "Carl"]
        assert result["agenda"] == ["Budget"]
        assert result["decisions"] == []

    def test_business_card_alignment(self):
        with pytest.raises(ValueError, match="Invalid alignment"):
            business_card_maker({"name": "Ann", "alignment": "right"})


class TestDocumentExports:
    @pytest.mark.parametrize("slug,inputs", [
        ("invoice-generator", invoice_inputs()),
        ("quotation-generator", invoice_inputs()),
        ("receipt-maker", {"payer": "Jane", "items": [{"description": "Lunch", "amount": 12}]}),
        ("purchase-order-generator", {"po_number": "PO-1", "supplier": {"name": "Parts Co"}, "items": ITEMS}),
        ("expense-report-generator", {"expenses": [{"category": "Travel", "amount": 10}]}),
        ("timesheet-generator", {"entries": [{"employee": "Ann", "hours": 8}]}),
        ("work-schedule-maker", {"shifts": [{"day": "Monday", "name": "Ann"}]}),
        ("meeting-minutes-generator", {"title": "Sync", "attendees": "Ann"}),
        ("business-card-maker", {"name": "Ann Lee", "title": "CTO", "alignment": "center"}),
    ])
    def test_every_layout_renders(self, slug, inputs):
        definition = get_tool(slug)
        document = definition.compute(inputs, True)

        content = render_document_pdf(definition.document, document)
        assert content.startswith(b"%PDF")

    def test_build_export_names_the_file(self):
        definition = get_tool("invoice-generator")
        content, media_type, filename = build_export(definition, invoice_generator(invoice_inputs()), "csv")

        assert media_type == "text/csv"
        assert filename == "invoice-generator.csv"
        assert content.decode().splitlines()[0] == "Description,Quantity,Unit Price,Total"

    def test_meeting_minutes_has_no_csv(self):
        definition = get_tool("meeting-minutes-generator")
        with pytest.raises(ExportNotSupportedError, match="does not support CSV export"):
            build_export(definition, {}, "csv")

    def test_csv_without_table_lists_scalar_fields(self):
        content = to_csv({"name": "Ann", "tags": ["x"], "score": 3, "missing": None}).decode()
        assert content.splitlines() == ["Field,Value", "Name,Ann", "Score,3"]
