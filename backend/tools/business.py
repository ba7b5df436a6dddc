"""Business Documents.

Each generator validates and normalises the document fields, computes totals
and returns everything the PDF layout in services/document_pdf.py needs.
"""
from collections import OrderedDict
from typing import Any, Dict, List
import re

from tools.registry import register
from tools.inputs import get_choice, get_list, get_number, get_str, round_to, table

PARTY_FIELDS = ("name", "address", "phone", "email")
WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
HEX_COLOR = re.compile(r"#[0-9a-fA-F]{6}")


def _party(inputs: Dict[str, Any], key: str, label: str) -> Dict[str, str]:
    raw = inputs.get(key) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"{label} details must be an object")
    party = {field: get_str(raw, field).strip() for field in PARTY_FIELDS}
    if not party["name"]:
        raise ValueError(f"Please enter the {label.lower()} name")
    return party


def _rows(inputs: Dict[str, Any], key: str, label: str) -> List[Dict[str, Any]]:
    rows = get_list(inputs, key, required=True)
    for row in rows:
        if not isinstance(row, dict):
            raise ValueError(f"Each {label} must be an object")
    return rows


def _line_items(inputs: Dict[str, Any]) -> List[Dict[str, Any]]:
    items = []
    for row in _rows(inputs, "items", "item"):
        description = get_str(row, "description", required=True, label="an item description").strip()
        quantity = get_number(row, "quantity", 1, positive=True)
        price = get_number(row, "price", 0, non_negative=True)
        items.append({
            "description": description,
            "quantity": quantity,
            "price": round_to(price),
            "total": round_to(quantity * price),
        })
    return items


def _items_table(items: List[Dict[str, Any]]) -> Dict[str, Any]:
    return table(
        ["Description", "Quantity", "Unit Price", "Total"],
        [[i["description"], i["quantity"], i["price"], i["total"]] for i in items],
    )


def _priced_document(inputs: Dict[str, Any]) -> Dict[str, Any]:
    """Shared by invoices and quotations. The discount applies before tax."""
    items = _line_items(inputs)
    tax_rate = get_number(inputs, "tax_rate", 0, non_negative=True, label="tax rate")
    discount_rate = get_number(inputs, "discount_rate", 0, non_negative=True, label="discount rate")
    if discount_rate > 100:
        raise ValueError("Discount rate cannot exceed 100%")

    subtotal = sum(i["total"] for i in items)
    discount = subtotal * discount_rate / 100
    tax = (subtotal - discount) * tax_rate / 100
    return {
        "company": _party(inputs, "company", "Company"),
        "client": _party(inputs, "client", "Client"),
        "items": items,
        "currency": get_str(inputs, "currency", "USD").strip().upper() or "USD",
        "notes": get_str(inputs, "notes").strip(),
        "tax_rate": tax_rate,
        "discount_rate": discount_rate,
        "subtotal": round_to(subtotal),
        "discount": round_to(discount),
        "tax": round_to(tax),
        "total": round_to(subtotal - discount + tax),
        "table": _items_table(items),
    }


# ============================================================================
# Priced documents
# ============================================================================

@register("invoice-generator", exports=("csv", "pdf"), document="invoice")
def invoice_generator(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    document = _priced_document(inputs)
    document.update({
        "invoice_number": get_str(inputs, "invoice_number").strip(),
        "date": get_str(inputs, "date").strip(),
        "due_date": get_str(inputs, "due_date").strip(),
    })
    return document


@register("quotation-generator", exports=("csv", "pdf"), document="quotation")
def quotation_generator(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    document = _priced_document(inputs)
    document.update({
        "quotation_number": get_str(inputs, "quotation_number").strip(),
        "date": get_str(inputs, "date").strip(),
        "validity_date": get_str(inputs, "validity_date").strip(),
    })
    return document


@register("receipt-maker", exports=("csv", "pdf"), document="receipt")
def receipt_maker(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    items = []
    for row in _rows(inputs, "items", "item"):
        items.append({
            "description": get_str(row, "description", required=True, label="an item description").strip(),
            "amount": round_to(get_number(row, "amount", non_negative=True)),
        })
    return {
        "receipt_number": get_str(inputs, "receipt_number").strip(),
        "date": get_str(inputs, "date").strip(),
        "payer": get_str(inputs, "payer", required=True, label="the payer").strip(),
        "payment_method": get_str(inputs, "payment_method").strip(),
        "currency": get_str(inputs, "currency", "USD").strip().upper() or "USD",
        "items": items,
        "total": round_to(sum(i["amount"] for i in items)),
        "table": table(["Description", "Amount"], [[i["description"], i["amount"]] for i in items]),
    }


@register("purchase-order-generator", exports=("csv", "pdf"), document="purchase_order")
def purchase_order_generator(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    items = _line_items(inputs)
    return {
        "po_number": get_str(inputs, "po_number", required=True, label="a PO number").strip(),
        "date": get_str(inputs, "date").strip(),
        "supplier": _party(inputs, "supplier", "Supplier"),
        "payment_terms": get_str(inputs, "payment_terms").strip(),
        "notes": get_str(inputs, "notes").strip(),
        "currency": get_str(inputs, "currency", "USD").strip().upper() or "USD",
        "items": items,
        "total": round_to(sum(i["total"] for i in items)),
        "table": _items_table(items),
    }


# ============================================================================
# Reports
# ============================================================================

@register("expense-report-generator", exports=("csv", "pdf"), document="expense_report")
def expense_report(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    expenses = []
    by_category: Dict[str, float] = OrderedDict()
    for row in _rows(inputs, "expenses", "expense"):
        category = get_str(row, "category", "Other").strip() or "Other"
        amount = get_number(row, "amount", non_negative=True)
        expenses.append({
            "date": get_str(row, "date").strip(),
            "category": category,
            "description": get_str(row, "description").strip(),
            "amount": round_to(amount),
        })
        by_category[category] = by_category.get(category, 0) + amount

    return {
        "title": get_str(inputs, "title", "Expense Report").strip(),
        "employee": get_str(inputs, "employee").strip(),
        "period": get_str(inputs, "period").strip(),
        "expenses": expenses,
        "total": round_to(sum(e["amount"] for e in expenses)),
        "by_category": {k: round_to(v) for k, v in by_category.items()},
        "table": table(
            ["Date", "Category", "Description", "Amount"],
            [[e["date"], e["category"], e["description"], e["amount"]] for e in expenses],
        ),
    }


@register("timesheet-generator", exports=("csv", "pdf"), document="timesheet")
def timesheet_generator(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    entries = []
    by_employee: Dict[str, float] = OrderedDict()
    for row in _rows(inputs, "entries", "entry"):
        employee = get_str(row, "employee", required=True, label="the employee name").strip()
        hours = get_number(row, "hours", non_negative=True)
        if hours > 24:
            raise ValueError("Hours for a single entry cannot exceed 24")
        entries.append({
            "date": get_str(row, "date").strip(),
            "employee": employee,
            "task": get_str(row, "task").strip(),
            "hours": round_to(hours),
        })
        by_employee[employee] = by_employee.get(employee, 0) + hours

    return {
        "entries": entries,
        "total_hours": round_to(sum(e["hours"] for e in entries)),
        "hours_by_employee": {k: round_to(v) for k, v in by_employee.items()},
        "table": table(
            ["Date", "Employee", "Task", "Hours"],
            [[e["date"], e["employee"], e["task"], e["hours"]] for e in entries],
        ),
    }


def _shift_color(row: Dict[str, Any]) -> str:
    color = get_str(row, "color", "#3b82f6").strip() or "#3b82f6"
    if not HEX_COLOR.fullmatch(color):
        raise ValueError(f"Invalid shift color '{color}': use a hex value such as #3b82f6")
    return color.lower()


@register("work-schedule-maker", exports=("csv", "pdf"), document="work_schedule")
def work_schedule_maker(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    days = OrderedDict((day, []) for day in WEEKDAYS)
    for row in _rows(inputs, "shifts", "shift"):
        day = get_str(row, "day").strip().capitalize()
        if day not in days:
            raise ValueError(f"Invalid day '{row.get('day')}': use a weekday name such as Monday")
        days[day].append({
            "name": get_str(row, "name", required=True, label="the employee name").strip(),
            "time": get_str(row, "time").strip(),
            "task": get_str(row, "task").strip(),
            "color": _shift_color(row),
        })

    rows = [[day, s["name"], s["time"], s["task"]] for day, shifts in days.items() for s in shifts]
    return {
        "title": get_str(inputs, "title", "Work Schedule").strip(),
        "week_of": get_str(inputs, "week_of").strip(),
        "days": days,
        "shift_count": len(rows),
        "table": table(["Day", "Name", "Time", "Task"], rows),
    }


def _split_list(value: str) -> List[str]:
    return [part.strip() for part in re.split(r"[\n,]", value) if part.strip()]


@register("meeting-minutes-generator", exports=("pdf",), document="meeting_minutes")
def meeting_minutes(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    def listed(key: str) -> List[str]:
        value = inputs.get(key)
        if isinstance(value, list):
            return [str(v).strip() for v in value if str(v).strip()]
        return _split_list(get_str(inputs, key))

    return {
        "title": get_str(inputs, "title", required=True, label="a meeting title").strip(),
        "date": get_str(inputs, "date").strip(),
        "time": get_str(inputs, "time").strip(),
        "attendees": listed("attendees"),
        "agenda": listed("agenda"),
        "notes": get_str(inputs, "notes").strip(),
        "decisions": listed("decisions"),
    }


@register("business-card-maker", exports=("pdf",), document="business_card")
def business_card_maker(inputs: Dict[str, Any], premium: bool = False) -> Dict[str, Any]:
    return {
        "name": get_str(inputs, "name", required=True, label="your name").strip(),
        "title": get_str(inputs, "title").strip(),
        "company": get_str(inputs, "company").strip(),
        "contact": get_str(inputs, "contact").strip(),
        "alignment": get_choice(inputs, "alignment", ("left", "center"), "left"),
    }
