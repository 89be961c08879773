"""
Excel export functionality for WeddingLedger
"""
from __future__ import annotations

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, NamedStyle, PatternFill, Side
from openpyxl.utils import get_column_letter

from models import AppData
from computations import (
    calculate_vendor_paid_amount,
    category_spending,
    get_actual_balance,
    get_confirmed_guest_count,
    get_received_gift_count,
    get_remaining_budget,
    get_spent_percentage,
    get_total_budget,
    get_total_paid,
    get_total_spent,
    vendor_remaining_amount,
)

MONEY = "#,##0.00"
PERCENT = '0.00"%"'
HEADER_STYLE = "planner_header"


def _header_style() -> NamedStyle:
    edge = Side(style="thin", color="A0A0A0")
    return NamedStyle(
        name=HEADER_STYLE,
        font=Font(bold=True, color="FFFFFF"),
        fill=PatternFill("solid", fgColor="B5838D"),
        alignment=Alignment(horizontal="center", vertical="center"),
        border=Border(left=edge, right=edge, top=edge, bottom=edge),
    )


def _fit_columns(ws, min_width=10, max_width=45):
    """Width of each column follows its longest rendered value"""
    for idx, values in enumerate(ws.iter_cols(values_only=True), start=1):
        longest = max((len(str(v)) for v in values if v is not None), default=0)
        ws.column_dimensions[get_column_letter(idx)].width = max(min_width, min(max_width, longest + 2))


def _money_columns(ws, columns, first_row=2):
    for r in range(first_row, ws.max_row + 1):
        for c in columns:
            ws.cell(r, c).number_format = MONEY


def _new_sheet(wb, title, headers):
    ws = wb.create_sheet(title)
    ws.append(headers)
    for cell in ws[1]:
        cell.style = HEADER_STYLE
    ws.freeze_panes = "A2"
    return ws


def export_planning_workbook(data: AppData, filepath: str) -> None:
    """
    Export the planner to an Excel file with sheets:
    - Summary
    - Budget (planned vs. spent per category)
    - Transactions
    - Vendors
    - Payments (one row per vendor installment)
    """
    wb = Workbook()
    wb.remove(wb.active)
    wb.add_named_style(_header_style())

    # Summary
    ws = _new_sheet(wb, "Summary", ["Metric", "Value"])
    summary = [
        ("Wedding date", data.wedding_date or "", None),
        ("Total budget", get_total_budget(data), MONEY),
        ("Total spent", get_total_spent(data), MONEY),
        ("Total paid", get_total_paid(data), MONEY),
        ("Remaining budget", get_remaining_budget(data), MONEY),
        ("Spent %", round(get_spent_percentage(data), 2), PERCENT),
        ("Balance", get_actual_balance(data), MONEY),
        ("Guests confirmed", f"{get_confirmed_guest_count(data)}/{len(data.guests)}", None),
        ("Gifts received", f"{get_received_gift_count(data)}/{len(data.gifts)}", None),
    ]
    for label, value, fmt in summary:
        ws.append([label, value])
        if fmt:
            ws.cell(ws.max_row, 2).number_format = fmt
    _fit_columns(ws)

    # Budget
    spending = category_spending(data)
    ws = _new_sheet(wb, "Budget", ["Category", "Allocation %", "Planned", "Spent", "Remaining"])
    for c in data.budget.categories:
        planned = data.budget.total * c.allocation
        spent = spending.get(c.id, 0.0)
        ws.append([c.name, round(c.allocation * 100, 2), planned, spent, planned - spent])
    if data.budget.categories:
        last = ws.max_row
        ws.append(["TOTALS", f"=SUM(B2:B{last})", f"=SUM(C2:C{last})", f"=SUM(D2:D{last})", f"=SUM(E2:E{last})"])
        ws.cell(ws.max_row, 1).font = Font(bold=True)
    _money_columns(ws, (3, 4, 5))
    _fit_columns(ws)

    # Transactions
    names = {c.id: c.name for c in data.budget.categories}
    vendors = {v.id: v.name for v in data.vendors}
    ws = _new_sheet(wb, "Transactions", ["Date", "Description", "Category", "Vendor", "Amount", "Paid"])
    for t in sorted(data.transactions, key=lambda t: (t.date, t.description)):
        ws.append([
            t.date,
            t.description,
            names.get(t.category_id, ""),
            vendors.get(t.vendor_id, "") if t.vendor_id else "",
            t.amount,
            "yes" if t.is_paid else "no",
        ])
    _money_columns(ws, (5,))
    _fit_columns(ws)

    # Vendors
    ws = _new_sheet(wb, "Vendors", ["Vendor", "Category", "Contact", "Quote", "Contracted", "Contract", "Paid", "Remaining"])
    for v in data.vendors:
        ws.append([
            v.name,
            v.category,
            v.contact,
            v.price,
            "yes" if v.is_contracted else "no",
            v.total_contract_amount if v.is_contracted else None,
            calculate_vendor_paid_amount(v) if v.is_contracted else None,
            vendor_remaining_amount(v) if v.is_contracted else None,
        ])
    _money_columns(ws, (4, 6, 7, 8))
    _fit_columns(ws)

    # Payments
    ws = _new_sheet(wb, "Payments", ["Vendor", "Description", "Due date", "Amount", "Paid"])
    for v in data.vendors:
        if not v.is_contracted:
            continue
        for p in v.payments:
            ws.append([v.name, p.description, p.due_date, p.amount, "yes" if p.is_paid else "no"])
    _money_columns(ws, (4,))
    _fit_columns(ws)

    wb.save(filepath)
