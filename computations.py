"""
Business logic and computations for WeddingLedger
"""
from __future__ import annotations
from dataclasses import replace
from datetime import date, timedelta
from typing import Dict, List, Optional

from config import BASE_WEIGHTS, INITIAL_PACKAGES, OTHER_PACKAGE_KEY
from models import AppData, BudgetCategory, GiftItem, Guest, Payment, Task, Transaction, Vendor
from utils import add_months, month_bounds, months_between, new_id, parse_date, try_parse_date


# ---------- Allocations ----------
def normalize_allocations(categories: List[BudgetCategory]) -> List[BudgetCategory]:
    """
    Rescale category allocations so they sum to 1.0.
    Empty lists and all-zero weights pass through unchanged.
    """
    weights = [max(0.0, float(c.allocation)) for c in categories]
    s = sum(weights)
    if not categories or s <= 0:
        return [replace(c) for c in categories]
    if abs(s - 1.0) <= 1e-9:
        return [replace(c, allocation=w) for c, w in zip(categories, weights)]
    return [replace(c, allocation=w / s) for c, w in zip(categories, weights)]


def allocation_sum(categories: List[BudgetCategory]) -> float:
    return sum(float(c.allocation or 0.0) for c in categories)


def package_categories(selected_packages: List[str], other_package_name: Optional[str] = None) -> List[BudgetCategory]:
    """
    Build initial budget categories from selected service packages.
    Each package gets its base weight divided by the sum of selected weights.
    A named "other" package replaces the generic one and keeps its weight.
    """
    picked = []  # (label, weight)
    for key in selected_packages:
        if key in INITIAL_PACKAGES:
            picked.append((key, INITIAL_PACKAGES[key], float(BASE_WEIGHTS.get(key, 0))))

    if OTHER_PACKAGE_KEY in selected_packages and other_package_name and other_package_name.strip():
        picked = [p for p in picked if p[0] != OTHER_PACKAGE_KEY]
        picked.append((OTHER_PACKAGE_KEY, other_package_name.strip(), float(BASE_WEIGHTS[OTHER_PACKAGE_KEY])))

    if not picked:
        return []
    total_weight = sum(w for _, _, w in picked)
    if total_weight <= 0:
        # no weights known: equal split
        picked = [(k, label, 1.0) for k, label, _ in picked]

    categories = [BudgetCategory(id=new_id(), name=label, allocation=w, spent=0.0) for _, label, w in picked if w > 0]
    return normalize_allocations(categories)


# ---------- Installments ----------
def generate_installment_payments(
    total_amount: float,
    installments: int,
    first_due_date: str,
    vendor_name: str,
) -> List[Payment]:
    """
    Split a contract total into monthly installments.
    Every installment gets the per-share amount floored to the cent; the last
    one absorbs the remainder so the amounts add up exactly to the total.
    """
    if installments <= 0:
        return []
    first = parse_date(first_due_date)
    total_cents = int(round(float(total_amount) * 100))
    base_cents = total_cents // installments

    payments = []
    for i in range(installments):
        cents = base_cents if i < installments - 1 else total_cents - base_cents * (installments - 1)
        payments.append(Payment(
            id=f"payment-{i + 1}-{new_id()[:8]}",
            amount=cents / 100,
            due_date=add_months(first, i).isoformat(),
            is_paid=False,
            description=f"Installment {i + 1}/{installments} — {vendor_name}",
        ))
    return payments


def single_payment(total_amount: float, due_date: str, vendor_name: str) -> Payment:
    return Payment(
        id=f"payment-1-{new_id()[:8]}",
        amount=round(float(total_amount), 2),
        due_date=due_date,
        is_paid=False,
        description=f"Single payment — {vendor_name}",
    )


# ---------- Vendors ----------
def calculate_vendor_paid_amount(vendor: Vendor) -> float:
    cents = sum(int(round(p.amount * 100)) for p in vendor.payments if p.is_paid)
    return cents / 100


def vendor_remaining_amount(vendor: Vendor) -> float:
    return round(vendor.total_contract_amount - calculate_vendor_paid_amount(vendor), 2)


def vendor_payment_progress(vendor: Vendor) -> float:
    """Percentage of the contract already paid"""
    if not vendor.is_contracted or vendor.total_contract_amount <= 0:
        return 0.0
    return calculate_vendor_paid_amount(vendor) / vendor.total_contract_amount * 100


def get_pending_vendors(data: Optional[AppData]) -> List[Vendor]:
    if not data:
        return []
    return [v for v in data.vendors if not v.is_contracted]


def get_contracted_vendors(data: Optional[AppData]) -> List[Vendor]:
    if not data:
        return []
    return [v for v in data.vendors if v.is_contracted]


def get_unique_vendor_categories(vendors: List[Vendor]) -> List[str]:
    seen = []
    for v in vendors:
        if v.category not in seen:
            seen.append(v.category)
    return seen


# ---------- Budget totals ----------
def get_total_budget(data: Optional[AppData]) -> float:
    return float(data.budget.total or 0.0) if data else 0.0


def get_total_spent(data: Optional[AppData]) -> float:
    """Sum of all expenses, paid or not"""
    if not data:
        return 0.0
    return sum(abs(t.amount) for t in data.transactions if t.amount < 0)


def get_total_paid(data: Optional[AppData]) -> float:
    if not data:
        return 0.0
    return sum(abs(t.amount) for t in data.transactions if t.amount < 0 and t.is_paid)


def get_remaining_budget(data: Optional[AppData]) -> float:
    return get_total_budget(data) - get_total_spent(data)


def get_spent_percentage(data: Optional[AppData]) -> float:
    total = get_total_budget(data)
    if total == 0:
        return 0.0
    return get_total_spent(data) / total * 100


def get_actual_balance(data: Optional[AppData]) -> float:
    """Signed sum of every transaction"""
    if not data:
        return 0.0
    return sum(t.amount for t in data.transactions)


def category_spending(data: Optional[AppData]) -> Dict[str, float]:
    """Expenses per category id, derived from transactions"""
    out: Dict[str, float] = {}
    if not data:
        return out
    for t in data.transactions:
        if t.amount < 0:
            out[t.category_id] = out.get(t.category_id, 0.0) + abs(t.amount)
    return out


def get_category_by_id(data: Optional[AppData], category_id: str) -> Optional[BudgetCategory]:
    if not data:
        return None
    return next((c for c in data.budget.categories if c.id == category_id), None)


def get_category_by_name(data: Optional[AppData], name: str) -> Optional[BudgetCategory]:
    if not data:
        return None
    return next((c for c in data.budget.categories if c.name == name), None)


# ---------- Date-scoped queries ----------
def get_transactions_in_month(transactions: List[Transaction], year: int, month: int) -> List[Transaction]:
    """Transactions dated within [first day, last day] of the month (month is 1-12)"""
    start, end = month_bounds(year, month)
    out = []
    for t in transactions:
        td = try_parse_date(t.date)
        if td is not None and start <= td <= end:
            out.append(t)
    return out


def _week_bounds(today: date):
    monday = today - timedelta(days=today.weekday())
    return monday, monday + timedelta(days=6)


def get_upcoming_payments(data: Optional[AppData], limit: int = 5) -> List[Transaction]:
    """Unpaid expenses, earliest first"""
    if not data:
        return []
    pending = [t for t in data.transactions if t.amount < 0 and not t.is_paid]
    pending.sort(key=lambda t: try_parse_date(t.date) or date.max)
    return pending[:limit]


def get_this_week_payments(data: Optional[AppData], today: Optional[date] = None) -> List[Transaction]:
    if not data:
        return []
    start, end = _week_bounds(today or date.today())
    out = []
    for t in data.transactions:
        if t.amount >= 0 or t.is_paid:
            continue
        td = try_parse_date(t.date)
        if td is not None and start <= td <= end:
            out.append(t)
    return out


def get_this_week_tasks(data: Optional[AppData], today: Optional[date] = None) -> List[Task]:
    if not data:
        return []
    start, end = _week_bounds(today or date.today())
    out = []
    for task in data.tasks:
        if task.status == "done":
            continue
        td = try_parse_date(task.due_date)
        if td is not None and start <= td <= end:
            out.append(task)
    return out


def months_until_wedding(wedding_date: Optional[str], today: Optional[date] = None) -> int:
    """Whole months left until the wedding; 0 when past, missing or invalid"""
    wedding = try_parse_date(wedding_date)
    if wedding is None:
        return 0
    return max(0, months_between(wedding, today or date.today()))


# ---------- Guests and gifts ----------
def get_confirmed_guest_count(data: Optional[AppData]) -> int:
    if not data:
        return 0
    return sum(1 for g in data.guests if g.is_confirmed)


def get_total_guest_count(data: Optional[AppData]) -> int:
    return len(data.guests) if data else 0


def get_confirmed_guest_percentage(data: Optional[AppData]) -> float:
    total = get_total_guest_count(data)
    if total == 0:
        return 0.0
    return get_confirmed_guest_count(data) / total * 100


def guests_by_group(guests: List[Guest]) -> Dict[str, List[Guest]]:
    out: Dict[str, List[Guest]] = {}
    for g in guests:
        out.setdefault(g.group, []).append(g)
    return out


def get_received_gift_count(data: Optional[AppData]) -> int:
    if not data:
        return 0
    return sum(1 for g in data.gifts if g.is_received)


def get_received_gifts_percentage(data: Optional[AppData]) -> float:
    if not data or not data.gifts:
        return 0.0
    return get_received_gift_count(data) / len(data.gifts) * 100


def gifts_total_value(gifts: List[GiftItem]) -> float:
    return sum(float(g.price) for g in gifts if g.price is not None)
