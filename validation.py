"""
Input checks run by callers before invoking store operations
"""
from __future__ import annotations
from typing import List, Optional

from config import ALLOCATION_TOLERANCE, MAX_ATTACHMENT_BYTES, OTHER_PACKAGE_KEY
from errors import ValidationError
from models import BudgetCategory, GiftItem, Guest, Task, Transaction, Vendor, VendorAttachment
from computations import allocation_sum
from utils import try_parse_date

TASK_STATUSES = ("todo", "inProgress", "done")
TASK_PRIORITIES = ("low", "medium", "high")
PAYMENT_TYPES = ("single", "installment")


def _required(value: Optional[str], message: str) -> None:
    if not value or not str(value).strip():
        raise ValidationError(message)


def _valid_date(value: Optional[str], message: str) -> None:
    if try_parse_date(value) is None:
        raise ValidationError(message)


def validate_budget_total(total: float) -> None:
    if total is None or total < 0:
        raise ValidationError("Total budget cannot be negative.")


def validate_category_allocations(categories: List[BudgetCategory]) -> None:
    """Allocations must add up to 100% (within tolerance) when categories exist"""
    for c in categories:
        _required(c.name, "Every category needs a name.")
        if c.allocation is None or c.allocation < 0:
            raise ValidationError(f"Allocation for '{c.name}' cannot be negative.")
    if not categories:
        return
    s = allocation_sum(categories)
    if abs(s - 1.0) > ALLOCATION_TOLERANCE:
        raise ValidationError(f"Allocations add up to {s * 100:.2f}%; they must total 100%.")


def validate_transaction(t: Transaction) -> None:
    _required(t.description, "Description is required.")
    _valid_date(t.date, "Date must be YYYY-MM-DD.")
    if t.amount is None or t.amount == 0:
        raise ValidationError("Amount must be non-zero.")


def validate_vendor(v: Vendor) -> None:
    _required(v.name, "Vendor name is required.")
    _required(v.category, "Vendor category is required.")
    if v.price is None or v.price < 0:
        raise ValidationError("Quoted price must be zero or more.")
    if v.rating is not None and not 0 <= v.rating <= 5:
        raise ValidationError("Rating must be between 0 and 5.")
    for a in v.attachments:
        validate_attachment(a)


def validate_attachment(a: VendorAttachment) -> None:
    if a.size > MAX_ATTACHMENT_BYTES:
        raise ValidationError(
            f"File '{a.name}' exceeds the {MAX_ATTACHMENT_BYTES // (1024 * 1024)}MB limit."
        )


def validate_contract_terms(
    total_contract_amount: float,
    payment_type: str,
    installments: int = 1,
    first_due_date: Optional[str] = None,
) -> None:
    if total_contract_amount is None or total_contract_amount <= 0:
        raise ValidationError("Contract amount must be greater than zero.")
    if payment_type not in PAYMENT_TYPES:
        raise ValidationError(f"Unknown payment type: {payment_type}")
    if first_due_date:
        _valid_date(first_due_date, "First due date must be YYYY-MM-DD.")
    if payment_type == "installment":
        if installments is None or installments < 1:
            raise ValidationError("Number of installments must be at least 1.")
        if not first_due_date:
            raise ValidationError("First due date is required for installments.")


def validate_guest(g: Guest) -> None:
    _required(g.name, "Guest name is required.")
    _required(g.group, "Guest group is required.")


def validate_guest_groups(groups: List[str]) -> None:
    seen = set()
    for name in groups:
        _required(name, "Group names cannot be empty.")
        if name in seen:
            raise ValidationError(f"Group '{name}' already exists.")
        seen.add(name)


def validate_task(t: Task) -> None:
    _required(t.title, "Task title is required.")
    if t.status not in TASK_STATUSES:
        raise ValidationError(f"Unknown task status: {t.status}")
    if t.priority not in TASK_PRIORITIES:
        raise ValidationError(f"Unknown task priority: {t.priority}")
    if t.due_date:
        _valid_date(t.due_date, "Due date must be YYYY-MM-DD.")


def validate_gift(g: GiftItem) -> None:
    _required(g.name, "Gift name is required.")
    if g.price is not None and g.price < 0:
        raise ValidationError("Gift price cannot be negative.")


def validate_initial_setup(
    bride_name: Optional[str],
    groom_name: Optional[str],
    wedding_date: Optional[str],
    budget_total: float,
    selected_packages: List[str],
    other_package_name: Optional[str],
    user_full_name: Optional[str],
    user_email: Optional[str],
) -> None:
    """Same order of checks as the setup form"""
    if not (bride_name or "").strip() or not (groom_name or "").strip():
        raise ValidationError("Both partners' names are required.")
    _required(wedding_date, "Wedding date is required.")
    _valid_date(wedding_date, "Wedding date must be YYYY-MM-DD.")
    if budget_total is None or budget_total <= 0:
        raise ValidationError("Total budget must be greater than zero.")
    if not selected_packages:
        raise ValidationError("Select at least one service package.")
    if OTHER_PACKAGE_KEY in selected_packages and not (other_package_name or "").strip():
        raise ValidationError('Please name the "Other" package.')
    if not (user_full_name or "").strip() or not (user_email or "").strip():
        raise ValidationError("Your full name and e-mail are required.")
