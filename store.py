"""
Application state store for WeddingLedger.

``WeddingStore`` owns the single planner document. Every mutation works on a
deep copy of the current document, writes the copy to storage and only then
publishes it and notifies subscribers, so a failed lookup or a failed write
leaves the published document untouched.
"""
from __future__ import annotations
import copy
import logging
from dataclasses import replace
from typing import Callable, List, Optional, TypeVar

from computations import (
    calculate_vendor_paid_amount,
    generate_installment_payments,
    get_category_by_id,
    get_category_by_name,
    normalize_allocations,
    package_categories,
    single_payment,
)
from config import app_data_to_dict, dict_to_app_data, get_default_app_data
from errors import NotFound
from models import (
    AppData,
    BudgetCategory,
    GiftItem,
    Guest,
    Payment,
    Task,
    Transaction,
    UserProfile,
    Vendor,
    WeddingDetails,
)
from storage import JsonFileStorage
from utils import new_id, today_str
from validation import validate_contract_terms

logger = logging.getLogger(__name__)

T = TypeVar("T")
Subscriber = Callable[[AppData], None]


def _index_of(items: list, item_id: str, kind: str) -> int:
    for i, item in enumerate(items):
        if item.id == item_id:
            return i
    raise NotFound(kind, item_id)


def _payment_matches(t: Transaction, payment: Payment) -> bool:
    """Link a generated transaction to its payment"""
    if t.payment_id:
        return t.payment_id == payment.id
    # documents written before payment ids existed
    return (
        t.description == payment.description
        and abs(abs(t.amount) - payment.amount) < 0.005
        and (t.date or "")[:10] == (payment.due_date or "")[:10]
    )


def _retract_unpaid(data: AppData, vendor_id: str) -> None:
    data.transactions = [t for t in data.transactions if t.vendor_id != vendor_id or t.is_paid]


class WeddingStore:
    """Holds the planner document and applies every change to it"""

    def __init__(self, storage=None):
        self._storage = storage if storage is not None else JsonFileStorage()
        self._subscribers: List[Subscriber] = []
        self._data = self._load()

    # ---------- Reads ----------
    @property
    def data(self) -> AppData:
        """Last published document; treat as read-only"""
        return self._data

    def snapshot(self) -> AppData:
        return copy.deepcopy(self._data)

    def get_category_by_id(self, category_id: str) -> Optional[BudgetCategory]:
        return get_category_by_id(self._data, category_id)

    def get_category_by_name(self, name: str) -> Optional[BudgetCategory]:
        return get_category_by_name(self._data, name)

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a callback for new documents; returns an unsubscribe function"""
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    # ---------- Persistence ----------
    def _load(self) -> AppData:
        raw = self._storage.read()
        if raw is None:
            logger.info("No stored document, starting from defaults")
            data = get_default_app_data()
            self._write(data)
            return data
        data = dict_to_app_data(raw)
        payload = app_data_to_dict(data)
        if any(key not in raw for key in payload) or not raw.get("guestGroups"):
            logger.info("Backfilling missing fields in stored document")
            self._write(data)
        return data

    def reload(self) -> AppData:
        self._data = self._load()
        self._notify()
        return self._data

    def _write(self, data: AppData) -> None:
        self._storage.write(app_data_to_dict(data))

    def _notify(self) -> None:
        for callback in list(self._subscribers):
            callback(self._data)

    def _commit(self, action: str, transform: Callable[[AppData], T]) -> T:
        draft = copy.deepcopy(self._data)
        result = transform(draft)
        self._write(draft)
        self._data = draft
        logger.info("%s saved", action)
        self._notify()
        return copy.deepcopy(result)

    # ---------- Wedding and budget ----------
    def set_wedding_date(self, wedding_date: Optional[str]) -> None:
        def apply(d: AppData):
            d.wedding_date = wedding_date
        self._commit("Wedding date", apply)

    def update_budget(self, total: float) -> None:
        def apply(d: AppData):
            d.budget.total = float(total)
        self._commit("Budget total", apply)

    def update_budget_categories(self, categories: List[BudgetCategory]) -> None:
        """Replace the category list, normalizing allocations and carrying renames over to vendors"""
        normalized = normalize_allocations(categories)

        def apply(d: AppData):
            old_names = {c.id: c.name for c in d.budget.categories}
            renames = {
                old_names[c.id]: c.name
                for c in normalized
                if c.id in old_names and old_names[c.id] != c.name
            }
            # one pass so swapped names do not chain
            for v in d.vendors:
                v.category = renames.get(v.category, v.category)
            d.budget.categories = normalized
        self._commit("Budget categories", apply)

    # ---------- Transactions ----------
    def add_transaction(self, transaction: Transaction) -> Transaction:
        new = replace(transaction, id=transaction.id or new_id())

        def apply(d: AppData):
            d.transactions.append(new)
            return new
        return self._commit("Transaction", apply)

    def update_transaction(self, transaction: Transaction) -> None:
        def apply(d: AppData):
            d.transactions[_index_of(d.transactions, transaction.id, "Transaction")] = replace(transaction)
        self._commit("Transaction", apply)

    def delete_transaction(self, transaction_id: str) -> None:
        def apply(d: AppData):
            d.transactions.pop(_index_of(d.transactions, transaction_id, "Transaction"))
        self._commit("Transaction removal", apply)

    # ---------- Vendors ----------
    def add_vendor(self, vendor: Vendor) -> Vendor:
        """Add an uncontracted vendor; contract terms are set by contract_vendor"""
        new = replace(
            vendor,
            id=vendor.id or new_id(),
            is_contracted=False,
            total_contract_amount=0.0,
            payment_type="single",
            paid_amount=0.0,
            payments=[],
            attachments=list(vendor.attachments),
        )

        def apply(d: AppData):
            d.vendors.append(new)
            return new
        return self._commit("Vendor", apply)

    def update_vendor(self, vendor: Vendor) -> None:
        """
        Replace a vendor's record. The cached paid amount is recomputed; saving a
        contracted vendor as uncontracted retracts its unpaid transactions.
        """
        updated = copy.deepcopy(vendor)
        updated.paid_amount = calculate_vendor_paid_amount(updated)

        def apply(d: AppData):
            i = _index_of(d.vendors, vendor.id, "Vendor")
            if d.vendors[i].is_contracted and not updated.is_contracted:
                _retract_unpaid(d, vendor.id)
            d.vendors[i] = updated
        self._commit("Vendor", apply)

    def delete_vendor(self, vendor_id: str) -> None:
        """Remove a vendor together with all of its transactions"""
        def apply(d: AppData):
            d.vendors.pop(_index_of(d.vendors, vendor_id, "Vendor"))
            d.transactions = [t for t in d.transactions if t.vendor_id != vendor_id]
        self._commit("Vendor removal", apply)

    def contract_vendor(
        self,
        vendor_id: str,
        total_contract_amount: float,
        payment_type: str,
        installments: int = 1,
        first_due_date: Optional[str] = None,
    ) -> Vendor:
        """
        Contract a vendor: build its payment schedule and replace the vendor's
        transactions with one unpaid expense per payment. Re-contracting
        regenerates everything from scratch.
        """
        validate_contract_terms(total_contract_amount, payment_type, installments, first_due_date)

        def apply(d: AppData):
            i = _index_of(d.vendors, vendor_id, "Vendor")
            vendor = d.vendors[i]
            if payment_type == "single":
                due = first_due_date or d.wedding_date or today_str()
                payments = [single_payment(total_contract_amount, due, vendor.name)]
            else:
                payments = generate_installment_payments(
                    total_contract_amount, installments, first_due_date, vendor.name
                )

            vendor.is_contracted = True
            vendor.total_contract_amount = float(total_contract_amount)
            vendor.payment_type = payment_type
            vendor.payments = payments
            vendor.paid_amount = calculate_vendor_paid_amount(vendor)

            category = get_category_by_name(d, vendor.category)
            d.transactions = [t for t in d.transactions if t.vendor_id != vendor_id]
            for p in payments:
                d.transactions.append(Transaction(
                    id=new_id(),
                    date=p.due_date,
                    amount=-p.amount,
                    description=p.description,
                    category_id=category.id if category else "",
                    is_paid=False,
                    vendor_id=vendor_id,
                    payment_id=p.id,
                ))
            logger.debug("Vendor %s contracted with %d payment(s)", vendor_id, len(payments))
            return vendor
        return self._commit("Vendor contract", apply)

    def uncontract_vendor(self, vendor_id: str) -> None:
        """Clear the contracted flag; the schedule is kept and unpaid transactions are retracted"""
        def apply(d: AppData):
            vendor = d.vendors[_index_of(d.vendors, vendor_id, "Vendor")]
            vendor.is_contracted = False
            _retract_unpaid(d, vendor_id)
        self._commit("Vendor contract removal", apply)

    def update_vendor_payment_status(self, vendor_id: str, payment_id: str, is_paid: bool) -> None:
        """Flip one payment's paid flag and keep paid amount and its transaction in sync"""
        def apply(d: AppData):
            vendor = d.vendors[_index_of(d.vendors, vendor_id, "Vendor")]
            payment = vendor.payments[_index_of(vendor.payments, payment_id, "Payment")]
            payment.is_paid = bool(is_paid)
            vendor.paid_amount = calculate_vendor_paid_amount(vendor)
            for t in d.transactions:
                if t.vendor_id == vendor_id and _payment_matches(t, payment):
                    t.is_paid = bool(is_paid)
        self._commit("Payment status", apply)

    # ---------- Guests ----------
    def add_guest(self, guest: Guest) -> Guest:
        new = replace(guest, id=guest.id or new_id())

        def apply(d: AppData):
            d.guests.append(new)
            return new
        return self._commit("Guest", apply)

    def update_guest(self, guest: Guest) -> None:
        def apply(d: AppData):
            d.guests[_index_of(d.guests, guest.id, "Guest")] = replace(guest)
        self._commit("Guest", apply)

    def delete_guest(self, guest_id: str) -> None:
        def apply(d: AppData):
            d.guests.pop(_index_of(d.guests, guest_id, "Guest"))
        self._commit("Guest removal", apply)

    def update_guest_groups(self, groups: List[str]) -> None:
        """Replace the group list; guests keep their group names"""
        def apply(d: AppData):
            d.guest_groups = list(groups)
        self._commit("Guest groups", apply)

    # ---------- Tasks ----------
    def add_task(self, task: Task) -> Task:
        new = replace(task, id=task.id or new_id())

        def apply(d: AppData):
            d.tasks.append(new)
            return new
        return self._commit("Task", apply)

    def update_task(self, task: Task) -> None:
        def apply(d: AppData):
            d.tasks[_index_of(d.tasks, task.id, "Task")] = replace(task)
        self._commit("Task", apply)

    def delete_task(self, task_id: str) -> None:
        def apply(d: AppData):
            d.tasks.pop(_index_of(d.tasks, task_id, "Task"))
        self._commit("Task removal", apply)

    # ---------- Gifts ----------
    def add_gift(self, gift: GiftItem) -> GiftItem:
        new = replace(gift, id=gift.id or new_id())

        def apply(d: AppData):
            d.gifts.append(new)
            return new
        return self._commit("Gift", apply)

    def update_gift(self, gift: GiftItem) -> None:
        def apply(d: AppData):
            d.gifts[_index_of(d.gifts, gift.id, "Gift")] = replace(gift)
        self._commit("Gift", apply)

    def delete_gift(self, gift_id: str) -> None:
        def apply(d: AppData):
            d.gifts.pop(_index_of(d.gifts, gift_id, "Gift"))
        self._commit("Gift removal", apply)

    # ---------- Profile and setup ----------
    def update_user_profile(self, profile: UserProfile) -> None:
        def apply(d: AppData):
            d.user_profile = replace(profile)
        self._commit("User profile", apply)

    def update_wedding_details(self, details: WeddingDetails) -> None:
        def apply(d: AppData):
            d.wedding_details = replace(details)
        self._commit("Wedding details", apply)

    def save_initial_setup(
        self,
        user_profile: UserProfile,
        wedding_date: str,
        wedding_details: WeddingDetails,
        budget_total: float,
        selected_packages: List[str],
        other_package_name: Optional[str] = None,
    ) -> None:
        """Store the setup answers and derive budget categories from the selected packages"""
        categories = package_categories(selected_packages, other_package_name)

        def apply(d: AppData):
            d.user_profile = replace(user_profile)
            d.wedding_date = wedding_date
            d.wedding_details = replace(wedding_details)
            d.budget.total = float(budget_total)
            d.budget.categories = categories
            d.selected_packages = list(selected_packages)
        self._commit("Initial setup", apply)

    def reset_app(self) -> None:
        """Erase the stored document and start over from defaults"""
        self._storage.clear()
        data = get_default_app_data()
        self._write(data)
        self._data = data
        logger.info("Planner data reset")
        self._notify()
