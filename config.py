"""
Configuration, defaults and document (de)serialization for WeddingLedger
"""
from __future__ import annotations
import os
from dataclasses import fields
from typing import Dict, List

from dotenv import load_dotenv

from models import (
    AppData,
    Budget,
    BudgetCategory,
    GiftItem,
    Guest,
    Payment,
    Task,
    Transaction,
    UserProfile,
    Vendor,
    VendorAttachment,
    WeddingDetails,
)
from utils import safe_float

load_dotenv()

STORAGE_KEY = "weddingLedgerData"
CURRENCY = os.getenv("WEDDING_LEDGER_CURRENCY", "BRL")

GEMINI_API_KEY = os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")
GEMINI_TIMEOUT = float(os.getenv("GEMINI_TIMEOUT", "30"))

ALLOCATION_TOLERANCE = 0.001
MAX_ATTACHMENT_BYTES = 2 * 1024 * 1024

INITIAL_GUEST_GROUPS: List[str] = [
    "Bride's Family",
    "Groom's Family",
    "Bride's Friends",
    "Groom's Friends",
    "Colleagues",
]

# key -> label
INITIAL_PACKAGES: Dict[str, str] = {
    "aluguel_espaco": "Venue Rental",
    "buffet": "Catering (Food and Drinks)",
    "decoracao": "Decoration",
    "fotografia": "Photography",
    "video": "Video",
    "storymaker": "Storymaker",
    "trajes": "Bride and Groom Attire",
    "musica": "Music",
    "contingencia": "Contingency (Reserve)",
    "papelaria": "Stationery",
    "cerimonialista": "Wedding Planner",
    "outros": "Other",
}
OTHER_PACKAGE_KEY = "outros"

BASE_WEIGHTS: Dict[str, float] = {
    "aluguel_espaco": 20,
    "buffet": 25,
    "decoracao": 15,
    "fotografia": 10,
    "video": 8,
    "storymaker": 5,
    "trajes": 7,
    "musica": 5,
    "contingencia": 5,
    "papelaria": 2,
    "cerimonialista": 8,
    "outros": 3,
}


def get_default_app_data() -> AppData:
    """Create an empty document with the default guest groups"""
    return AppData(guest_groups=list(INITIAL_GUEST_GROUPS))


def camel_case(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _record_to_dict(obj) -> dict:
    return {camel_case(f.name): getattr(obj, f.name) for f in fields(obj)}


def _record_from_dict(cls, d: dict, **overrides):
    kwargs = {}
    for f in fields(cls):
        key = camel_case(f.name)
        if key in d:
            kwargs[f.name] = d[key]
    kwargs.update(overrides)
    return cls(**kwargs)


def vendor_to_dict(v: Vendor) -> dict:
    d = _record_to_dict(v)
    d["payments"] = [_record_to_dict(p) for p in v.payments]
    d["attachments"] = [_record_to_dict(a) for a in v.attachments]
    return d


def dict_to_vendor(d: dict) -> Vendor:
    return _record_from_dict(
        Vendor,
        d,
        payments=[_record_from_dict(Payment, p) for p in d.get("payments") or []],
        attachments=[_record_from_dict(VendorAttachment, a) for a in d.get("attachments") or []],
    )


def app_data_to_dict(data: AppData) -> dict:
    """Convert AppData object to dictionary for JSON serialization"""
    return {
        "weddingDate": data.wedding_date,
        "budget": {
            "total": data.budget.total,
            "categories": [_record_to_dict(c) for c in data.budget.categories],
        },
        "transactions": [_record_to_dict(t) for t in data.transactions],
        "vendors": [vendor_to_dict(v) for v in data.vendors],
        "guests": [_record_to_dict(g) for g in data.guests],
        "tasks": [_record_to_dict(t) for t in data.tasks],
        "gifts": [_record_to_dict(g) for g in data.gifts],
        "guestGroups": list(data.guest_groups),
        "userProfile": _record_to_dict(data.user_profile),
        "weddingDetails": _record_to_dict(data.wedding_details),
        "selectedPackages": list(data.selected_packages),
    }


def dict_to_app_data(d: dict) -> AppData:
    """
    Convert dictionary from JSON to AppData object.
    Missing top-level fields are backfilled with defaults; an empty
    guest group list is reset to the initial groups.
    """
    budget = d.get("budget") or {}
    return AppData(
        wedding_date=d.get("weddingDate"),
        budget=Budget(
            total=safe_float(budget.get("total")),
            categories=[_record_from_dict(BudgetCategory, c) for c in budget.get("categories") or []],
        ),
        transactions=[_record_from_dict(Transaction, t) for t in d.get("transactions") or []],
        vendors=[dict_to_vendor(v) for v in d.get("vendors") or []],
        guests=[_record_from_dict(Guest, g) for g in d.get("guests") or []],
        tasks=[_record_from_dict(Task, t) for t in d.get("tasks") or []],
        gifts=[_record_from_dict(GiftItem, g) for g in d.get("gifts") or []],
        guest_groups=list(d.get("guestGroups") or INITIAL_GUEST_GROUPS),
        user_profile=_record_from_dict(UserProfile, d.get("userProfile") or {}),
        wedding_details=_record_from_dict(WeddingDetails, d.get("weddingDetails") or {}),
        selected_packages=list(d.get("selectedPackages") or []),
    )
