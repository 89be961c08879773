"""
Data models for WeddingLedger
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class BudgetCategory:
    """Budget category with its fractional share of the total"""
    id: str
    name: str
    allocation: float  # e.g., 0.25 for 25%
    spent: float = 0.0  # informational only; real spend comes from transactions


@dataclass
class Budget:
    total: float = 0.0
    categories: List[BudgetCategory] = field(default_factory=list)


@dataclass
class Transaction:
    """Single budget transaction"""
    id: str
    date: str  # YYYY-MM-DD
    amount: float  # positive for income, negative for expense
    description: str
    category_id: str
    is_paid: bool = False
    vendor_id: Optional[str] = None
    payment_id: Optional[str] = None  # Payment.id when generated by contracting


@dataclass
class Payment:
    """Vendor installment"""
    id: str
    amount: float
    due_date: str  # YYYY-MM-DD
    is_paid: bool = False
    description: str = ""


@dataclass
class VendorAttachment:
    id: str
    name: str
    type: str
    size: int  # bytes
    data_url: str
    uploaded_at: str  # ISO timestamp


@dataclass
class Vendor:
    id: str
    name: str
    category: str  # BudgetCategory.name
    description: str = ""
    contact: str = ""
    price: float = 0.0  # original quote
    rating: Optional[float] = None
    is_contracted: bool = False
    total_contract_amount: float = 0.0
    payment_type: str = "single"  # "single" | "installment"
    paid_amount: float = 0.0  # cached sum of paid payments
    payments: List[Payment] = field(default_factory=list)
    attachments: List[VendorAttachment] = field(default_factory=list)


@dataclass
class Guest:
    id: str
    name: str
    group: str
    contact: str = ""
    is_confirmed: bool = False
    note: str = ""


@dataclass
class Task:
    id: str
    title: str
    description: str = ""
    due_date: str = ""  # YYYY-MM-DD
    status: str = "todo"  # "todo" | "inProgress" | "done"
    priority: str = "medium"  # "low" | "medium" | "high"
    category: str = ""


@dataclass
class GiftItem:
    id: str
    name: str
    room: str = ""
    price: Optional[float] = None
    is_received: bool = False
    note: Optional[str] = None


@dataclass
class UserProfile:
    bride_name: Optional[str] = None
    groom_name: Optional[str] = None
    user_full_name: Optional[str] = None
    user_email: Optional[str] = None
    user_phone: Optional[str] = None
    user_instagram: Optional[str] = None


@dataclass
class WeddingDetails:
    ceremony_time: Optional[str] = None  # HH:MM
    ceremony_location: Optional[str] = None
    reception_location: Optional[str] = None
    guest_estimate: Optional[int] = None
    rsvp_deadline: Optional[str] = None  # YYYY-MM-DD


@dataclass
class AppData:
    """Complete planner document; persisted whole on every change"""
    wedding_date: Optional[str] = None
    budget: Budget = field(default_factory=Budget)
    transactions: List[Transaction] = field(default_factory=list)
    vendors: List[Vendor] = field(default_factory=list)
    guests: List[Guest] = field(default_factory=list)
    tasks: List[Task] = field(default_factory=list)
    gifts: List[GiftItem] = field(default_factory=list)
    guest_groups: List[str] = field(default_factory=list)
    user_profile: UserProfile = field(default_factory=UserProfile)
    wedding_details: WeddingDetails = field(default_factory=WeddingDetails)
    selected_packages: List[str] = field(default_factory=list)
