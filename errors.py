"""
Error types for WeddingLedger
"""
from __future__ import annotations


class WeddingLedgerError(Exception):
    """Base class for planner errors"""


class ValidationError(WeddingLedgerError):
    """Caller-supplied input violates a precondition"""


class NotFound(WeddingLedgerError):
    """Operation references an id absent from the current document"""

    def __init__(self, kind: str, item_id: str):
        super().__init__(f"{kind} not found: {item_id}")
        self.kind = kind
        self.item_id = item_id


class PersistenceFailure(WeddingLedgerError):
    """The document could not be written to storage"""


class GenerationFailure(WeddingLedgerError):
    """Text generation failed or returned an unusable payload"""
