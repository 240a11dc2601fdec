"""Pure purchase decision rule.

IMPORTANT: This package must never perform I/O or import from services.
"""

from .decide import decide
from .types import PurchaseAction, PurchaseDetails, PurchaseState

__all__ = [
    "PurchaseAction",
    "PurchaseDetails",
    "PurchaseState",
    "decide",
]
