from __future__ import annotations

from enum import Enum, IntEnum
from typing import Protocol


class PurchaseState(IntEnum):
    """Purchase state codes as reported by the Play Billing client."""

    UNSPECIFIED_STATE = 0
    PURCHASED = 1
    PENDING = 2

    @staticmethod
    def from_code(code: int) -> "PurchaseState":
        try:
            return PurchaseState(code)
        except ValueError:
            return PurchaseState.UNSPECIFIED_STATE


class PurchaseAction(Enum):
    CONSUME = "consume"
    ACKNOWLEDGE = "acknowledge"
    NONE = "none"


class PurchaseDetails(Protocol):
    """The two purchase fields the decision rule reads."""

    @property
    def purchase_state(self) -> PurchaseState | int: ...

    @property
    def acknowledged(self) -> bool: ...
