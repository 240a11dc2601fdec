from __future__ import annotations

from .types import PurchaseAction, PurchaseDetails, PurchaseState


def decide(is_consumable: bool, purchase: PurchaseDetails | None) -> PurchaseAction:
    """Return what to do with a purchase reported by the billing provider.

    Pending and unknown states are left alone. A consume call also
    acknowledges, so consumables skip the acknowledged check.
    """
    if purchase is None:
        return PurchaseAction.NONE
    if purchase.purchase_state != PurchaseState.PURCHASED:
        return PurchaseAction.NONE
    if is_consumable:
        return PurchaseAction.CONSUME
    if purchase.acknowledged:
        return PurchaseAction.NONE
    return PurchaseAction.ACKNOWLEDGE
