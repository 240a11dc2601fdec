from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from nativepurchases.decider import PurchaseAction, decide
from nativepurchases.services.records import PurchaseRecord
from nativepurchases.services.telemetry import TelemetryService


@dataclass(frozen=True)
class FinishResult:
    ok: bool
    message: str


class PurchaseFinisher(Protocol):
    def consume(self, purchase_token: str) -> FinishResult: ...

    def acknowledge(self, purchase_token: str) -> FinishResult: ...


@dataclass
class MockPurchaseFinisher:
    """Finisher that always succeeds and records the tokens it was given.

    Real implementations (Play Billing consume/acknowledge calls) replace this.
    """

    consumed: list[str] = field(default_factory=list)
    acknowledged: list[str] = field(default_factory=list)

    def consume(self, purchase_token: str) -> FinishResult:
        self.consumed.append(purchase_token)
        return FinishResult(ok=True, message=f"Mock consume successful: {purchase_token}")

    def acknowledge(self, purchase_token: str) -> FinishResult:
        self.acknowledged.append(purchase_token)
        return FinishResult(ok=True, message=f"Mock acknowledge successful: {purchase_token}")


@dataclass(frozen=True)
class PurchaseOutcome:
    action: PurchaseAction
    result: FinishResult | None = None


def handle_purchase(
    record: PurchaseRecord,
    *,
    is_consumable: bool,
    finisher: PurchaseFinisher,
    telemetry: TelemetryService | None = None,
) -> PurchaseOutcome:
    """Decide what a purchase needs and hand it to the finisher.

    At most one finisher call is made. Failures come back in the result.
    """
    action = decide(is_consumable, record)
    result: FinishResult | None = None
    if action is PurchaseAction.CONSUME:
        result = finisher.consume(record.purchase_token)
    elif action is PurchaseAction.ACKNOWLEDGE:
        result = finisher.acknowledge(record.purchase_token)

    if telemetry is not None:
        telemetry.log(
            "purchase_action",
            {
                "purchase_token": record.purchase_token,
                "product_ids": list(record.product_ids),
                "is_consumable": is_consumable,
                "action": action.value,
                "ok": result.ok if result is not None else None,
            },
        )
    return PurchaseOutcome(action=action, result=result)
