from __future__ import annotations

import json
from pathlib import Path

from nativepurchases.decider import PurchaseAction, PurchaseState
from nativepurchases.services.finisher import (
    FinishResult,
    MockPurchaseFinisher,
    handle_purchase,
)
from nativepurchases.services.records import PurchaseRecord
from nativepurchases.services.telemetry import TelemetryService


class _FailingFinisher:
    def consume(self, purchase_token: str) -> FinishResult:
        return FinishResult(ok=False, message="Item not owned")

    def acknowledge(self, purchase_token: str) -> FinishResult:
        return FinishResult(ok=False, message="Service unavailable")


def _record(state: PurchaseState, acknowledged: bool, token: str = "tok") -> PurchaseRecord:
    return PurchaseRecord(
        purchase_token=token,
        purchase_state=state,
        acknowledged=acknowledged,
        product_ids=("gems_100",),
    )


def test_consumable_is_consumed() -> None:
    finisher = MockPurchaseFinisher()
    outcome = handle_purchase(_record(PurchaseState.PURCHASED, False), is_consumable=True, finisher=finisher)
    assert outcome.action is PurchaseAction.CONSUME
    assert outcome.result is not None and outcome.result.ok
    assert finisher.consumed == ["tok"]
    assert finisher.acknowledged == []


def test_non_consumable_is_acknowledged_once() -> None:
    finisher = MockPurchaseFinisher()
    outcome = handle_purchase(_record(PurchaseState.PURCHASED, False), is_consumable=False, finisher=finisher)
    assert outcome.action is PurchaseAction.ACKNOWLEDGE
    assert finisher.acknowledged == ["tok"]
    assert finisher.consumed == []

    outcome2 = handle_purchase(_record(PurchaseState.PURCHASED, True), is_consumable=False, finisher=finisher)
    assert outcome2.action is PurchaseAction.NONE
    assert outcome2.result is None
    assert finisher.acknowledged == ["tok"]


def test_pending_purchase_is_left_alone() -> None:
    finisher = MockPurchaseFinisher()
    outcome = handle_purchase(_record(PurchaseState.PENDING, False), is_consumable=True, finisher=finisher)
    assert outcome.action is PurchaseAction.NONE
    assert outcome.result is None
    assert finisher.consumed == []
    assert finisher.acknowledged == []


def test_failure_is_returned_not_retried() -> None:
    outcome = handle_purchase(
        _record(PurchaseState.PURCHASED, False), is_consumable=False, finisher=_FailingFinisher()
    )
    assert outcome.action is PurchaseAction.ACKNOWLEDGE
    assert outcome.result == FinishResult(ok=False, message="Service unavailable")


def test_telemetry_records_each_decision(tmp_path: Path) -> None:
    telemetry = TelemetryService(tmp_path / "userdata" / "telemetry.jsonl")
    finisher = MockPurchaseFinisher()
    handle_purchase(
        _record(PurchaseState.PURCHASED, False, token="a"),
        is_consumable=True,
        finisher=finisher,
        telemetry=telemetry,
    )
    handle_purchase(
        _record(PurchaseState.PENDING, False, token="b"),
        is_consumable=False,
        finisher=finisher,
        telemetry=telemetry,
    )

    lines = telemetry.path.read_text(encoding="utf-8").splitlines()
    events = [json.loads(line) for line in lines]
    assert [e["type"] for e in events] == ["purchase_action", "purchase_action"]
    first = events[0]["payload"]
    assert first == {
        "purchase_token": "a",
        "product_ids": ["gems_100"],
        "is_consumable": True,
        "action": "consume",
        "ok": True,
    }
    second = events[1]["payload"]
    assert isinstance(second, dict)
    assert second["action"] == "none"
    assert second["ok"] is None
    assert "ts" in events[0]
