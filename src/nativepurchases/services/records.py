from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from jsonschema import Draft202012Validator

from nativepurchases.decider.types import PurchaseState
from nativepurchases.paths import get_paths


class PurchaseRecordError(RuntimeError):
    pass


def _load_json(path: Path) -> object:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise PurchaseRecordError(f"Missing purchases file: {path}") from e
    except json.JSONDecodeError as e:
        raise PurchaseRecordError(f"Invalid JSON in {path}: {e}") from e


def load_purchase_schema() -> object:
    return _load_json(get_paths().schema_dir / "purchase.schema.json")


def validate_json(instance: object, schema: object, *, context: str) -> None:
    validator = Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(instance), key=lambda e: e.path)
    if errors:
        lines = [f"Schema validation failed for {context}:"]
        for err in errors[:10]:
            loc = "/".join(str(p) for p in err.absolute_path)
            lines.append(f"- {loc}: {err.message}")
        raise PurchaseRecordError("\n".join(lines))


def _require_str(obj: Mapping[str, object], key: str) -> str:
    v = obj.get(key)
    if not isinstance(v, str):
        raise PurchaseRecordError(f"Expected string for {key}")
    return v


def _optional_str(obj: Mapping[str, object], key: str) -> str | None:
    v = obj.get(key)
    if v is None:
        return None
    if not isinstance(v, str):
        raise PurchaseRecordError(f"Expected string for {key}")
    return v


def _optional_int(obj: Mapping[str, object], key: str) -> int | None:
    v = obj.get(key)
    if v is None:
        return None
    if isinstance(v, float) and v.is_integer():
        return int(v)
    if not isinstance(v, int) or isinstance(v, bool):
        raise PurchaseRecordError(f"Expected int for {key}")
    return v


def _parse_product_ids(obj: Mapping[str, object]) -> tuple[str, ...]:
    raw = obj.get("productIds")
    if raw is None:
        single = _optional_str(obj, "productId")
        return (single,) if single is not None else ()
    if not isinstance(raw, list):
        raise PurchaseRecordError("productIds must be a list")
    ids: list[str] = []
    for item in raw:
        if not isinstance(item, str):
            raise PurchaseRecordError("productIds must contain strings")
        ids.append(item)
    return tuple(ids)


@dataclass(frozen=True)
class PurchaseRecord:
    """A purchase as reported by the billing client.

    Satisfies ``PurchaseDetails``, so it can be passed straight to ``decide``.
    """

    purchase_token: str
    purchase_state: PurchaseState
    acknowledged: bool = False
    product_ids: tuple[str, ...] = ()
    order_id: str | None = None
    quantity: int = 1
    purchase_time_millis: int | None = None

    @staticmethod
    def from_dict(d: Mapping[str, object]) -> "PurchaseRecord":
        token = _require_str(d, "purchaseToken")
        state_code = _optional_int(d, "purchaseState")
        if state_code is None:
            raise PurchaseRecordError("Expected int for purchaseState")
        acknowledged = d.get("acknowledged", False)
        if not isinstance(acknowledged, bool):
            raise PurchaseRecordError("Expected bool for acknowledged")
        quantity = _optional_int(d, "quantity")
        return PurchaseRecord(
            purchase_token=token,
            purchase_state=PurchaseState.from_code(state_code),
            acknowledged=acknowledged,
            product_ids=_parse_product_ids(d),
            order_id=_optional_str(d, "orderId"),
            quantity=quantity if quantity is not None else 1,
            purchase_time_millis=_optional_int(d, "purchaseTime"),
        )

    def to_dict(self) -> dict[str, object]:
        out: dict[str, object] = {
            "productIds": list(self.product_ids),
            "purchaseToken": self.purchase_token,
            "purchaseState": int(self.purchase_state),
            "acknowledged": self.acknowledged,
            "quantity": self.quantity,
        }
        if self.order_id is not None:
            out["orderId"] = self.order_id
        if self.purchase_time_millis is not None:
            out["purchaseTime"] = self.purchase_time_millis
        return out


def load_purchase(raw: object, *, context: str = "purchase") -> PurchaseRecord:
    validate_json(raw, load_purchase_schema(), context=context)
    if not isinstance(raw, dict):
        raise PurchaseRecordError(f"{context} must be an object")
    return PurchaseRecord.from_dict(raw)


def load_purchases(path: Path) -> list[PurchaseRecord]:
    raw = _load_json(path)
    if not isinstance(raw, dict):
        raise PurchaseRecordError(f"{path} must be an object")
    raw_list = raw.get("purchases")
    if not isinstance(raw_list, list):
        raise PurchaseRecordError(f"{path}.purchases must be a list")
    schema = load_purchase_schema()
    records: list[PurchaseRecord] = []
    for i, item in enumerate(raw_list):
        context = f"{path}#purchases/{i}"
        validate_json(item, schema, context=context)
        if not isinstance(item, dict):
            raise PurchaseRecordError(f"{context} must be an object")
        records.append(PurchaseRecord.from_dict(item))
    return records
