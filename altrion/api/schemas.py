
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..domain.errors import BadRequest


def _require_object(body: Any) -> Dict:
    if not isinstance(body, dict):
        raise BadRequest("request body must be a JSON object")
    return body


def _quantity(v: Any) -> float:
    if isinstance(v, bool):
        raise ValueError("boolean quantity")
    x = float(v)
    if not math.isfinite(x):
        raise ValueError("non-finite quantity")
    return x


@dataclass
class CollateralRequest:
    """
    Either explicit pledged quantities, or asset ids pledged in full:
      {"selection": {"1": 0.75, "4": 5000}}
      {"assetIds": ["1", "2"]}
    Percent overrides: {"percentages": {"2": 50}}
    """
    selection: Dict[str, float] = field(default_factory=dict)
    asset_ids: List[str] = field(default_factory=list)
    percentages: Dict[str, float] = field(default_factory=dict)

    @classmethod
    def from_json(cls, body: Any) -> "CollateralRequest":
        body = _require_object(body)
        sel = body.get("selection") or {}
        ids = body.get("assetIds") or []
        pct = body.get("percentages") or {}
        if not isinstance(sel, dict) or not isinstance(ids, list) or not isinstance(pct, dict):
            raise BadRequest("selection must be an object, assetIds a list, percentages an object")
        try:
            return cls(
                selection={str(k): _quantity(v) for k, v in sel.items()},
                asset_ids=[str(i) for i in ids],
                percentages={str(k): _quantity(v) for k, v in pct.items()},
            )
        except (TypeError, ValueError):
            raise BadRequest("collateral quantities must be finite numbers")


@dataclass
class StatusUpdate:
    status: str

    @classmethod
    def from_json(cls, body: Any) -> "StatusUpdate":
        raw = _require_object(body).get("status")
        if raw is not None and not isinstance(raw, str):
            raise BadRequest("status must be a string")
        status = (raw or "").strip().lower()
        if not status:
            raise BadRequest("status is required")
        return cls(status=status)


@dataclass
class ConnectRequest:
    platforms: List[str]

    @classmethod
    def from_json(cls, body: Any) -> "ConnectRequest":
        ids = _require_object(body).get("platforms") or []
        if not isinstance(ids, list) or not ids:
            raise BadRequest("platforms is required")
        if not all(isinstance(p, str) for p in ids):
            raise BadRequest("platforms must be a list of platform ids")
        return cls(platforms=ids)


def parse_months(raw: Optional[str], default: int, maximum: int) -> int:
    if raw in (None, ""):
        return default
    try:
        months = int(raw)
    except (TypeError, ValueError):
        raise BadRequest("months must be an integer")
    if not 0 < months <= maximum:
        raise BadRequest(f"months must be between 1 and {maximum}")
    return months
