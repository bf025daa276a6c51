# altrion/domain/models.py

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

ASSET_TYPES = ("crypto", "stock", "stablecoin")


@dataclass(frozen=True)
class Holding:
    """One position of one symbol on one platform (immutable snapshot)."""
    id: str
    symbol: str
    name: str
    type: str
    amount: float
    price: float
    value: float
    change24h: float
    platform: str


@dataclass(frozen=True)
class PlatformHolding:
    platform: str
    amount: float
    value: float


@dataclass
class AggregatedAsset:
    id: str
    symbol: str
    name: str
    type: str
    price: float
    change24h: float
    amount: float
    value: float
    platforms: List[str] = field(default_factory=list)
    holdings: List[PlatformHolding] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "symbol": self.symbol,
            "name": self.name,
            "type": self.type,
            "price": self.price,
            "change24h": self.change24h,
            "totalAmount": self.amount,
            "totalValue": self.value,
            "platforms": list(self.platforms),
            "holdings": [
                {"platform": h.platform, "amount": h.amount, "value": h.value}
                for h in self.holdings
            ],
        }


@dataclass(frozen=True)
class AssetSnapshot:
    """Pledged collateral as it was at submission time."""
    name: str
    symbol: str
    amount: float
    value: float

    def to_dict(self) -> Dict:
        return {"name": self.name, "symbol": self.symbol, "amount": self.amount, "value": self.value}

    @classmethod
    def from_dict(cls, d: Dict) -> "AssetSnapshot":
        return cls(
            name=str(d.get("name", "")),
            symbol=str(d["symbol"]),
            amount=float(d["amount"]),
            value=float(d["value"]),
        )


@dataclass(frozen=True)
class ApplicationSnapshot:
    """Figures captured on the review step and handed to the store."""
    total_collateral: float
    loan_amount: float
    interest_rate: float
    ltv: float
    selected_assets: Tuple[AssetSnapshot, ...]


@dataclass
class LoanApplication:
    id: str
    status: str
    total_collateral: float
    loan_amount: float
    interest_rate: float
    ltv: float
    selected_assets: Tuple[AssetSnapshot, ...]
    submitted_at: str
    updated_at: str

    def to_dict(self) -> Dict:
        # camelCase keys match the web client's stored shape
        return {
            "id": self.id,
            "status": self.status,
            "totalCollateral": self.total_collateral,
            "loanAmount": self.loan_amount,
            "interestRate": self.interest_rate,
            "ltv": self.ltv,
            "selectedAssets": [a.to_dict() for a in self.selected_assets],
            "submittedAt": self.submitted_at,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, d: Dict) -> "LoanApplication":
        return cls(
            id=d["id"],
            status=d["status"],
            total_collateral=float(d["totalCollateral"]),
            loan_amount=float(d["loanAmount"]),
            interest_rate=float(d["interestRate"]),
            ltv=float(d["ltv"]),
            selected_assets=tuple(AssetSnapshot.from_dict(a) for a in d.get("selectedAssets", [])),
            submitted_at=d["submittedAt"],
            updated_at=d["updatedAt"],
        )


@dataclass(frozen=True)
class Eligibility:
    total_collateral: float
    max_loan_amount: float
    interest_rate: float
    ltv: float


@dataclass(frozen=True)
class ScheduleRow:
    month: int
    payment: float
    principal: float
    interest: float
    balance: float


@dataclass(frozen=True)
class Schedule:
    rows: Tuple[ScheduleRow, ...]
    monthly_payment: float
    total_interest: float


@dataclass
class ConnectionAttempt:
    platform_id: str
    status: str = "pending"
    attempts: int = 0
    error: Optional[str] = None

    def to_dict(self) -> Dict:
        return {
            "platformId": self.platform_id,
            "status": self.status,
            "attempts": self.attempts,
            "error": self.error,
        }
