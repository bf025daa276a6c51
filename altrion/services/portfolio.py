# altrion/services/portfolio.py

from typing import Dict, List, Optional
from ..domain.errors import BadRequest
from ..domain.models import AggregatedAsset, Holding, PlatformHolding
from ..utils.logging import get_logger

log = get_logger(__name__)

# Dashboard tabs -> asset type (None = everything)
TAB_TYPES = {
    "all": None,
    "crypto": "crypto",
    "stocks": "stock",
    "cash": "stablecoin",
}


def aggregate(holdings: List[Holding]) -> List[AggregatedAsset]:
    """
    Group per-platform holdings by symbol (exact, case-sensitive).

    Output keeps first-occurrence order. Amount and value are summed; price,
    change24h, name and type come from the first holding seen for the symbol.
    Diverging metadata on later holdings is logged, not reconciled.
    """
    by_symbol: Dict[str, AggregatedAsset] = {}
    for h in holdings:
        existing = by_symbol.get(h.symbol)
        if existing is None:
            by_symbol[h.symbol] = AggregatedAsset(
                id=h.id,
                symbol=h.symbol,
                name=h.name,
                type=h.type,
                price=h.price,
                change24h=h.change24h,
                amount=h.amount,
                value=h.value,
                platforms=[h.platform],
                holdings=[PlatformHolding(h.platform, h.amount, h.value)],
            )
            continue

        _warn_on_divergence(existing, h)
        existing.amount += h.amount
        existing.value += h.value
        existing.holdings.append(PlatformHolding(h.platform, h.amount, h.value))
        if h.platform not in existing.platforms:
            existing.platforms.append(h.platform)

    return list(by_symbol.values())


def _warn_on_divergence(first: AggregatedAsset, h: Holding) -> None:
    fields = [
        name for name, a, b in (
            ("price", first.price, h.price),
            ("name", first.name, h.name),
            ("type", first.type, h.type),
            ("change24h", first.change24h, h.change24h),
        )
        if a != b
    ]
    if fields:
        log.warning(
            f"divergent {','.join(fields)} for {h.symbol} on {h.platform}; "
            f"keeping values from first holding id={first.id}"
        )


def flatten(assets: List[AggregatedAsset]) -> List[Holding]:
    """One holding per aggregated asset (platforms joined)."""
    return [
        Holding(
            id=a.id,
            symbol=a.symbol,
            name=a.name,
            type=a.type,
            amount=a.amount,
            price=a.price,
            value=a.value,
            change24h=a.change24h,
            platform=", ".join(a.platforms),
        )
        for a in assets
    ]


def filter_by_type(assets: List, tab: str = "all") -> List:
    if tab not in TAB_TYPES:
        raise BadRequest(f"unknown asset tab: {tab}")
    wanted = TAB_TYPES[tab]
    if wanted is None:
        return list(assets)
    return [a for a in assets if a.type == wanted]


def find_asset(holdings: List[Holding], symbol: str) -> Optional[AggregatedAsset]:
    """Aggregated view of one symbol (case-insensitive), or None."""
    sym = (symbol or "").upper()
    matching = [h for h in holdings if h.symbol.upper() == sym]
    if not matching:
        return None
    return aggregate(matching)[0]


def allocation_by_type(holdings: List[Holding]) -> Dict[str, float]:
    out = {"crypto": 0.0, "stock": 0.0, "stablecoin": 0.0}
    for h in holdings:
        out[h.type] = out.get(h.type, 0.0) + h.value
    return out


def platform_summary(holdings: List[Holding]) -> List[Dict]:
    """Connected accounts: asset count and value per platform, largest first."""
    stats: Dict[str, Dict] = {}
    for h in holdings:
        s = stats.setdefault(h.platform, {"name": h.platform, "assetsCount": 0, "totalValue": 0.0})
        s["assetsCount"] += 1
        s["totalValue"] += h.value
    return sorted(stats.values(), key=lambda s: s["totalValue"], reverse=True)


def portfolio_totals(holdings: List[Holding]) -> Dict[str, float]:
    """Total value and value-weighted 24h change (percent)."""
    total = sum(h.value for h in holdings)
    change = sum(h.value * h.change24h for h in holdings) / total if total else 0.0
    return {"totalValue": total, "change24h": change}
