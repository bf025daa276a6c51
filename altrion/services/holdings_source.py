# altrion/services/holdings_source.py

from typing import Dict, List
from ..domain.models import ASSET_TYPES, Holding
from ..utils.config import settings
from ..utils.logging import get_logger

log = get_logger(__name__)

# Demo portfolio served until real account linking is wired in.
DEMO_HOLDINGS: List[Dict] = [
    {"id": "1", "symbol": "BTC",  "name": "Bitcoin",    "amount": 1.5,   "price": 45000,  "value": 67500,   "change24h": 3.2,  "platform": "Coinbase",       "type": "crypto"},
    {"id": "2", "symbol": "ETH",  "name": "Ethereum",   "amount": 12.5,  "price": 2500,   "value": 31250,   "change24h": -1.5, "platform": "MetaMask",       "type": "crypto"},
    {"id": "3", "symbol": "AAPL", "name": "Apple Inc.", "amount": 50,    "price": 190,    "value": 9500,    "change24h": 0.8,  "platform": "Robinhood",      "type": "stock"},
    {"id": "4", "symbol": "USDC", "name": "USD Coin",   "amount": 15000, "price": 1,      "value": 15000,   "change24h": 0,    "platform": "Coinbase",       "type": "stablecoin"},
    {"id": "5", "symbol": "TSLA", "name": "Tesla Inc.", "amount": 15,    "price": 280.02, "value": 4200.32, "change24h": 5.2,  "platform": "Charles Schwab", "type": "stock"},
]


def holding_from_dict(d: Dict) -> Holding:
    amount = float(d.get("amount") or 0)
    price = float(d.get("price") or 0)
    value = d.get("value")
    asset_type = str(d.get("type") or "crypto")
    if asset_type not in ASSET_TYPES:
        raise ValueError(f"unknown asset type {asset_type!r} for holding {d.get('id')}")
    return Holding(
        id=str(d["id"]),
        symbol=str(d["symbol"]),
        name=str(d.get("name") or d["symbol"]),
        type=asset_type,
        amount=amount,
        price=price,
        value=float(value) if value is not None else amount * price,
        change24h=float(d.get("change24h") or 0),
        platform=str(d.get("platform") or ""),
    )


def load_holdings(reprice: bool = None) -> List[Holding]:
    """
    Current holdings snapshot. With `reprice` (default: settings.PRICE_REFRESH)
    crypto prices are refreshed from CoinGecko.
    """
    holdings = [holding_from_dict(d) for d in DEMO_HOLDINGS]
    if reprice is None:
        reprice = settings.PRICE_REFRESH
    if reprice:
        from .price_service import reprice as _reprice
        holdings = _reprice(holdings)
    log.debug(f"loaded holdings count={len(holdings)} repriced={bool(reprice)}")
    return holdings


def catalog_by_id(holdings: List[Holding]) -> Dict[str, Holding]:
    return {h.id: h for h in holdings}
