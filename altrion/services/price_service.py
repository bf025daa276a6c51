# altrion/services/price_service.py

from dataclasses import replace
from typing import Dict, List
from ..domain.models import Holding
from ..metrics import fetcher
from ..metrics.cache import price_cache
from ..utils.config import settings
from ..utils.logging import get_logger

log = get_logger(__name__)


def coin_ids() -> Dict[str, str]:
    """SYMBOL -> coingecko id, from COINGECKO_IDS ("BTC:bitcoin,ETH:ethereum")."""
    out = {}
    for pair in settings.COINGECKO_IDS.split(","):
        if ":" in pair:
            sym, cid = pair.split(":", 1)
            out[sym.strip().upper()] = cid.strip()
    return out


def spot_prices(symbols: List[str]) -> Dict[str, Dict[str, float]]:
    """Latest price/change24h per symbol; cached 60s, missing symbols omitted."""
    ids = coin_ids()
    out: Dict[str, Dict[str, float]] = {}
    to_fetch = {}
    for sym in symbols:
        cid = ids.get(sym.upper())
        if not cid:
            continue
        cached = price_cache.get(cid)
        if cached is not None:
            out[sym] = cached
        else:
            to_fetch[cid] = sym

    if to_fetch:
        try:
            fresh = fetcher.fetch_spot_prices(list(to_fetch))
        except Exception as e:
            log.warning(f"coingecko price fetch failed ids={list(to_fetch)} err={e}")
            fresh = {}
        for cid, quote in fresh.items():
            price_cache.set(cid, quote)
            if cid in to_fetch:
                out[to_fetch[cid]] = quote
    return out


def reprice(holdings: List[Holding]) -> List[Holding]:
    """New holdings with live crypto prices; others are returned unchanged."""
    symbols = sorted({h.symbol for h in holdings if h.type in ("crypto", "stablecoin")})
    quotes = spot_prices(symbols)
    out = []
    for h in holdings:
        q = quotes.get(h.symbol)
        if q is None:
            out.append(h)
            continue
        out.append(replace(h, price=q["price"], value=h.amount * q["price"], change24h=q["change24h"]))
    return out
