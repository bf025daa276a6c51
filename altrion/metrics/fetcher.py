from typing import Dict, List
from pycoingecko import CoinGeckoAPI

cg = CoinGeckoAPI()

def fetch_spot_prices(ids: List[str]) -> Dict[str, Dict[str, float]]:
    """
    {coingecko_id: {"price": usd, "change24h": pct}} for the ids CoinGecko knows.
    """
    if not ids:
        return {}
    data = cg.get_price(
        ids=",".join(ids), vs_currencies="usd", include_24hr_change="true"
    )
    out = {}
    for coin_id, row in data.items():
        if "usd" not in row:
            continue
        out[coin_id] = {
            "price": float(row["usd"]),
            "change24h": float(row.get("usd_24h_change") or 0.0),
        }
    return out
