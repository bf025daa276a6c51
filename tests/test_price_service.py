
from unittest.mock import patch

import pytest

from altrion.metrics.cache import TTLCache, price_cache
from altrion.services import price_service
from altrion.services.holdings_source import load_holdings


@pytest.fixture(autouse=True)
def empty_cache():
    price_cache.clear()
    yield
    price_cache.clear()


def test_reprice_updates_crypto_only(holdings):
    quotes = {"bitcoin": {"price": 50000.0, "change24h": 1.0}, "ethereum": {"price": 3000.0, "change24h": -2.0}}
    with patch("altrion.metrics.fetcher.fetch_spot_prices", return_value=quotes):
        out = price_service.reprice(holdings)
    by_sym = {h.symbol: h for h in out}
    assert by_sym["BTC"].price == 50000
    assert by_sym["BTC"].value == pytest.approx(75000)
    assert by_sym["ETH"].change24h == -2.0
    assert by_sym["AAPL"] is next(h for h in holdings if h.symbol == "AAPL")
    # originals untouched
    assert next(h for h in holdings if h.symbol == "BTC").price == 45000


def test_fetch_failure_keeps_prices(holdings):
    with patch("altrion.metrics.fetcher.fetch_spot_prices", side_effect=RuntimeError("429")):
        out = price_service.reprice(holdings)
    assert [h.price for h in out] == [h.price for h in holdings]


def test_quotes_are_cached():
    quotes = {"bitcoin": {"price": 50000.0, "change24h": 1.0}}
    with patch("altrion.metrics.fetcher.fetch_spot_prices", return_value=quotes) as fetch:
        price_service.spot_prices(["BTC"])
        price_service.spot_prices(["BTC"])
    assert fetch.call_count == 1


def test_load_holdings_reprice_flag():
    with patch("altrion.services.price_service.reprice", side_effect=lambda hs: hs[:1]) as rp:
        assert len(load_holdings(reprice=True)) == 1
    rp.assert_called_once()
    assert len(load_holdings(reprice=False)) == 5


def test_ttl_cache_expiry_and_eviction():
    now = [0.0]
    cache = TTLCache(ttl_seconds=60, max_size=2, clock=lambda: now[0])
    cache.set("a", 1)
    cache.set("b", 2)
    cache.set("c", 3)
    assert cache.get("a") is None
    assert cache.get("c") == 3
    now[0] = 61
    assert cache.get("b") is None
