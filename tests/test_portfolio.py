
import logging

import pytest

from altrion.domain.errors import BadRequest
from altrion.services.holdings_source import holding_from_dict
from altrion.services.portfolio import (
    aggregate,
    allocation_by_type,
    filter_by_type,
    find_asset,
    flatten,
    platform_summary,
    portfolio_totals,
)


def test_groups_by_symbol_in_first_seen_order(multi_platform_holdings):
    out = aggregate(multi_platform_holdings)
    assert [a.symbol for a in out] == ["BTC", "ETH"]
    btc = out[0]
    assert btc.id == "a"
    assert btc.amount == pytest.approx(1.75)
    assert btc.value == pytest.approx(78750)
    assert btc.platforms == ["Coinbase", "Ledger"]
    assert len(btc.holdings) == 3


def test_value_is_conserved(multi_platform_holdings, holdings):
    for hs in (multi_platform_holdings, holdings):
        assert sum(a.value for a in aggregate(hs)) == pytest.approx(sum(h.value for h in hs))


def test_aggregating_flattened_output_is_stable(multi_platform_holdings):
    once = aggregate(multi_platform_holdings)
    twice = aggregate(flatten(once))
    assert [(a.symbol, a.amount, a.value) for a in twice] == [(a.symbol, a.amount, a.value) for a in once]


def test_symbol_match_is_case_sensitive():
    hs = [
        holding_from_dict({"id": "1", "symbol": "btc", "amount": 1, "price": 10, "platform": "X"}),
        holding_from_dict({"id": "2", "symbol": "BTC", "amount": 1, "price": 10, "platform": "Y"}),
    ]
    assert len(aggregate(hs)) == 2


def test_input_is_not_mutated(multi_platform_holdings):
    before = list(multi_platform_holdings)
    aggregate(multi_platform_holdings)
    assert multi_platform_holdings == before


def test_divergent_price_keeps_first_and_warns(caplog):
    hs = [
        holding_from_dict({"id": "1", "symbol": "ETH", "amount": 1, "price": 2500, "platform": "A"}),
        holding_from_dict({"id": "2", "symbol": "ETH", "amount": 1, "price": 2600, "platform": "B"}),
    ]
    with caplog.at_level(logging.WARNING):
        out = aggregate(hs)
    assert out[0].price == 2500
    assert out[0].value == pytest.approx(5100)
    assert any("divergent price" in r.getMessage() for r in caplog.records)


def test_divergent_change_keeps_first_and_warns(caplog):
    hs = [
        holding_from_dict({"id": "1", "symbol": "SOL", "amount": 2, "price": 100, "change24h": 1.5, "platform": "A"}),
        holding_from_dict({"id": "2", "symbol": "SOL", "amount": 1, "price": 100, "change24h": -4.0, "platform": "B"}),
    ]
    with caplog.at_level(logging.WARNING):
        out = aggregate(hs)
    assert out[0].change24h == 1.5
    assert any("divergent change24h" in r.getMessage() for r in caplog.records)


def test_unknown_asset_type_is_rejected():
    with pytest.raises(ValueError):
        holding_from_dict({"id": "9", "symbol": "GLD", "amount": 1, "price": 2000, "type": "commodity"})


def test_filter_by_tab(holdings):
    assets = aggregate(holdings)
    assert {a.symbol for a in filter_by_type(assets, "stocks")} == {"AAPL", "TSLA"}
    assert [a.symbol for a in filter_by_type(assets, "cash")] == ["USDC"]
    assert len(filter_by_type(assets, "all")) == len(assets)
    with pytest.raises(BadRequest):
        filter_by_type(assets, "bonds")


def test_find_asset_is_case_insensitive(holdings):
    btc = find_asset(holdings, "btc")
    assert btc is not None and btc.symbol == "BTC"
    assert find_asset(holdings, "DOGE") is None


def test_platform_summary_sorted_by_value(holdings):
    out = platform_summary(holdings)
    assert out[0]["name"] == "Coinbase"
    assert out[0]["assetsCount"] == 2
    assert out[0]["totalValue"] == pytest.approx(82500)
    values = [p["totalValue"] for p in out]
    assert values == sorted(values, reverse=True)


def test_totals_and_allocation(holdings):
    totals = portfolio_totals(holdings)
    assert totals["totalValue"] == pytest.approx(127450.32)
    alloc = allocation_by_type(holdings)
    assert alloc["crypto"] == pytest.approx(98750)
    assert alloc["stock"] == pytest.approx(13700.32)
    assert alloc["stablecoin"] == pytest.approx(15000)
    assert portfolio_totals([]) == {"totalValue": 0, "change24h": 0.0}
