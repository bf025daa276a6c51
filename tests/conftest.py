
import pytest

from altrion.app import create_app
from altrion.services.holdings_source import catalog_by_id, holding_from_dict, load_holdings
from altrion.services.storage import MemoryBackend


@pytest.fixture()
def holdings():
    return load_holdings(reprice=False)


@pytest.fixture()
def catalog(holdings):
    return catalog_by_id(holdings)


@pytest.fixture()
def multi_platform_holdings():
    rows = [
        {"id": "a", "symbol": "BTC", "name": "Bitcoin", "amount": 1.0, "price": 45000, "value": 45000, "change24h": 3.2, "platform": "Coinbase", "type": "crypto"},
        {"id": "b", "symbol": "ETH", "name": "Ethereum", "amount": 2.0, "price": 2500, "value": 5000, "change24h": -1.5, "platform": "MetaMask", "type": "crypto"},
        {"id": "c", "symbol": "BTC", "name": "Bitcoin", "amount": 0.5, "price": 45000, "value": 22500, "change24h": 3.2, "platform": "Ledger", "type": "crypto"},
        {"id": "d", "symbol": "BTC", "name": "Bitcoin", "amount": 0.25, "price": 45000, "value": 11250, "change24h": 3.2, "platform": "Coinbase", "type": "crypto"},
    ]
    return [holding_from_dict(r) for r in rows]


@pytest.fixture()
def backend():
    return MemoryBackend()


@pytest.fixture()
def client(backend):
    app = create_app(backend=backend)
    app.config["TESTING"] = True
    return app.test_client()
