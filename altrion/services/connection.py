# altrion/services/connection.py

import asyncio
import random
from typing import Awaitable, Callable, Dict, List, Optional

from ..domain.errors import ConflictError
from ..domain.models import ConnectionAttempt
from ..utils.config import settings
from ..utils.http import post
from ..utils.logging import get_logger

log = get_logger(__name__)

PENDING = "pending"
CONNECTING = "connecting"
SUCCESS = "success"
ERROR = "error"

Connector = Callable[[str], Awaitable[bool]]

# Linkable platforms shown on the onboarding screen
PLATFORMS: Dict[str, List[Dict[str, str]]] = {
    "crypto": [
        {"id": "metamask", "name": "MetaMask", "category": "crypto"},
        {"id": "coinbase", "name": "Coinbase", "category": "crypto"},
        {"id": "binance", "name": "Binance", "category": "crypto"},
        {"id": "phantom", "name": "Phantom", "category": "crypto"},
        {"id": "ledger", "name": "Ledger", "category": "crypto"},
        {"id": "trustwallet", "name": "Trust Wallet", "category": "crypto"},
    ],
    "banks": [
        {"id": "chase", "name": "Chase", "category": "bank"},
        {"id": "bofa", "name": "Bank of America", "category": "bank"},
        {"id": "wells", "name": "Wells Fargo", "category": "bank"},
        {"id": "citi", "name": "Citibank", "category": "bank"},
    ],
    "brokers": [
        {"id": "robinhood", "name": "Robinhood", "category": "broker"},
        {"id": "schwab", "name": "Charles Schwab", "category": "broker"},
        {"id": "fidelity", "name": "Fidelity", "category": "broker"},
        {"id": "etrade", "name": "E*TRADE", "category": "broker"},
    ],
}


def platform_by_id(platform_id: str) -> Optional[Dict[str, str]]:
    for group in PLATFORMS.values():
        for p in group:
            if p["id"] == platform_id:
                return p
    return None


# -------------------- connectors --------------------

def simulated_connector(
    success_rate: float = None,
    min_delay: float = 1.0,
    max_delay: float = 3.0,
    rng: random.Random = None,
) -> Connector:
    """Fake handshake: sleeps a random latency, then succeeds with `success_rate`."""
    rate = settings.CONNECT_SUCCESS_RATE if success_rate is None else success_rate
    rng = rng or random.Random()

    async def connect(platform_id: str) -> bool:
        await asyncio.sleep(rng.uniform(min_delay, max_delay))
        return rng.random() < rate

    return connect


class HttpPlatformConnector:
    """
    Handshake against the account-linking service:
      POST {base}/platforms/<id>/connect  ->  {"connected": true|false}
    The blocking request runs in a worker thread.
    """

    def __init__(self, base_url: str = None, timeout: float = 10):
        self.base_url = (base_url or settings.PLATFORM_API_BASE).rstrip("/")
        self.timeout = timeout

    async def __call__(self, platform_id: str) -> bool:
        url = f"{self.base_url}/platforms/{platform_id}/connect"
        data = await asyncio.to_thread(post, url, None, self.timeout, 0)
        return bool(data.get("connected"))


def default_connector() -> Connector:
    if settings.PLATFORM_API_BASE:
        return HttpPlatformConnector()
    return simulated_connector()


# -------------------- simulator --------------------

class ConnectionStatusSimulator:
    """
    Per-platform link attempts: pending -> connecting -> success | error,
    and error -> connecting on retry.

    Attempts run concurrently and only ever write their own slot. A failure,
    exception or timeout in one never touches the others.
    """

    def __init__(self, connector: Connector = None, timeout: Optional[float] = None):
        self.connector = connector or default_connector()
        self.timeout = timeout
        self.attempts: List[ConnectionAttempt] = []

    @property
    def all_complete(self) -> bool:
        return all(a.status in (SUCCESS, ERROR) for a in self.attempts)

    @property
    def success_count(self) -> int:
        return sum(1 for a in self.attempts if a.status == SUCCESS)

    def index_of(self, platform_id: str) -> int:
        for i, a in enumerate(self.attempts):
            if a.platform_id == platform_id:
                return i
        return -1

    def reset(self, platform_ids: List[str]) -> None:
        self.attempts = [ConnectionAttempt(platform_id=p) for p in platform_ids]

    async def start(self, platform_ids: List[str]) -> List[ConnectionAttempt]:
        self.reset(platform_ids)
        await asyncio.gather(*(self._run(a) for a in self.attempts))
        log.info(
            f"platform connections finished ok={self.success_count} total={len(self.attempts)}"
        )
        return self.attempts

    async def retry(self, index: int) -> ConnectionAttempt:
        if not 0 <= index < len(self.attempts):
            raise IndexError(f"no connection attempt at index {index}")
        attempt = self.attempts[index]
        if attempt.status != ERROR:
            raise ConflictError(f"cannot retry {attempt.platform_id} while {attempt.status}")
        await self._run(attempt)
        return attempt

    async def _run(self, attempt: ConnectionAttempt) -> None:
        attempt.status = CONNECTING
        attempt.attempts += 1
        attempt.error = None
        try:
            if self.timeout is not None:
                ok = await asyncio.wait_for(self.connector(attempt.platform_id), self.timeout)
            else:
                ok = await self.connector(attempt.platform_id)
        except asyncio.TimeoutError:
            log.warning(f"connect timed out platform={attempt.platform_id} after={self.timeout}s")
            attempt.status = ERROR
            attempt.error = "timeout"
            return
        except Exception as e:
            log.warning(f"connect failed platform={attempt.platform_id} err={e}")
            attempt.status = ERROR
            attempt.error = str(e) or e.__class__.__name__
            return

        attempt.status = SUCCESS if ok else ERROR
        if not ok:
            attempt.error = "rejected"
