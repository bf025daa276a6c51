# simple ttl cache with dict, no extra deps
import time
from typing import Any, Tuple

class TTLCache:
    def __init__(self, ttl_seconds: int = 60, max_size: int = 1024, clock=time.time):
        self.ttl = ttl_seconds
        self.max = max_size
        self.clock = clock
        self.store: dict[str, Tuple[float, Any]] = {}

    def get(self, key: str):
        item = self.store.get(key)
        if not item:
            return None
        ts, val = item
        if self.clock() - ts > self.ttl:
            self.store.pop(key, None)
            return None
        return val

    def set(self, key: str, value: Any):
        if key not in self.store and len(self.store) >= self.max:
            # oldest insertion goes first
            self.store.pop(next(iter(self.store)))
        self.store[key] = (self.clock(), value)

    def clear(self):
        self.store.clear()

price_cache = TTLCache(ttl_seconds=60)
