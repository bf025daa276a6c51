# altrion/services/storage.py
"""
Key-value blob stores for loan applications.

Documents are grouped by namespace (one per user) and keyed by id.
Backend errors are not caught here; callers see them as-is.
"""
from copy import deepcopy
from typing import Any, Dict, List, Optional

from ..utils.config import settings
from ..utils.logging import get_logger

log = get_logger(__name__)


class KeyValueBackend:
    def get_all(self, namespace: str) -> List[Dict[str, Any]]:
        raise NotImplementedError

    def get(self, namespace: str, key: str) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    def put(self, namespace: str, key: str, doc: Dict[str, Any]) -> None:
        raise NotImplementedError

    def delete(self, namespace: str, key: str) -> bool:
        raise NotImplementedError


class MemoryBackend(KeyValueBackend):
    """Process-local store; documents are copied in and out."""

    def __init__(self):
        self._data: Dict[str, Dict[str, Dict[str, Any]]] = {}

    def get_all(self, namespace):
        return [deepcopy(d) for d in self._data.get(namespace, {}).values()]

    def get(self, namespace, key):
        doc = self._data.get(namespace, {}).get(key)
        return deepcopy(doc) if doc is not None else None

    def put(self, namespace, key, doc):
        self._data.setdefault(namespace, {})[key] = deepcopy(doc)

    def delete(self, namespace, key):
        return self._data.get(namespace, {}).pop(key, None) is not None


class MongoBackend(KeyValueBackend):
    """
    One Mongo document per application:
      { namespace, key, doc }
    with a unique index on (namespace, key).
    """

    def __init__(self, collection):
        self._col = collection
        self._col.create_index([("namespace", 1), ("key", 1)], unique=True)

    @classmethod
    def from_uri(cls, uri: str, db_name: str = "altrion", collection: str = "loan_applications"):
        from pymongo import MongoClient
        from pymongo.errors import ConfigurationError
        client = MongoClient(uri)
        try:
            db = client.get_default_database()
        except ConfigurationError:
            db = client[db_name]
        return cls(db[collection])

    def get_all(self, namespace):
        return [row["doc"] for row in self._col.find({"namespace": namespace}, {"_id": 0, "doc": 1})]

    def get(self, namespace, key):
        row = self._col.find_one({"namespace": namespace, "key": key}, {"_id": 0, "doc": 1})
        return row["doc"] if row else None

    def put(self, namespace, key, doc):
        self._col.replace_one(
            {"namespace": namespace, "key": key},
            {"namespace": namespace, "key": key, "doc": doc},
            upsert=True,
        )

    def delete(self, namespace, key):
        return self._col.delete_one({"namespace": namespace, "key": key}).deleted_count > 0


_backend: Optional[KeyValueBackend] = None


def get_backend() -> KeyValueBackend:
    """Shared backend: Mongo when MONGODB_URI is set, memory otherwise."""
    global _backend
    if _backend is None:
        if settings.MONGODB_URI:
            _backend = MongoBackend.from_uri(settings.MONGODB_URI, settings.MONGODB_DB)
            log.info("loan applications stored in MongoDB")
        else:
            _backend = MemoryBackend()
            log.info("MONGODB_URI not set; loan applications kept in memory")
    return _backend
