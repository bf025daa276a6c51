
import random
import re
from unittest.mock import MagicMock

import pytest

from altrion.domain.errors import BadRequest, ConflictError
from altrion.domain.models import ApplicationSnapshot, AssetSnapshot
from altrion.services.application_store import LoanApplicationStore, status_counts, store_for
from altrion.services.storage import MemoryBackend, MongoBackend

ID_RE = re.compile(r"^ALT-[A-Z0-9]{8}$")


class FakeClock:
    def __init__(self):
        self.n = 0

    def __call__(self):
        self.n += 1
        return f"2026-01-01T00:00:{self.n:02d}.000Z"


@pytest.fixture()
def snapshot():
    return ApplicationSnapshot(
        total_collateral=67500.0,
        loan_amount=40500.0,
        interest_rate=5.2,
        ltv=60.0,
        selected_assets=(AssetSnapshot(name="Bitcoin", symbol="BTC", amount=1.5, value=67500.0),),
    )


@pytest.fixture()
def store(backend):
    return LoanApplicationStore(backend, "user-1", clock=FakeClock())


def test_lifecycle(store, snapshot):
    app_id = store.add_application(snapshot)
    assert ID_RE.match(app_id)
    app = store.get_application_by_id(app_id)
    assert app.status == "pending"
    assert app.submitted_at == app.updated_at
    assert app.loan_amount == 40500
    assert app.selected_assets[0].symbol == "BTC"

    assert store.cancel_application(app_id) is True
    assert store.get_application_by_id(app_id) is None


def test_unknown_id_is_absent(store):
    assert store.get_application_by_id("ALT-NOPE0000") is None
    assert store.update_application_status("ALT-NOPE0000", "approved") is None
    assert store.cancel_application("ALT-NOPE0000") is False


def test_submitted_application_is_a_value_copy(store, snapshot):
    assets = [AssetSnapshot(name="Bitcoin", symbol="BTC", amount=1.5, value=67500.0)]
    snap = ApplicationSnapshot(67500.0, 40500.0, 5.2, 60.0, tuple(assets))
    app_id = store.add_application(snap)
    assets.append(AssetSnapshot(name="Ether", symbol="ETH", amount=1, value=2500))
    fetched = store.get_application_by_id(app_id)
    fetched.status = "approved"
    again = store.get_application_by_id(app_id)
    assert len(again.selected_assets) == 1
    assert again.status == "pending"


def test_status_overwrite_is_permissive(store, snapshot):
    app_id = store.add_application(snapshot)
    app = store.update_application_status(app_id, "completed")
    assert app.status == "completed"
    assert app.updated_at > app.submitted_at
    assert store.update_application_status(app_id, "pending").status == "pending"


def test_unknown_status_rejected(store, snapshot):
    app_id = store.add_application(snapshot)
    with pytest.raises(BadRequest):
        store.update_application_status(app_id, "funded")


def test_strict_transitions(backend, snapshot):
    store = LoanApplicationStore(backend, "user-2", strict=True)
    app_id = store.add_application(snapshot)
    with pytest.raises(ConflictError):
        store.update_application_status(app_id, "active")
    for status in ("approved", "active", "completed"):
        assert store.update_application_status(app_id, status).status == status
    with pytest.raises(ConflictError):
        store.update_application_status(app_id, "pending")


def test_cancel_requires_pending(store, snapshot):
    app_id = store.add_application(snapshot)
    store.update_application_status(app_id, "approved")
    with pytest.raises(ConflictError):
        store.cancel_application(app_id)
    assert store.get_application_by_id(app_id) is not None


def test_id_collision_regenerates(backend, snapshot):
    # two stores replaying the same id sequence in one namespace
    first = LoanApplicationStore(backend, "ns", rng=random.Random(7))
    second = LoanApplicationStore(backend, "ns", rng=random.Random(7))
    a = first.add_application(snapshot)
    b = second.add_application(snapshot)
    assert a != b
    assert ID_RE.match(b)


def test_namespaces_are_isolated(backend, snapshot):
    alice = store_for(backend, "alice")
    bob = store_for(backend, "bob")
    app_id = alice.add_application(snapshot)
    assert bob.get_application_by_id(app_id) is None
    assert bob.list_applications() == []


def test_list_newest_first_and_counts(store, snapshot):
    ids = [store.add_application(snapshot) for _ in range(3)]
    store.update_application_status(ids[0], "approved")
    apps = store.list_applications()
    assert [a.id for a in apps] == list(reversed(ids))
    counts = status_counts(apps)
    assert counts["pending"] == 2
    assert counts["approved"] == 1


def test_backend_errors_propagate(snapshot):
    backend = MagicMock(spec=MemoryBackend)
    backend.get.return_value = None
    backend.put.side_effect = RuntimeError("disk full")
    store = LoanApplicationStore(backend, "ns")
    with pytest.raises(RuntimeError):
        store.add_application(snapshot)


def test_mongo_backend_queries():
    col = MagicMock()
    col.find_one.return_value = {"doc": {"id": "ALT-AAAAAAAA"}}
    col.find.return_value = [{"doc": {"id": "ALT-AAAAAAAA"}}]
    col.delete_one.return_value.deleted_count = 1
    mb = MongoBackend(col)

    col.create_index.assert_called_once()
    assert mb.get("ns", "ALT-AAAAAAAA") == {"id": "ALT-AAAAAAAA"}
    col.find_one.assert_called_with({"namespace": "ns", "key": "ALT-AAAAAAAA"}, {"_id": 0, "doc": 1})
    assert mb.get_all("ns") == [{"id": "ALT-AAAAAAAA"}]

    mb.put("ns", "ALT-AAAAAAAA", {"id": "ALT-AAAAAAAA"})
    args, kwargs = col.replace_one.call_args
    assert args[0] == {"namespace": "ns", "key": "ALT-AAAAAAAA"}
    assert kwargs["upsert"] is True
    assert mb.delete("ns", "ALT-AAAAAAAA") is True
