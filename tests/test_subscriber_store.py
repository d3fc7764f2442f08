import mongomock
import pytest
from bson import ObjectId

from business.entities import Subscriber
from config import Settings
from persistence import subscriber_store
from persistence.subscriber_store import (InMemorySubscriberStore,
                                          MongoSubscriberStore,
                                          UnknownStorageBackend,
                                          build_subscriber_store)


@pytest.fixture
def mongo_store() -> MongoSubscriberStore:
    return MongoSubscriberStore(mongomock.MongoClient()["newsletter"]["subscribers"])


def test_in_memory_keeps_insertion_order() -> None:
    store = InMemorySubscriberStore()
    for name in ["alice", "bob", "carol"]:
        store.add(Subscriber(name=name, email=f"{name}@example.com"))

    assert [s.name for s in store.get_all()] == ["alice", "bob", "carol"]


def test_in_memory_get_all_is_a_snapshot() -> None:
    store = InMemorySubscriberStore()
    alice = Subscriber(name="alice", email="alice@example.com")
    store.add(alice)

    snapshot = store.get_all()
    snapshot[0].name = "mallory"
    alice.email = "mallory@example.com"
    store.add(Subscriber(name="bob", email="bob@example.com"))

    assert len(snapshot) == 1
    stored = store.get_by_id(alice.id)
    assert stored is not None
    assert stored.name == "alice"
    assert stored.email == "alice@example.com"


def test_in_memory_assigns_unique_ids() -> None:
    store = InMemorySubscriberStore()
    first = Subscriber(name="alice", email="alice@example.com")
    second = Subscriber(name="alice", email="alice@example.com")
    store.add(first)
    store.add(second)

    assert first.id is not None
    assert first.id != second.id
    assert len(store.get_all()) == 2


def test_in_memory_lookups() -> None:
    store = InMemorySubscriberStore()
    alice = Subscriber(name="alice", email="alice@example.com")
    store.add(alice)

    assert store.get_by_email("alice@example.com") == alice
    assert store.get_by_id(alice.id) == alice
    assert store.get_by_email("bob@example.com") is None
    assert store.get_by_id("nope") is None


def test_in_memory_remove_absent_is_noop() -> None:
    store = InMemorySubscriberStore()
    store.add(Subscriber(name="alice", email="alice@example.com"))

    store.remove("nope")

    assert len(store.get_all()) == 1


def test_mongo_round_trip(mongo_store: MongoSubscriberStore) -> None:
    alice = Subscriber(name="alice", email="alice@example.com")
    mongo_store.add(alice)

    assert alice.id is not None
    assert ObjectId.is_valid(alice.id)
    found = mongo_store.get_by_id(alice.id)
    assert found is not None
    assert found.id == alice.id
    assert found.name == "alice"
    assert found.email == "alice@example.com"


def test_mongo_stores_object_id(mongo_store: MongoSubscriberStore) -> None:
    alice = Subscriber(name="alice", email="alice@example.com")
    mongo_store.add(alice)

    document = mongo_store.collection.find_one({"email": "alice@example.com"})
    assert document is not None
    assert document["_id"] == ObjectId(alice.id)
    assert "id" not in document


def test_mongo_lookup_by_email(mongo_store: MongoSubscriberStore) -> None:
    alice = Subscriber(name="alice", email="alice@example.com")
    mongo_store.add(alice)

    assert mongo_store.get_by_email("alice@example.com") == alice
    assert mongo_store.get_by_email("bob@example.com") is None


def test_mongo_unknown_ids(mongo_store: MongoSubscriberStore) -> None:
    mongo_store.add(Subscriber(name="alice", email="alice@example.com"))

    assert mongo_store.get_by_id("not-an-object-id") is None
    assert mongo_store.get_by_id(str(ObjectId())) is None
    mongo_store.remove("not-an-object-id")
    mongo_store.remove(str(ObjectId()))

    assert len(mongo_store.get_all()) == 1


def test_mongo_remove(mongo_store: MongoSubscriberStore) -> None:
    alice = Subscriber(name="alice", email="alice@example.com")
    bob = Subscriber(name="bob", email="bob@example.com")
    mongo_store.add(alice)
    mongo_store.add(bob)

    mongo_store.remove(alice.id)

    assert mongo_store.get_all() == [bob]


@pytest.mark.parametrize("provider", ["", "InMemoryDb"])
def test_build_in_memory_store(provider: str) -> None:
    store = build_subscriber_store(Settings(database_provider=provider))
    assert isinstance(store, InMemorySubscriberStore)


def test_build_mongo_store(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(subscriber_store, "MongoClient", mongomock.MongoClient)

    store = build_subscriber_store(
        Settings(
            database_provider="MongoDb",
            mongo_database_name="letters",
            mongo_collection_name="people",
        )
    )

    assert isinstance(store, MongoSubscriberStore)
    assert store.collection.name == "people"
    assert store.collection.database.name == "letters"


@pytest.mark.parametrize("provider", ["SqlServer", "inmemorydb", "mongo"])
def test_build_unknown_store(provider: str) -> None:
    with pytest.raises(UnknownStorageBackend):
        build_subscriber_store(Settings(database_provider=provider))
