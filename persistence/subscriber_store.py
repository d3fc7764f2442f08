import logging
import threading
from abc import abstractmethod
from dataclasses import replace
from typing import Any, Optional, Protocol
from uuid import uuid4

from bson import ObjectId
from pymongo import MongoClient
from pymongo.collection import Collection

from business.entities import Subscriber
from config import Settings

logger = logging.getLogger(__name__)


class UnknownStorageBackend(Exception): ...


class SubscriberStore(Protocol):
    @abstractmethod
    def add(self, subscriber: Subscriber) -> None: ...

    @abstractmethod
    def get_all(self) -> list[Subscriber]: ...

    @abstractmethod
    def get_by_id(self, id: str) -> Optional[Subscriber]: ...

    @abstractmethod
    def get_by_email(self, email: str) -> Optional[Subscriber]: ...

    @abstractmethod
    def remove(self, id: str) -> None: ...


class InMemorySubscriberStore(SubscriberStore):
    """Process-local store. Every operation holds the same lock."""

    def __init__(self) -> None:
        self._subscribers: list[Subscriber] = []
        self._lock = threading.Lock()

    def add(self, subscriber: Subscriber) -> None:
        with self._lock:
            subscriber.id = str(uuid4())
            self._subscribers.append(replace(subscriber))

    def get_all(self) -> list[Subscriber]:
        with self._lock:
            return [replace(subscriber) for subscriber in self._subscribers]

    def get_by_id(self, id: str) -> Optional[Subscriber]:
        with self._lock:
            return self._find(lambda subscriber: subscriber.id == id)

    def get_by_email(self, email: str) -> Optional[Subscriber]:
        with self._lock:
            return self._find(lambda subscriber: subscriber.email == email)

    def remove(self, id: str) -> None:
        with self._lock:
            self._subscribers = [
                subscriber for subscriber in self._subscribers if subscriber.id != id
            ]

    def _find(self, predicate) -> Optional[Subscriber]:
        # caller must hold the lock
        found = next(
            (subscriber for subscriber in self._subscribers if predicate(subscriber)),
            None,
        )
        return replace(found) if found is not None else None


def subscriber_to_document(subscriber: Subscriber) -> dict[str, Any]:
    return {"name": subscriber.name, "email": subscriber.email}


def subscriber_from_document(document: dict[str, Any]) -> Subscriber:
    return Subscriber(
        id=str(document["_id"]), name=document["name"], email=document["email"]
    )


class MongoSubscriberStore(SubscriberStore):
    """Store backed by a single MongoDB collection.

    Each call is one driver operation. There is no unique index on ``email``,
    so uniqueness is only as strong as the caller's lookup before ``add``.
    """

    def __init__(self, collection: Collection) -> None:
        self.collection = collection

    @classmethod
    def connect(
        cls, connection_string: str, database_name: str, collection_name: str
    ) -> "MongoSubscriberStore":
        client: MongoClient = MongoClient(connection_string)
        return cls(client[database_name][collection_name])

    def add(self, subscriber: Subscriber) -> None:
        document = subscriber_to_document(subscriber)
        result = self.collection.insert_one(document)
        subscriber.id = str(result.inserted_id)

    def get_all(self) -> list[Subscriber]:
        return [subscriber_from_document(doc) for doc in self.collection.find({})]

    def get_by_id(self, id: str) -> Optional[Subscriber]:
        if not ObjectId.is_valid(id):
            return None
        document = self.collection.find_one({"_id": ObjectId(id)})
        if document is None:
            return None
        return subscriber_from_document(document)

    def get_by_email(self, email: str) -> Optional[Subscriber]:
        document = self.collection.find_one({"email": email})
        if document is None:
            return None
        return subscriber_from_document(document)

    def remove(self, id: str) -> None:
        if not ObjectId.is_valid(id):
            return
        self.collection.delete_one({"_id": ObjectId(id)})


def build_subscriber_store(settings: Settings) -> SubscriberStore:
    match settings.database_provider:
        case "" | "InMemoryDb":
            logger.info("using in-memory subscriber store")
            return InMemorySubscriberStore()
        case "MongoDb":
            logger.info(
                f"using mongo subscriber store {settings.mongo_database_name}.{settings.mongo_collection_name}"
            )
            return MongoSubscriberStore.connect(
                connection_string=settings.mongo_connection_string,
                database_name=settings.mongo_database_name,
                collection_name=settings.mongo_collection_name,
            )
        case _:
            raise UnknownStorageBackend(settings.database_provider)
