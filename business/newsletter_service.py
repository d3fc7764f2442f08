import logging
import re
from dataclasses import dataclass

from business.entities import Subscriber, ValidationResult
from persistence.subscriber_store import SubscriberStore

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

INVALID_EMAIL = "Invalid email format."
MISSING_NAME = "Name is required."
ALREADY_REGISTERED = "This email is already registered."
SUBSCRIBER_NOT_FOUND = "Subscriber not found."


@dataclass
class NewsletterService:
    store: SubscriberStore

    def enlist(self, subscriber: Subscriber) -> ValidationResult:
        if not EMAIL_PATTERN.fullmatch(subscriber.email or ""):
            logger.warning(f"rejected malformed email {subscriber.email!r}")
            return ValidationResult.failure(INVALID_EMAIL)

        if not (subscriber.name or "").strip():
            logger.warning(f"rejected {subscriber.email} without a name")
            return ValidationResult.failure(MISSING_NAME)

        if self.store.get_by_email(subscriber.email) is not None:
            logger.warning(f"rejected already registered {subscriber.email}")
            return ValidationResult.failure(ALREADY_REGISTERED)

        self.store.add(subscriber)
        logger.info(
            f"Subscriber {subscriber.name}, {subscriber.email} with ID: {subscriber.id} created"
        )
        return ValidationResult.success()

    def list_all(self) -> list[Subscriber]:
        return self.store.get_all()

    def cancel(self, email: str) -> ValidationResult:
        subscriber = self.store.get_by_email(email)
        if subscriber is None or subscriber.id is None:
            return ValidationResult.failure(SUBSCRIBER_NOT_FOUND)
        self.store.remove(subscriber.id)
        logger.info(f"Subscriber {subscriber.email} with ID: {subscriber.id} removed")
        return ValidationResult.success()
