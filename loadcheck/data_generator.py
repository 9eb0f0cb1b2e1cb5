"""Data Generator - Random request payloads for scenario scripts.

Each DataGenerator owns its own random.Random, so a seeded generator
reproduces the same users, posts and comments on every run and never
disturbs the global random state.

Usage:
    generator = DataGenerator(seed=42)
    payload = builder.build_payload(generator.generate_post())
"""

from __future__ import annotations

import random
import string
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Sequence, TypeVar

T = TypeVar("T")

ALPHANUMERIC = string.ascii_letters + string.digits

FIRST_NAMES = ("John", "Jane", "Bob", "Alice", "Charlie", "Diana")
LAST_NAMES = ("Smith", "Johnson", "Williams", "Brown", "Jones", "Garcia")
POST_TOPICS = ("testing", "performance", "load", "automation")
POST_KINDS = ("api", "rest", "graphql", "websocket")


class DataGenerator:
    """Generates random test data from a private random source."""

    def __init__(self, seed: int | None = None, now: datetime | None = None) -> None:
        """Initialize the generator.

        Args:
            seed: Seed for the private random source.
            now: Upper bound for generated createdAt timestamps. Defaults to
                 the construction time; pass it to make output fully repeatable.
        """
        self._random = random.Random(seed)
        self._now = now or datetime.now(timezone.utc)

    def random_int(self, minimum: int, maximum: int) -> int:
        """Random integer in [minimum, maximum]."""
        return self._random.randint(minimum, maximum)

    def random_string(self, length: int = 10, charset: str = ALPHANUMERIC) -> str:
        return "".join(self._random.choice(charset) for _ in range(length))

    def random_email(self, domain: str = "example.com") -> str:
        return f"{self.random_string(10, string.ascii_lowercase)}@{domain}"

    def random_uuid(self) -> str:
        """Version 4 UUID drawn from this generator's random source."""
        return str(uuid.UUID(int=self._random.getrandbits(128), version=4))

    def random_boolean(self) -> bool:
        return self._random.random() < 0.5

    def random_element(self, items: Sequence[T]) -> T:
        """Pick one element.

        Raises:
            ValueError: If items is empty.
        """
        if not items:
            raise ValueError("Cannot pick an element from an empty sequence")
        return self._random.choice(items)

    def random_date(self, start: datetime, end: datetime) -> datetime:
        """Random datetime between start and end."""
        span = (end - start).total_seconds()
        return datetime.fromtimestamp(
            start.timestamp() + self._random.random() * span, tz=start.tzinfo or timezone.utc
        )

    def random_phone_number(self, pattern: str = "###-###-####") -> str:
        """Replace each '#' in pattern with a random digit."""
        return "".join(str(self.random_int(0, 9)) if ch == "#" else ch for ch in pattern)

    def generate_user(self) -> dict[str, Any]:
        return {
            "id": self.random_int(1, 10000),
            "username": self.random_string(8, string.ascii_lowercase),
            "email": self.random_email(),
            "firstName": self.random_element(FIRST_NAMES),
            "lastName": self.random_element(LAST_NAMES),
            "age": self.random_int(18, 80),
            "active": self.random_boolean(),
            "createdAt": self._created_at(2020),
        }

    def generate_post(self) -> dict[str, Any]:
        return {
            "id": self.random_int(1, 10000),
            "title": f"Test Post {self.random_string(5)}",
            "body": f"This is a test post body with random content {self.random_string(20)}",
            "userId": self.random_int(1, 100),
            "tags": [self.random_element(POST_TOPICS), self.random_element(POST_KINDS)],
            "published": self.random_boolean(),
            "createdAt": self._created_at(2023),
        }

    def generate_comment(self) -> dict[str, Any]:
        return {
            "id": self.random_int(1, 10000),
            "postId": self.random_int(1, 100),
            "name": self.random_string(15),
            "email": self.random_email(),
            "body": f"Comment body {self.random_string(30)}",
        }

    def generate_many(self, factory: Callable[[], T], count: int) -> list[T]:
        """Call factory count times, e.g. generate_many(gen.generate_user, 5)."""
        return [factory() for _ in range(count)]

    def _created_at(self, since_year: int) -> str:
        start = datetime(since_year, 1, 1, tzinfo=timezone.utc)
        return self.random_date(start, self._now).isoformat()
