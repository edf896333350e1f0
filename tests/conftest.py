"""
Pytest fixtures for testing
"""
from datetime import date
from decimal import Decimal

import pytest

from app.auth import hash_password
from app.domain.subscription import Subscription, SubscriptionStatus
from app.domain.user import User
from app.infrastructure.errors import NetworkError, NotFoundError

TODAY = date(2026, 3, 10)


def make_subscription(
    id=None, user_id=1, name="Netflix", cost="15.99", category="Entertainment",
    renewal_date=TODAY, status=SubscriptionStatus.ACTIVE, description=None,
) -> Subscription:
    return Subscription(
        id=id, user_id=user_id, name=name, cost=Decimal(str(cost)),
        category=category, renewal_date=renewal_date,
        status=SubscriptionStatus(status), description=description,
    )


class FakeGateway:
    """In-memory stand-in for SubscriptionGateway"""

    def __init__(self):
        self.subscriptions: dict[int, Subscription] = {}
        self.users: dict[int, User] = {}
        self.fail_with: Exception | None = None
        self.calls: list[str] = []
        self._next_id = 100

    def _check(self, name: str) -> None:
        self.calls.append(name)
        if self.fail_with is not None:
            raise self.fail_with

    def add(self, sub: Subscription) -> Subscription:
        if sub.id is None:
            sub = sub.with_id(self._next_id)
            self._next_id += 1
        self.subscriptions[sub.id] = sub
        return sub

    def list_subscriptions(self, user_id):
        self._check("list")
        return [s for s in self.subscriptions.values() if s.user_id == user_id]

    def create_subscription(self, draft):
        self._check("create")
        return self.add(draft)

    def update_subscription(self, subscription_id, record):
        self._check("update")
        if subscription_id not in self.subscriptions:
            raise NotFoundError("not found", record_id=subscription_id)
        record = record.with_id(subscription_id)
        self.subscriptions[subscription_id] = record
        return record

    def delete_subscription(self, subscription_id):
        self._check("delete")
        if subscription_id not in self.subscriptions:
            raise NotFoundError("not found", record_id=subscription_id)
        del self.subscriptions[subscription_id]
        return True

    def find_user_by_email(self, email):
        # exact match, like json-server's ?email= filter
        self._check("find_user")
        for user in self.users.values():
            if user.email == email:
                return user
        return None

    def create_user(self, email, password, name):
        self._check("create_user")
        user = User(id=len(self.users) + 1, email=email, name=name, password=password)
        self.users[user.id] = user
        return user

    def ping(self):
        self._check("ping")

    def close(self):
        pass


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def fake_gateway():
    gw = FakeGateway()
    gw.users[1] = User(id=1, email="ana@example.com", name="Ana", password=hash_password("secret123"))
    return gw


@pytest.fixture
def network_error():
    return NetworkError("Could not reach http://localhost:3000/subscriptions")


@pytest.fixture
def sample_user_id():
    """Sample user ID for tests"""
    return 1
