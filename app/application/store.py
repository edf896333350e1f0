"""
In-memory store of the current user's subscriptions.

The store is mutated only after a completed gateway call or load;
it is never updated optimistically.
"""
from dataclasses import dataclass, field

from app.domain.subscription import Subscription


class SubscriptionStore:
    def __init__(self, user_id: int):
        self.user_id = user_id
        self._items: list[Subscription] = []
        self.is_loaded = False
        self.load_error: Exception | None = None

    @property
    def items(self) -> tuple[Subscription, ...]:
        return tuple(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def get(self, subscription_id: int) -> Subscription | None:
        for sub in self._items:
            if sub.id == subscription_id:
                return sub
        return None

    def replace_all(self, items: list[Subscription]) -> None:
        self._items = list(items)
        self.is_loaded = True
        self.load_error = None

    def fail(self, error: Exception) -> None:
        """Load failed: no stale data is kept"""
        self._items = []
        self.is_loaded = True
        self.load_error = error

    def add(self, sub: Subscription) -> None:
        self._items.append(sub)

    def replace(self, sub: Subscription) -> bool:
        """Replace the record with the same id. Returns False if it is not in the store."""
        for i, existing in enumerate(self._items):
            if existing.id == sub.id:
                self._items[i] = sub
                return True
        return False

    def remove(self, subscription_id: int) -> bool:
        """Remove exactly one record by id, keeping the order of the rest"""
        for i, existing in enumerate(self._items):
            if existing.id == subscription_id:
                del self._items[i]
                return True
        return False

    def reset(self) -> None:
        self._items = []
        self.is_loaded = False
        self.load_error = None


@dataclass
class SessionContext:
    """
    Explicit "current user" value passed to the code that needs it.

    Holds at most one store; switching users discards it.
    """
    user_id: int
    user_name: str = ""
    _store: SubscriptionStore | None = field(default=None, repr=False)

    def store_for(self, user_id: int) -> SubscriptionStore:
        if user_id != self.user_id or self._store is None or self._store.user_id != user_id:
            self.user_id = user_id
            self._store = SubscriptionStore(user_id)
        return self._store

    @property
    def store(self) -> SubscriptionStore:
        return self.store_for(self.user_id)
