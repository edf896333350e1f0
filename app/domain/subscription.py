"""
Subscription domain entity and its closed enumerations.

Wire format (remote REST service, camelCase):
    {"id": 1, "userId": 7, "name": "Netflix", "cost": 15.99,
     "category": "Entertainment", "renewalDate": "2026-05-01",
     "status": "active", "description": "..."}
"""
from dataclasses import dataclass, replace
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict


class Category(str, Enum):
    ENTERTAINMENT = "Entertainment"
    MUSIC = "Music"
    DESIGN = "Design"
    PRODUCTIVITY = "Productivity"
    GAMING = "Gaming"
    EDUCATION = "Education"
    OTHER = "Other"

    @classmethod
    def parse(cls, value: str | None) -> "Category":
        """Map a raw category string to the enum; unknown values become OTHER."""
        try:
            return cls(value)
        except ValueError:
            return cls.OTHER

    @classmethod
    def labels(cls) -> list[str]:
        return [c.value for c in cls]


class SubscriptionStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    CANCELLED = "cancelled"

    @classmethod
    def labels(cls) -> list[str]:
        return [s.value for s in cls]


class MalformedRecordError(ValueError):
    """Payload from the remote service does not describe a valid subscription"""
    pass


def parse_date(value: Any) -> date:
    """
    Parse a renewal date from the wire.

    Accepts "YYYY-MM-DD" or a full ISO datetime (time part is dropped),
    as well as date/datetime objects.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value:
        raise MalformedRecordError(f"invalid renewal date: {value!r}")
    try:
        return date.fromisoformat(value[:10])
    except ValueError as e:
        raise MalformedRecordError(f"invalid renewal date: {value!r}") from e


@dataclass(frozen=True)
class Subscription:
    """
    One recurring service the user pays for.

    `id` is None only for a draft that has not been persisted yet.
    `category` keeps the raw stored string; use `category_kind` for display.
    """
    user_id: int
    name: str
    cost: Decimal  # monthly amount
    category: str
    renewal_date: date
    status: SubscriptionStatus
    description: str | None = None
    id: int | None = None

    @property
    def is_draft(self) -> bool:
        return self.id is None

    @property
    def is_active(self) -> bool:
        return self.status == SubscriptionStatus.ACTIVE

    @property
    def category_kind(self) -> Category:
        return Category.parse(self.category)

    def with_id(self, subscription_id: int) -> "Subscription":
        return replace(self, id=subscription_id)

    def to_payload(self) -> Dict[str, Any]:
        """
        Serialize for the remote service.

        Drafts are sent without "id" so the server assigns one.
        """
        payload: Dict[str, Any] = {
            "userId": self.user_id,
            "name": self.name,
            "cost": float(self.cost),
            "category": self.category,
            "renewalDate": self.renewal_date.isoformat(),
            "status": self.status.value,
        }
        if self.description:
            payload["description"] = self.description
        if self.id is not None:
            payload["id"] = self.id
        return payload

    @staticmethod
    def from_payload(data: Dict[str, Any]) -> "Subscription":
        """
        Build a Subscription from a JSON object returned by the remote service

        Raises:
            MalformedRecordError: missing fields or values out of range
        """
        if not isinstance(data, dict):
            raise MalformedRecordError(f"expected object, got {type(data).__name__}")
        try:
            cost = Decimal(str(data["cost"]))
            if not cost.is_finite() or cost < 0:
                raise MalformedRecordError(f"invalid cost: {data['cost']!r}")
            status = SubscriptionStatus(data["status"])
            raw_id = data.get("id")
            return Subscription(
                id=int(raw_id) if raw_id is not None else None,
                user_id=int(data["userId"]),
                name=str(data["name"]),
                cost=cost,
                category=str(data.get("category") or Category.OTHER.value),
                renewal_date=parse_date(data["renewalDate"]),
                status=status,
                description=data.get("description") or None,
            )
        except MalformedRecordError:
            raise
        except (KeyError, TypeError, ValueError, InvalidOperation) as e:
            raise MalformedRecordError(f"invalid subscription payload: {e!r}") from e
