"""
User domain entity (remote /users resource)
"""
from dataclasses import dataclass
from typing import Any, Dict

from app.domain.subscription import MalformedRecordError


@dataclass(frozen=True)
class User:
    id: int
    email: str
    name: str
    password: str  # passlib hash (or legacy plain text on old records)

    @staticmethod
    def from_payload(data: Dict[str, Any]) -> "User":
        if not isinstance(data, dict):
            raise MalformedRecordError(f"expected object, got {type(data).__name__}")
        try:
            return User(
                id=int(data["id"]),
                email=str(data["email"]),
                name=str(data.get("name") or ""),
                password=str(data.get("password") or ""),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise MalformedRecordError(f"invalid user payload: {e!r}") from e
