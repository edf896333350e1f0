"""
HTTP gateway to the remote subscriptions service (json-server style REST API).

Every call is a single round trip: no retries, no caching.
Failures are translated into app.infrastructure.errors exceptions.
"""
import logging
from typing import Any

import requests

from app.domain.subscription import Subscription, MalformedRecordError
from app.domain.user import User
from app.infrastructure.errors import NetworkError, ServerError, NotFoundError

logger = logging.getLogger(__name__)


class SubscriptionGateway:
    def __init__(self, base_url: str, timeout: float = 5.0, session: requests.Session | None = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def close(self) -> None:
        self.session.close()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _request(self, method: str, path: str, record_id: int | None = None, **kwargs) -> requests.Response:
        url = f"{self.base_url}{path}"
        try:
            resp = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.Timeout as e:
            logger.warning("%s %s timed out after %ss", method, url, self.timeout)
            raise NetworkError(f"Request to {url} timed out") from e
        except requests.RequestException as e:
            logger.warning("%s %s failed: %s", method, url, e)
            raise NetworkError(f"Could not reach {url}") from e

        if resp.status_code == 404:
            raise NotFoundError(f"{method} {path}: not found", record_id=record_id)
        if not resp.ok:
            logger.warning("%s %s returned HTTP %d", method, url, resp.status_code)
            raise ServerError(f"{method} {path}: HTTP {resp.status_code}", status_code=resp.status_code)
        return resp

    @staticmethod
    def _json(resp: requests.Response) -> Any:
        try:
            return resp.json()
        except ValueError as e:
            raise ServerError("Response is not valid JSON", status_code=resp.status_code) from e

    @staticmethod
    def _subscription(data: Any) -> Subscription:
        try:
            return Subscription.from_payload(data)
        except MalformedRecordError as e:
            raise ServerError(f"Malformed subscription record: {e}") from e

    @staticmethod
    def _user(data: Any) -> User:
        try:
            return User.from_payload(data)
        except MalformedRecordError as e:
            raise ServerError(f"Malformed user record: {e}") from e

    def _list(self, resp: requests.Response) -> list:
        data = self._json(resp)
        if not isinstance(data, list):
            raise ServerError("Expected a JSON array", status_code=resp.status_code)
        return data

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def list_subscriptions(self, user_id: int) -> list[Subscription]:
        """
        Subscriptions owned by user_id, in service order

        Raises:
            NetworkError: service unreachable or timed out
            ServerError: non-2xx response, or a record that fails to parse
        """
        resp = self._request("GET", "/subscriptions", params={"userId": user_id})
        return [self._subscription(item) for item in self._list(resp)]

    def create_subscription(self, draft: Subscription) -> Subscription:
        """
        POST a draft; the service assigns the id

        Returns:
            Canonical stored record (with id)
        """
        payload = draft.to_payload()
        payload.pop("id", None)
        resp = self._request("POST", "/subscriptions", json=payload)
        created = self._subscription(self._json(resp))
        if created.id is None:
            raise ServerError("Created subscription has no id")
        return created

    def update_subscription(self, subscription_id: int, record: Subscription) -> Subscription:
        """
        Full replace (PUT) of an existing record

        Args:
            subscription_id: target id; overrides whatever id the record carries
            record: complete new content, owner included

        Raises:
            NotFoundError: no record with that id
        """
        payload = record.to_payload()
        payload["id"] = subscription_id
        resp = self._request(
            "PUT", f"/subscriptions/{subscription_id}",
            record_id=subscription_id, json=payload,
        )
        return self._subscription(self._json(resp))

    def delete_subscription(self, subscription_id: int) -> bool:
        resp = self._request("DELETE", f"/subscriptions/{subscription_id}", record_id=subscription_id)
        return resp.ok

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def list_users(self) -> list[User]:
        resp = self._request("GET", "/users")
        return [self._user(item) for item in self._list(resp)]

    def find_user_by_email(self, email: str) -> User | None:
        """
        Look a user up by email; callers pass the normalized (lowercase) value

        Returns:
            The first matching user, or None
        """
        resp = self._request("GET", "/users", params={"email": email})
        users = [self._user(item) for item in self._list(resp)]
        # json-server filters on exact match, but other backends may ignore the param
        for user in users:
            if user.email.lower() == email.lower():
                return user
        return None

    def create_user(self, email: str, password: str, name: str) -> User:
        resp = self._request("POST", "/users", json={"email": email, "password": password, "name": name})
        return self._user(self._json(resp))

    def ping(self) -> None:
        """Readiness check: raises GatewayError if the service is unreachable"""
        self._request("GET", "/users", params={"_limit": 1})
