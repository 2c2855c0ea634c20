# sportbook/integrations/identity_client.py
"""Identity provider admin client used when an account is deleted."""

from __future__ import annotations

import logging
from typing import Optional, Protocol

import httpx
from pydantic import SecretStr

logger = logging.getLogger(__name__)


class IdentityProviderError(RuntimeError):
    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class IdentityProvider(Protocol):
    def delete_user(self, user_id: str) -> None:
        ...


class IdentityAdminClient:
    """Calls the auth admin API (``DELETE /admin/users/{id}``) with a service key."""

    def __init__(
        self,
        *,
        base_url: str,
        service_key: str | SecretStr,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        secret_value = service_key.get_secret_value() if isinstance(service_key, SecretStr) else service_key
        if not secret_value:
            raise ValueError("Identity service key must be provided")
        self._base_url = base_url.rstrip("/")
        self._service_key = secret_value
        self._timeout = timeout
        self._transport = transport

    def delete_user(self, user_id: str) -> None:
        if not user_id:
            raise ValueError("user_id must be provided")

        headers = {
            "Authorization": f"Bearer {self._service_key}",
            "apikey": self._service_key,
        }
        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                response = client.delete(f"{self._base_url}/admin/users/{user_id}", headers=headers)
        except httpx.HTTPError as exc:
            raise IdentityProviderError(f"Identity provider request failed: {exc}") from exc

        if response.status_code >= 400:
            raise IdentityProviderError(
                f"Identity provider returned {response.status_code}",
                status_code=response.status_code,
            )
        logger.info(f"Deleted identity user {user_id}")
