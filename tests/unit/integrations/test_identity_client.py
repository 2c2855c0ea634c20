"""Auth admin client used by account deletion."""

import httpx
import pytest

from sportbook.integrations.identity_client import IdentityAdminClient, IdentityProviderError


def test_deletes_user_with_service_key():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["url"] = str(request.url)
        seen["auth"] = request.headers.get("Authorization")
        return httpx.Response(200, json={})

    client = IdentityAdminClient(
        base_url="https://auth.example.test/auth/v1",
        service_key="service-key",
        transport=httpx.MockTransport(handler),
    )
    client.delete_user("user-123")

    assert seen == {
        "method": "DELETE",
        "url": "https://auth.example.test/auth/v1/admin/users/user-123",
        "auth": "Bearer service-key",
    }


def test_error_response_raises():
    client = IdentityAdminClient(
        base_url="https://auth.example.test/auth/v1",
        service_key="service-key",
        transport=httpx.MockTransport(lambda request: httpx.Response(404)),
    )
    with pytest.raises(IdentityProviderError) as exc_info:
        client.delete_user("user-123")
    assert exc_info.value.status_code == 404


def test_service_key_required():
    with pytest.raises(ValueError):
        IdentityAdminClient(base_url="https://auth.example.test", service_key="")
