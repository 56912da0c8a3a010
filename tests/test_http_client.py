"""Tests for adolinks.integrations.http_client module."""

import base64

import httpx
import pytest

from adolinks.integrations.credentials import SensitiveString
from adolinks.integrations.http_client import (
    SIGNIN_PAGE,
    TRANSPORT_ERROR,
    HttpJsonClient,
    HttpJsonResponse,
    describe_failure,
)

URL = "https://dev.azure.com/contoso/Backend/_apis/wit/workitems/1?api-version=4.1"


def _client(handler) -> HttpJsonClient:
    return HttpJsonClient(transport=httpx.MockTransport(handler))


class TestHttpJsonClientGet:
    """Tests for HttpJsonClient.get."""

    @pytest.mark.asyncio
    async def test_parses_json_object(self):
        async with _client(lambda request: httpx.Response(200, json={"id": 1})) as client:
            response = await client.get(URL)

        assert response.status_code == 200
        assert response.is_success
        assert response.body == {"id": 1}
        assert response.reason == "OK"

    @pytest.mark.asyncio
    async def test_requests_json(self):
        seen: list[httpx.Request] = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={})

        async with _client(handler) as client:
            await client.get(URL)

        assert seen[0].headers["Accept"] == "application/json"
        assert seen[0].method == "GET"

    @pytest.mark.asyncio
    async def test_sends_token_as_basic_password(self):
        seen: list[httpx.Request] = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={})

        async with _client(handler) as client:
            await client.get(URL, SensitiveString("rumor"))

        expected = base64.b64encode(b":rumor").decode()
        assert seen[0].headers["Authorization"] == f"Basic {expected}"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("password", [None, SensitiveString("   ")])
    async def test_omits_auth_without_token(self, password):
        seen: list[httpx.Request] = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={})

        async with _client(handler) as client:
            await client.get(URL, password)

        assert "Authorization" not in seen[0].headers

    @pytest.mark.asyncio
    async def test_non_json_body_is_none(self):
        async with _client(lambda request: httpx.Response(200, text="not json")) as client:
            response = await client.get(URL)

        assert response.is_success
        assert response.body is None

    @pytest.mark.asyncio
    async def test_json_array_body_is_none(self):
        async with _client(lambda request: httpx.Response(200, json=[1, 2])) as client:
            response = await client.get(URL)

        assert response.body is None

    @pytest.mark.asyncio
    async def test_error_status_keeps_body(self):
        def handler(request):
            return httpx.Response(401, json={"message": "Access denied"})

        async with _client(handler) as client:
            response = await client.get(URL)

        assert not response.is_success
        assert response.status_code == 401
        assert response.reason == "Unauthorized"
        assert response.body == {"message": "Access denied"}

    @pytest.mark.asyncio
    async def test_not_found(self):
        async with _client(lambda request: httpx.Response(404)) as client:
            response = await client.get(URL)

        assert response.is_not_found
        assert not response.is_success

    @pytest.mark.asyncio
    async def test_html_203_is_signin_page(self):
        def handler(request):
            return httpx.Response(
                203, text="<html>Sign in</html>", headers={"Content-Type": "text/html; charset=utf-8"}
            )

        async with _client(handler) as client:
            response = await client.get(URL)

        assert response.status_code == SIGNIN_PAGE
        assert response.is_signin_page
        assert not response.is_success

    @pytest.mark.asyncio
    async def test_redirect_to_signin_is_signin_page(self):
        def handler(request):
            if request.url.path.startswith("/_signin"):
                return httpx.Response(
                    200, text="<html>Sign in</html>", headers={"Content-Type": "text/html"}
                )
            return httpx.Response(302, headers={"Location": "https://dev.azure.com/_signin?realm=x"})

        async with _client(handler) as client:
            response = await client.get(URL)

        assert response.is_signin_page

    @pytest.mark.asyncio
    async def test_json_203_is_not_signin_page(self):
        async with _client(lambda request: httpx.Response(203, json={"id": 1})) as client:
            response = await client.get(URL)

        assert response.status_code == 203
        assert response.is_success

    @pytest.mark.asyncio
    async def test_transport_error_is_returned(self):
        def handler(request):
            raise httpx.ConnectError("Name or service not known", request=request)

        async with _client(handler) as client:
            response = await client.get(URL)

        assert response.status_code == TRANSPORT_ERROR
        assert not response.is_success
        assert response.transport_error == "Unable to reach Azure DevOps: Name or service not known"

    @pytest.mark.asyncio
    async def test_timeout_is_returned(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        async with _client(handler) as client:
            response = await client.get(URL, timeout_seconds=0.1)

        assert response.status_code == TRANSPORT_ERROR
        assert "timed out" in response.transport_error

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self):
        client = _client(lambda request: httpx.Response(200, json={}))
        await client.get(URL)

        await client.close()
        await client.close()


class TestDescribeFailure:
    """Tests for describe_failure."""

    def test_status_with_remote_message(self):
        response = HttpJsonResponse(
            status_code=401, reason="Unauthorized", body={"message": "Access denied"}
        )

        assert describe_failure(response) == (
            "401 (Unauthorized): Access denied Please confirm the Personal Access Token "
            "configured in the Azure DevOps issue tracker settings has the Build (Read) "
            "and Work Items (Read) scopes."
        )

    def test_testing_hint(self):
        response = HttpJsonResponse(status_code=500, reason="Internal Server Error")

        assert describe_failure(response, testing=True) == (
            "500 (Internal Server Error) Please confirm the Personal Access Token you are "
            "testing has the Build (Read) and Work Items (Read) scopes."
        )

    def test_missing_reason(self):
        response = HttpJsonResponse(status_code=418)

        assert describe_failure(response).startswith("418 (Unknown) Please confirm")

    def test_signin_page(self):
        response = HttpJsonResponse(status_code=SIGNIN_PAGE, reason="Sign-in page")

        message = describe_failure(response)

        assert message.startswith(
            "Authentication required: Azure DevOps redirected the request to a sign-in page."
        )
        assert message.endswith("Work Items (Read) scopes.")

    def test_transport_error_is_used_verbatim(self):
        response = HttpJsonResponse(
            status_code=TRANSPORT_ERROR, transport_error="Unable to reach Azure DevOps: boom"
        )

        assert describe_failure(response, testing=True) == "Unable to reach Azure DevOps: boom"

    def test_blank_remote_message_is_ignored(self):
        response = HttpJsonResponse(status_code=403, reason="Forbidden", body={"message": "  "})

        assert describe_failure(response).startswith("403 (Forbidden) Please")
