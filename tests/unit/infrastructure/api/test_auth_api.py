"""Tests for the authentication endpoint adapter."""

import json

import httpx
import pytest

from conftest import MemoryTokenStore
from marketplace_client.core.exceptions import ApiError, EnvelopeError
from marketplace_client.domain.entities.user import ProfileUpdate, RegistrationData
from marketplace_client.domain.value_objects.token_pair import TokenPair
from marketplace_client.infrastructure.api import ApiClient, AuthApi

USER = {"_id": "u1", "email": "ana@example.com", "firstName": "Ana", "lastName": "Lopez", "isEmailVerified": True}


class Recorder:
    def __init__(self, body, status=200):
        self.body = body
        self.status = status
        self.requests = []

    def __call__(self, request):
        self.requests.append(request)
        return httpx.Response(self.status, json=self.body)


def build(recorder, token_store=None):
    client = ApiClient(
        base_url="http://market.test/api",
        token_store=token_store or MemoryTokenStore(),
        transport=httpx.MockTransport(recorder),
    )
    return AuthApi(client)


class TestLogin:
    @pytest.mark.asyncio
    async def test_login_returns_tokens(self):
        recorder = Recorder({"success": True, "data": {"accessToken": "a", "refreshToken": "r"}})
        api = build(recorder)

        tokens = await api.login("ana@example.com", "s3cretpass", "1y")

        assert (tokens.access_token, tokens.refresh_token) == ("a", "r")
        assert json.loads(recorder.requests[0].content) == {
            "email": "ana@example.com",
            "password": "s3cretpass",
            "token_expires_in": "1y",
        }

    @pytest.mark.asyncio
    async def test_login_without_tokens_is_an_envelope_error(self):
        api = build(Recorder({"success": True, "data": {"user": USER}}))

        with pytest.raises(EnvelopeError):
            await api.login("ana@example.com", "s3cretpass", "1y")

    @pytest.mark.asyncio
    async def test_unverified_login_raises_api_error(self):
        api = build(Recorder({"success": False, "message": "Please verify your email"}, status=403))

        with pytest.raises(ApiError) as exc_info:
            await api.login("ana@example.com", "s3cretpass", "1y")

        assert exc_info.value.status_code == 403


class TestAccount:
    @pytest.mark.asyncio
    async def test_signup_posts_form_fields(self):
        recorder = Recorder({"success": True, "data": {"user": USER}})
        api = build(recorder)
        data = RegistrationData(first_name="Ana", last_name="Lopez", email="ana@example.com", password="s3cretpass")

        await api.signup(data)

        request = recorder.requests[0]
        assert request.url.path == "/api/auth/signup"
        body = dict(httpx.QueryParams(request.content.decode()))
        assert body == {"firstName": "Ana", "lastName": "Lopez", "email": "ana@example.com", "password": "s3cretpass"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "call, path, payload",
        [
            (lambda api: api.verify_otp("ana@example.com", "123456"), "/api/auth/verify-otp",
             {"email": "ana@example.com", "otp": "123456"}),
            (lambda api: api.resend_otp("ana@example.com"), "/api/auth/resend-otp", {"email": "ana@example.com"}),
            (lambda api: api.forgot_password("ana@example.com"), "/api/auth/forgot-password",
             {"email": "ana@example.com"}),
        ],
    )
    async def test_json_endpoints(self, call, path, payload):
        recorder = Recorder({"success": True, "data": None})
        api = build(recorder)

        await call(api)

        assert recorder.requests[0].url.path == path
        assert json.loads(recorder.requests[0].content) == payload


class TestProfile:
    @pytest.mark.asyncio
    async def test_get_profile_decodes_nested_user(self):
        store = MemoryTokenStore(TokenPair("a", "r"))
        recorder = Recorder({"success": True, "data": {"user": USER}})
        api = build(recorder, token_store=store)

        profile = await api.get_profile()

        assert profile.full_name == "Ana Lopez"
        assert profile.is_email_verified
        assert recorder.requests[0].headers["authorization"] == "Bearer a"

    @pytest.mark.asyncio
    async def test_update_profile_patches_set_fields(self):
        store = MemoryTokenStore(TokenPair("a", "r"))
        recorder = Recorder({"success": True, "data": {**USER, "firstName": "Anna"}})
        api = build(recorder, token_store=store)

        profile = await api.update_profile(ProfileUpdate(first_name="Anna"))

        request = recorder.requests[0]
        assert request.method == "PATCH"
        assert request.content == b"firstName=Anna"
        assert profile.first_name == "Anna"

    @pytest.mark.asyncio
    async def test_public_user_profile(self):
        recorder = Recorder({"success": True, "data": USER})
        api = build(recorder)

        profile = await api.get_user("u1")

        assert recorder.requests[0].url.path == "/api/auth/users/u1"
        assert "authorization" not in recorder.requests[0].headers
        assert profile.id == "u1"
