"""
Tests for the sign-in coordinator and the Google provider.
"""

import asyncio

import httpx
import pytest
from authlib.integrations.starlette_client import OAuthError
from starlette.requests import Request

from app.schemas.auth import AccountDescriptor, NotificationKind, SignInOutcome
from app.services.google_oauth import SESSION_KEY, GoogleSignInProvider
from app.services.sign_in import SignInCoordinator
from app.services.sign_in_provider import ProviderError
from tests.fakes import FakeSignInProvider


def make_request(query_string: bytes = b"") -> Request:
    return Request(
        {
            "type": "http",
            "method": "GET",
            "path": "/auth/google/callback",
            "query_string": query_string,
            "headers": [],
            "session": {},
        }
    )


class BlockingProvider(FakeSignInProvider):
    """Fake provider whose sign-in waits until released."""

    def __init__(self):
        super().__init__()
        self.release = asyncio.Event()
        self.succeed_with("Jane Doe", "jane@example.com")

    async def sign_in(self, request):
        self.sign_in_calls += 1
        await self.release.wait()
        return self.result


class TestSignInCoordinator:
    """Tests for outcome classification and the in-flight guard."""

    @pytest.mark.asyncio
    async def test_success(self):
        provider = FakeSignInProvider()
        provider.succeed_with("Jane Doe", "jane@example.com")

        attempt = await SignInCoordinator(provider).sign_in("form-1", None)

        assert attempt.outcome == SignInOutcome.SUCCEEDED
        assert attempt.account.display_name == "Jane Doe"
        assert attempt.notification.kind == NotificationKind.SUCCESS
        assert attempt.notification.message == "Welcome Jane Doe!"

    @pytest.mark.asyncio
    async def test_cancel_is_not_an_error(self):
        provider = FakeSignInProvider()
        provider.cancel()

        attempt = await SignInCoordinator(provider).sign_in("form-1", None)

        assert attempt.outcome == SignInOutcome.CANCELLED
        assert attempt.notification is None
        assert attempt.account is None

    @pytest.mark.asyncio
    async def test_provider_error_is_surfaced_once(self):
        provider = FakeSignInProvider()
        provider.fail_with("sign_in_failed", "Developer error")
        coordinator = SignInCoordinator(provider)

        attempt = await coordinator.sign_in("form-1", None)

        assert attempt.outcome == SignInOutcome.FAILED
        assert attempt.notification.kind == NotificationKind.ERROR
        assert attempt.notification.message == "Google sign-in failed: Developer error"
        assert provider.sign_in_calls == 1
        assert not coordinator.is_in_flight("form-1")

    @pytest.mark.asyncio
    async def test_second_attempt_while_in_flight_is_ignored(self):
        provider = BlockingProvider()
        coordinator = SignInCoordinator(provider)

        first = asyncio.create_task(coordinator.sign_in("form-1", None))
        await asyncio.sleep(0)
        assert coordinator.is_in_flight("form-1")

        second = await coordinator.sign_in("form-1", None)
        assert second.outcome == SignInOutcome.IGNORED
        assert second.notification is None

        provider.release.set()
        result = await first

        assert result.outcome == SignInOutcome.SUCCEEDED
        assert provider.sign_in_calls == 1
        assert not coordinator.is_in_flight("form-1")

    @pytest.mark.asyncio
    async def test_other_forms_are_not_blocked(self):
        provider = BlockingProvider()
        coordinator = SignInCoordinator(provider)

        first = asyncio.create_task(coordinator.sign_in("form-1", None))
        second = asyncio.create_task(coordinator.sign_in("form-2", None))
        await asyncio.sleep(0)
        provider.release.set()

        results = await asyncio.gather(first, second)

        assert [r.outcome for r in results] == [SignInOutcome.SUCCEEDED] * 2
        assert provider.sign_in_calls == 2

    @pytest.mark.asyncio
    async def test_timeout(self):
        provider = BlockingProvider()
        coordinator = SignInCoordinator(provider, timeout=0.01)

        attempt = await coordinator.sign_in("form-1", None)

        assert attempt.outcome == SignInOutcome.FAILED
        assert "timed out" in attempt.notification.message
        assert not coordinator.is_in_flight("form-1")


class TestGoogleSignInProvider:
    """Tests for mapping Google responses onto the provider contract."""

    @pytest.fixture
    def provider(self):
        return GoogleSignInProvider("client-id", "client-secret", ["email", "profile"])

    def test_openid_scope_added(self, provider):
        assert provider.scopes == ["openid", "email", "profile"]

    @pytest.mark.asyncio
    async def test_access_denied_is_cancellation(self, provider):
        request = make_request(b"error=access_denied")

        assert await provider.sign_in(request) is None
        assert await provider.current_account(request) is None

    @pytest.mark.asyncio
    async def test_success_stores_account(self, provider, monkeypatch):
        async def authorize_access_token(request):
            return {"userinfo": {"email": "jane@example.com", "name": "Jane Doe"}}

        monkeypatch.setattr(provider.oauth.google, "authorize_access_token", authorize_access_token)
        request = make_request()

        account = await provider.sign_in(request)

        assert account == AccountDescriptor(display_name="Jane Doe", email="jane@example.com")
        assert request.session[SESSION_KEY]["email"] == "jane@example.com"
        assert await provider.current_account(request) == account

        await provider.sign_out(request)
        assert await provider.current_account(request) is None

    @pytest.mark.asyncio
    async def test_missing_name_falls_back_to_email(self, provider, monkeypatch):
        async def authorize_access_token(request):
            return {"userinfo": {"email": "jane@example.com"}}

        monkeypatch.setattr(provider.oauth.google, "authorize_access_token", authorize_access_token)

        account = await provider.sign_in(make_request())

        assert account.display_name == "jane"

    @pytest.mark.asyncio
    async def test_oauth_error_raises_provider_error(self, provider, monkeypatch):
        async def authorize_access_token(request):
            raise OAuthError(error="invalid_grant", description="Bad Request")

        monkeypatch.setattr(provider.oauth.google, "authorize_access_token", authorize_access_token)

        with pytest.raises(ProviderError) as exc_info:
            await provider.sign_in(make_request())

        assert exc_info.value.code == "invalid_grant"
        assert exc_info.value.message == "Bad Request"

    @pytest.mark.asyncio
    async def test_missing_userinfo(self, provider, monkeypatch):
        async def authorize_access_token(request):
            return {"access_token": "abc"}

        monkeypatch.setattr(provider.oauth.google, "authorize_access_token", authorize_access_token)

        with pytest.raises(ProviderError) as exc_info:
            await provider.sign_in(make_request())

        assert exc_info.value.code == "missing_userinfo"

    @pytest.mark.asyncio
    async def test_oauth_access_denied_is_cancellation(self, provider, monkeypatch):
        async def authorize_access_token(request):
            raise OAuthError(error="access_denied", description="User denied access")

        monkeypatch.setattr(provider.oauth.google, "authorize_access_token", authorize_access_token)

        assert await provider.sign_in(make_request()) is None

    @pytest.mark.asyncio
    async def test_network_error_raises_provider_error(self, provider, monkeypatch):
        async def authorize_access_token(request):
            raise httpx.ConnectError("Name or service not known")

        monkeypatch.setattr(provider.oauth.google, "authorize_access_token", authorize_access_token)

        with pytest.raises(ProviderError) as exc_info:
            await provider.sign_in(make_request())

        assert exc_info.value.code == "network_error"

    @pytest.mark.asyncio
    async def test_network_error_is_failed_outcome(self, provider, monkeypatch):
        """Google being unreachable surfaces as a failed sign-in, not a crash."""
        async def authorize_access_token(request):
            raise httpx.ConnectError("Name or service not known")

        monkeypatch.setattr(provider.oauth.google, "authorize_access_token", authorize_access_token)

        attempt = await SignInCoordinator(provider).sign_in("form-1", make_request())

        assert attempt.outcome == SignInOutcome.FAILED
        assert attempt.notification.kind == NotificationKind.ERROR
        assert "Name or service not known" in attempt.notification.message

    @pytest.mark.asyncio
    async def test_redirect_network_error_raises_provider_error(self, provider, monkeypatch):
        async def authorize_redirect(request, redirect_uri):
            raise httpx.ConnectError("Name or service not known")

        monkeypatch.setattr(provider.oauth.google, "authorize_redirect", authorize_redirect)

        with pytest.raises(ProviderError) as exc_info:
            await provider.authorize_redirect(make_request(), "http://testserver/callback")

        assert exc_info.value.code == "network_error"
