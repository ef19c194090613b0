"""
Google Sign-In provider backed by authlib.
"""

from typing import Optional

import httpx
from authlib.integrations.starlette_client import OAuth, OAuthError
from pydantic import ValidationError
from starlette.config import Config
from starlette.requests import Request
from starlette.responses import Response

from app.config import Settings
from app.schemas.auth import AccountDescriptor
from app.services.sign_in_provider import (
    CANCELLED_ERRORS,
    ProviderError,
    SignInProvider,
)

GOOGLE_METADATA_URL = "https://accounts.google.com/.well-known/openid-configuration"
SESSION_KEY = "google_account"


class GoogleSignInProvider(SignInProvider):
    """Signs users in with their Google account."""

    name = "google"

    def __init__(self, client_id: str, client_secret: str, scopes):
        super().__init__(scopes)
        # userinfo comes from the ID token, which needs the openid scope
        if "openid" not in self.scopes:
            self.scopes.insert(0, "openid")

        config = Config(
            environ={
                "GOOGLE_CLIENT_ID": client_id,
                "GOOGLE_CLIENT_SECRET": client_secret,
            }
        )
        self.oauth = OAuth(config)
        self.oauth.register(
            name="google",
            server_metadata_url=GOOGLE_METADATA_URL,
            client_kwargs={"scope": " ".join(self.scopes)},
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "GoogleSignInProvider":
        return cls(
            client_id=settings.GOOGLE_CLIENT_ID,
            client_secret=settings.GOOGLE_CLIENT_SECRET,
            scopes=settings.google_scopes_list,
        )

    async def authorize_redirect(self, request: Request, redirect_uri: str) -> Response:
        try:
            return await self.oauth.google.authorize_redirect(request, redirect_uri)
        except httpx.HTTPError as e:
            raise ProviderError("network_error", str(e))

    async def sign_in(self, request: Request) -> Optional[AccountDescriptor]:
        if request.query_params.get("error") in CANCELLED_ERRORS:
            return None

        try:
            token = await self.oauth.google.authorize_access_token(request)
        except OAuthError as e:
            if e.error in CANCELLED_ERRORS:
                return None
            raise ProviderError(e.error or "oauth_error", e.description or str(e))
        except httpx.HTTPError as e:
            raise ProviderError("network_error", str(e))

        user_info = token.get("userinfo")
        if not user_info or not user_info.get("email"):
            raise ProviderError(
                "missing_userinfo", "Failed to get user info from Google"
            )

        email = user_info["email"]
        try:
            account = AccountDescriptor(
                display_name=user_info.get("name") or email.split("@")[0],
                email=email,
            )
        except ValidationError:
            raise ProviderError("invalid_userinfo", "Google returned an invalid email")

        request.session[SESSION_KEY] = account.model_dump(mode="json")
        return account

    async def sign_out(self, request: Request) -> None:
        request.session.pop(SESSION_KEY, None)

    async def current_account(self, request: Request) -> Optional[AccountDescriptor]:
        data = request.session.get(SESSION_KEY)
        if not data:
            return None
        return AccountDescriptor(**data)
