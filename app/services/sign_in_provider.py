"""
Boundary for external sign-in providers.
"""

from abc import ABC, abstractmethod
from typing import Optional

from starlette.requests import Request
from starlette.responses import Response

from app.schemas.auth import AccountDescriptor

# User closed the consent screen or denied access
CANCELLED_ERRORS = {"access_denied", "user_cancelled_login"}


class ProviderError(Exception):
    """Platform or OAuth level failure reported by a sign-in provider."""

    def __init__(self, code: str, message: str):
        super().__init__(f"{code}: {message}")
        self.code = code
        self.message = message


class SignInProvider(ABC):
    """
    Capability to sign a user in with a third-party identity provider.

    Instances are constructed explicitly with their OAuth scopes and handed to
    the app, so tests can swap in a fake.
    """

    name: str = "provider"

    def __init__(self, scopes):
        self.scopes = list(scopes)

    @abstractmethod
    async def authorize_redirect(self, request: Request, redirect_uri: str) -> Response:
        """
        Send the user to the provider's consent screen.

        Raises:
            ProviderError: If the provider cannot be reached
        """

    @abstractmethod
    async def sign_in(self, request: Request) -> Optional[AccountDescriptor]:
        """
        Complete the sign-in flow.

        Returns:
            The signed-in account, or None when the user cancelled

        Raises:
            ProviderError: If the provider reports a failure
        """

    @abstractmethod
    async def sign_out(self, request: Request) -> None:
        """Forget the signed-in account."""

    @abstractmethod
    async def current_account(self, request: Request) -> Optional[AccountDescriptor]:
        """Return the signed-in account, if any."""
