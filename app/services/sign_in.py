"""
Provider sign-in coordination.
Classifies provider results and keeps one attempt in flight per form.
"""

import asyncio
from dataclasses import dataclass
from typing import Optional, Set

from starlette.requests import Request

from app.config import settings
from app.logging_config import get_logger
from app.schemas.auth import (
    AccountDescriptor,
    Notification,
    NotificationKind,
    SignInOutcome,
)
from app.services.sign_in_provider import ProviderError, SignInProvider


@dataclass
class SignInAttempt:
    """Result of one provider sign-in."""

    outcome: SignInOutcome
    account: Optional[AccountDescriptor] = None
    notification: Optional[Notification] = None


class SignInCoordinator:
    """
    Runs provider sign-in for a form.

    The in-flight set is only touched from the event loop, so a second attempt
    for the same key while one is pending is ignored without locking.
    """

    def __init__(
        self,
        provider: SignInProvider,
        timeout: Optional[float] = settings.GOOGLE_SIGN_IN_TIMEOUT,
        notification_seconds: float = settings.NOTIFICATION_SECONDS,
    ):
        self.provider = provider
        self.timeout = timeout or None
        self.notification_seconds = notification_seconds
        self.in_flight: Set[str] = set()

    def is_in_flight(self, key: str) -> bool:
        return key in self.in_flight

    async def sign_in(self, key: str, request: Request) -> SignInAttempt:
        """
        Sign in through the provider.

        Args:
            key: Identifies the form the attempt belongs to
            request: Incoming callback request handed to the provider

        Returns:
            SignInAttempt; `cancelled` and `ignored` carry no notification
        """
        log = get_logger(form_id=key, provider=self.provider.name)

        if key in self.in_flight:
            log.info("sign_in_ignored", reason="already_in_flight")
            return SignInAttempt(outcome=SignInOutcome.IGNORED)

        self.in_flight.add(key)
        try:
            account = await self._call_provider(request)
        except ProviderError as e:
            log.warning("sign_in_failed", code=e.code, detail=e.message)
            return SignInAttempt(
                outcome=SignInOutcome.FAILED,
                notification=self._notify(
                    NotificationKind.ERROR, f"Google sign-in failed: {e.message}"
                ),
            )
        finally:
            self.in_flight.discard(key)

        if account is None:
            log.info("sign_in_cancelled")
            return SignInAttempt(outcome=SignInOutcome.CANCELLED)

        log.info("sign_in_succeeded")
        return SignInAttempt(
            outcome=SignInOutcome.SUCCEEDED,
            account=account,
            notification=self._notify(
                NotificationKind.SUCCESS, f"Welcome {account.display_name}!"
            ),
        )

    async def _call_provider(self, request: Request) -> Optional[AccountDescriptor]:
        if self.timeout is None:
            return await self.provider.sign_in(request)
        try:
            return await asyncio.wait_for(
                self.provider.sign_in(request), timeout=self.timeout
            )
        except asyncio.TimeoutError:
            raise ProviderError("timeout", "The sign-in request timed out")

    def _notify(self, kind: NotificationKind, message: str) -> Notification:
        return Notification(
            kind=kind, message=message, auto_dismiss_seconds=self.notification_seconds
        )
