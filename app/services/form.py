"""
Form state and submit logic for the authentication screen.
"""

import secrets
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from app.config import settings
from app.logging_config import get_logger
from app.schemas.auth import (
    PUBLIC_FIELDS,
    FieldName,
    FieldUpdate,
    FieldView,
    FormView,
    Mode,
    Notification,
    NotificationKind,
)
from app.services.validators import validators_for

REQUIRED_FIELDS = {
    Mode.SIGN_IN: [FieldName.EMAIL, FieldName.PASSWORD],
    Mode.SIGN_UP: [
        FieldName.EMAIL,
        FieldName.PASSWORD,
        FieldName.NAME,
        FieldName.CONFIRM_PASSWORD,
    ],
}


def _empty_values() -> Dict[FieldName, str]:
    return {name: "" for name in FieldName}


class FormState:
    """
    Current mode and field contents of one authentication form.

    Values survive mode toggles; inline errors do not.
    """

    def __init__(self, mode: Mode = Mode.SIGN_IN):
        self.mode = mode
        self.values: Dict[FieldName, str] = _empty_values()
        self.errors: Dict[FieldName, str] = {}

    @property
    def required_fields(self) -> List[FieldName]:
        return list(REQUIRED_FIELDS[self.mode])

    def toggle_mode(self) -> Mode:
        """Flip between sign-in and sign-up."""
        self.mode = Mode.SIGN_UP if self.mode == Mode.SIGN_IN else Mode.SIGN_IN
        self.errors = {}
        return self.mode

    def value(self, name: FieldName) -> str:
        return self.values[name]

    def set_field(self, name: FieldName, value: str):
        self.values[FieldName(name)] = value

    def update(self, changes: FieldUpdate):
        for name, value in changes.changes().items():
            self.set_field(name, value)

    def view(self) -> FormView:
        """Build what the screen renders; secrets are never echoed."""
        return FormView(
            mode=self.mode,
            fields=[
                FieldView(
                    name=name,
                    value=self.values[name] if name in PUBLIC_FIELDS else None,
                    error=self.errors.get(name),
                )
                for name in self.required_fields
            ],
        )


@dataclass
class SubmitResult:
    """Outcome of a submit attempt."""

    valid: bool
    notification: Notification
    errors: Dict[FieldName, str] = field(default_factory=dict)


class SubmitController:
    """Validates the current mode's fields and builds the notification."""

    def __init__(self, notification_seconds: float = settings.NOTIFICATION_SECONDS):
        self.notification_seconds = notification_seconds

    def submit(self, form: FormState) -> SubmitResult:
        """
        Run every validator that applies to the form's mode.

        Args:
            form: Form to validate; its inline errors are replaced

        Returns:
            SubmitResult whose notification is the success message, or the
            message of the first failing field in field order
        """
        errors: Dict[FieldName, str] = {}
        for name, check in validators_for(form.mode):
            result = check(form.values)
            if not result.valid:
                errors[name] = result.message

        form.errors = errors

        if errors:
            first_message = next(iter(errors.values()))
            return SubmitResult(
                valid=False,
                notification=self._notify(NotificationKind.ERROR, first_message),
                errors=errors,
            )

        if form.mode == Mode.SIGN_UP:
            message = f"Welcome {form.value(FieldName.NAME).strip()}!"
        else:
            message = f"Signed in as {form.value(FieldName.EMAIL).strip()}"
        return SubmitResult(
            valid=True, notification=self._notify(NotificationKind.SUCCESS, message)
        )

    def _notify(self, kind: NotificationKind, message: str) -> Notification:
        return Notification(
            kind=kind, message=message, auto_dismiss_seconds=self.notification_seconds
        )


class FormRegistry:
    """
    In-memory store of form states keyed by an opaque id.
    Forms idle for longer than the session lifetime are dropped.
    NOTE: This is per-worker and forgotten on restart; nothing is persisted.
    """

    def __init__(self, max_idle: float = settings.SESSION_MAX_AGE):
        self.max_idle = max_idle
        self.forms: Dict[str, Tuple[float, FormState]] = {}
        self.log = get_logger(component="form_registry")

    def __len__(self):
        return len(self.forms)

    def get(self, form_id: Optional[str]) -> Optional[FormState]:
        if not form_id or form_id not in self.forms:
            return None

        last_used, form = self.forms[form_id]
        current_time = time.time()
        if current_time - last_used >= self.max_idle:
            self.discard(form_id)
            return None

        self.forms[form_id] = (current_time, form)
        return form

    def create(self) -> str:
        self.prune()
        form_id = secrets.token_urlsafe(16)
        self.forms[form_id] = (time.time(), FormState())
        self.log.info("form_created", form_id=form_id)
        return form_id

    def discard(self, form_id: str):
        self.forms.pop(form_id, None)

    def prune(self):
        """Drop every form that has been idle too long."""
        current_time = time.time()
        expired = [
            form_id
            for form_id, (last_used, _) in self.forms.items()
            if current_time - last_used >= self.max_idle
        ]
        for form_id in expired:
            self.discard(form_id)
        if expired:
            self.log.info("forms_expired", count=len(expired))
