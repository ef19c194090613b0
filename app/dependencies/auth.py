"""
Dependency functions for FastAPI.
Resolves the caller's form and the injected sign-in provider.
"""

from dataclasses import dataclass

from fastapi import Request

from app.services.form import FormRegistry, FormState
from app.services.sign_in import SignInCoordinator
from app.services.sign_in_provider import SignInProvider

FORM_SESSION_KEY = "form_id"


@dataclass
class CurrentForm:
    """Form bound to the caller's session."""

    id: str
    state: FormState


def get_form_registry(request: Request) -> FormRegistry:
    return request.app.state.form_registry


def get_sign_in_provider(request: Request) -> SignInProvider:
    """Provider constructed at startup; override in tests."""
    return request.app.state.sign_in_provider


def get_sign_in_coordinator(request: Request) -> SignInCoordinator:
    return request.app.state.sign_in_coordinator


async def get_current_form(request: Request) -> CurrentForm:
    """
    Look up the form for this session, creating one on first use.

    Only the opaque form id lives in the session cookie; field values stay
    in process memory.
    """
    registry = get_form_registry(request)
    form_id = request.session.get(FORM_SESSION_KEY)
    form = registry.get(form_id)

    if form is None:
        form_id = registry.create()
        request.session[FORM_SESSION_KEY] = form_id
        form = registry.get(form_id)

    return CurrentForm(id=form_id, state=form)
