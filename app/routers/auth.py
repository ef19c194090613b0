"""
Authentication router for the sign-in/sign-up form and Google Sign-In.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status, Request

from app.config import settings
from app.dependencies.auth import (
    FORM_SESSION_KEY,
    CurrentForm,
    get_form_registry,
    get_current_form,
    get_sign_in_coordinator,
    get_sign_in_provider,
)
from app.logging_config import get_logger
from app.schemas.auth import (
    AccountDescriptor,
    FieldUpdate,
    FormView,
    SignInResponse,
    SubmitResponse,
)
from app.services.form import FormRegistry, SubmitController
from app.services.sign_in import SignInCoordinator
from app.services.sign_in_provider import ProviderError, SignInProvider

submit_controller = SubmitController()

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.get("/form", response_model=FormView)
async def get_form(form: CurrentForm = Depends(get_current_form)):
    """
    Return the form as the screen should render it.

    **Returns:**
    - `mode`: `sign_in` or `sign_up`
    - `fields`: visible fields with their inline errors; password values
      are never echoed
    """
    return form.state.view()


@router.patch("/form", response_model=FormView)
async def update_form(
    changes: FieldUpdate, form: CurrentForm = Depends(get_current_form)
):
    """
    Update field contents (one call per keystroke or per blur).

    Fields omitted from the body keep their current value.
    """
    form.state.update(changes)
    return form.state.view()


@router.post("/form/toggle", response_model=FormView)
async def toggle_mode(form: CurrentForm = Depends(get_current_form)):
    """
    Switch between sign-in and sign-up.

    Field values are kept; inline errors are cleared.
    """
    mode = form.state.toggle_mode()
    get_logger(form_id=form.id).info("form_mode_toggled", mode=mode.value)
    return form.state.view()


@router.post("/form/submit", response_model=SubmitResponse)
async def submit_form(form: CurrentForm = Depends(get_current_form)):
    """
    Validate the fields required by the current mode.

    **Returns:**
    - `notification`: success message to show

    **Errors:**
    - `422 Unprocessable Entity`: one or more fields are invalid; `detail`
      carries `errors` keyed by field and the first failing field's message
    """
    result = submit_controller.submit(form.state)
    log = get_logger(form_id=form.id, mode=form.state.mode.value)

    if not result.valid:
        log.info("form_submit_rejected", fields=[name.value for name in result.errors])
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={
                "message": result.notification.message,
                "errors": {name.value: message for name, message in result.errors.items()},
                "notification": result.notification.model_dump(mode="json"),
            },
        )

    log.info("form_submit_accepted")
    return SubmitResponse(
        valid=True, mode=form.state.mode, notification=result.notification
    )


@router.get("/google", tags=["Google Sign-In"])
async def google_login(
    request: Request, provider: SignInProvider = Depends(get_sign_in_provider)
):
    """
    Initiate Google sign-in.
    Redirects user to Google consent screen.

    **Errors:**
    - `502 Bad Gateway`: Google could not be reached
    """
    try:
        return await provider.authorize_redirect(request, settings.GOOGLE_REDIRECT_URI)
    except ProviderError as e:
        get_logger(provider=provider.name).warning(
            "sign_in_redirect_failed", code=e.code, detail=e.message
        )
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Google sign-in failed: {e.message}",
        )


@router.get("/google/callback", response_model=SignInResponse, tags=["Google Sign-In"])
async def google_callback(
    request: Request,
    form: CurrentForm = Depends(get_current_form),
    coordinator: SignInCoordinator = Depends(get_sign_in_coordinator),
):
    """
    Handle the Google callback.

    **Outcomes:**
    - `succeeded`: account returned with a welcome notification
    - `cancelled`: user backed out; no notification, form untouched
    - `failed`: provider error surfaced once as an error notification
    - `ignored`: another sign-in for this form is still in flight
    """
    attempt = await coordinator.sign_in(form.id, request)
    return SignInResponse(
        outcome=attempt.outcome,
        account=attempt.account,
        notification=attempt.notification,
        form=form.state.view(),
    )


@router.get(
    "/google/account",
    response_model=Optional[AccountDescriptor],
    tags=["Google Sign-In"],
)
async def google_account(
    request: Request, provider: SignInProvider = Depends(get_sign_in_provider)
):
    """
    Return the currently signed-in Google account, or null.
    """
    return await provider.current_account(request)


@router.post("/google/sign-out", status_code=status.HTTP_200_OK, tags=["Google Sign-In"])
async def google_sign_out(
    request: Request,
    form: CurrentForm = Depends(get_current_form),
    provider: SignInProvider = Depends(get_sign_in_provider),
    registry: FormRegistry = Depends(get_form_registry),
):
    """
    Sign out of Google and discard the form.
    The next request starts from an empty sign-in form.
    """
    await provider.sign_out(request)
    registry.discard(form.id)
    request.session.pop(FORM_SESSION_KEY, None)
    get_logger(form_id=form.id, provider=provider.name).info("signed_out")
    return {"message": "Successfully signed out"}
