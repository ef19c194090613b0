"""
Field validators for the authentication form.
Pure functions: raw text in, ValidationResult out.
"""

from typing import Callable, Dict, List, Tuple

import email_validator

from app.config import settings
from app.schemas.auth import FieldName, Mode, ValidationErrorKind, ValidationResult

MIN_PASSWORD_LENGTH = settings.MIN_PASSWORD_LENGTH


def validate_email(text: str) -> ValidationResult:
    """
    Validate an email address.

    Args:
        text: Raw field content

    Returns:
        `required` when blank, `invalid_format` when it is not
        local-part@domain, valid otherwise
    """
    value = text.strip()
    if not value:
        return ValidationResult.fail(
            ValidationErrorKind.REQUIRED, "Please enter your email"
        )
    try:
        email_validator.validate_email(value, check_deliverability=False)
    except email_validator.EmailNotValidError:
        return ValidationResult.fail(
            ValidationErrorKind.INVALID_FORMAT, "Please enter a valid email"
        )
    return ValidationResult.ok()


def validate_password(text: str) -> ValidationResult:
    """
    Validate a password.

    Args:
        text: Raw field content

    Returns:
        `required` when empty, `too_short` below the minimum length,
        valid otherwise
    """
    if not text:
        return ValidationResult.fail(
            ValidationErrorKind.REQUIRED, "Please enter your password"
        )
    if len(text) < MIN_PASSWORD_LENGTH:
        return ValidationResult.fail(
            ValidationErrorKind.TOO_SHORT,
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
        )
    return ValidationResult.ok()


def validate_name(text: str) -> ValidationResult:
    if not text.strip():
        return ValidationResult.fail(
            ValidationErrorKind.REQUIRED, "Please enter your name"
        )
    return ValidationResult.ok()


def validate_confirm_password(text: str, password: str) -> ValidationResult:
    """Check the confirmation field against the password field."""
    if not text:
        return ValidationResult.fail(
            ValidationErrorKind.REQUIRED, "Please confirm your password"
        )
    if text != password:
        return ValidationResult.fail(
            ValidationErrorKind.MISMATCH, "Passwords do not match"
        )
    return ValidationResult.ok()


FieldCheck = Callable[[Dict[FieldName, str]], ValidationResult]

SIGN_IN_CHECKS: List[Tuple[FieldName, FieldCheck]] = [
    (FieldName.EMAIL, lambda values: validate_email(values[FieldName.EMAIL])),
    (FieldName.PASSWORD, lambda values: validate_password(values[FieldName.PASSWORD])),
]

SIGN_UP_CHECKS: List[Tuple[FieldName, FieldCheck]] = SIGN_IN_CHECKS + [
    (FieldName.NAME, lambda values: validate_name(values[FieldName.NAME])),
    (
        FieldName.CONFIRM_PASSWORD,
        lambda values: validate_confirm_password(
            values[FieldName.CONFIRM_PASSWORD], values[FieldName.PASSWORD]
        ),
    ),
]


def validators_for(mode: Mode) -> List[Tuple[FieldName, FieldCheck]]:
    """Ordered (field, check) pairs that apply in the given mode."""
    if mode == Mode.SIGN_UP:
        return list(SIGN_UP_CHECKS)
    return list(SIGN_IN_CHECKS)
