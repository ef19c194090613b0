"""
Pydantic schemas for the authentication screen.
"""

from pydantic import BaseModel, EmailStr, Field
from enum import Enum
from typing import Optional, List, Dict


class Mode(str, Enum):
    """Which variant of the form is shown."""

    SIGN_IN = "sign_in"
    SIGN_UP = "sign_up"


class FieldName(str, Enum):
    """Fields the form can hold."""

    EMAIL = "email"
    PASSWORD = "password"
    NAME = "name"
    CONFIRM_PASSWORD = "confirm_password"


# Fields whose values are echoed back to the client
PUBLIC_FIELDS = (FieldName.EMAIL, FieldName.NAME)


class ValidationErrorKind(str, Enum):
    """Reasons a field can fail validation."""

    REQUIRED = "required"
    INVALID_FORMAT = "invalid_format"
    TOO_SHORT = "too_short"
    MISMATCH = "mismatch"


class ValidationResult(BaseModel):
    """Verdict for a single field."""

    valid: bool
    error: Optional[ValidationErrorKind] = None
    message: Optional[str] = None

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(valid=True)

    @classmethod
    def fail(cls, error: ValidationErrorKind, message: str) -> "ValidationResult":
        return cls(valid=False, error=error, message=message)


class NotificationKind(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


class Notification(BaseModel):
    """Transient, auto-dismissing message shown to the user."""

    kind: NotificationKind
    message: str
    auto_dismiss_seconds: float = 4.0


class AccountDescriptor(BaseModel):
    """Identity data returned by the external sign-in provider."""

    display_name: str = Field(..., examples=["Jane Doe"], title="Display Name")
    email: EmailStr = Field(..., examples=["jane@example.com"], title="Email Address")


# Form Schemas
class FieldUpdate(BaseModel):
    """Schema for keystroke updates; omitted fields are left untouched."""

    email: Optional[str] = Field(None, examples=["user@example.com"])
    password: Optional[str] = Field(None, examples=["secret1"])
    name: Optional[str] = Field(None, examples=["Jane Doe"])
    confirm_password: Optional[str] = Field(None, examples=["secret1"])

    def changes(self) -> Dict[FieldName, str]:
        """Return only the fields that were sent."""
        return {
            FieldName(key): value
            for key, value in self.model_dump(exclude_none=True).items()
        }


class FieldView(BaseModel):
    """A visible field as the screen renders it."""

    name: FieldName
    required: bool = True
    value: Optional[str] = None
    error: Optional[str] = None


class FormView(BaseModel):
    """Schema for the current state of the form."""

    mode: Mode
    fields: List[FieldView]


class SubmitResponse(BaseModel):
    """Schema for a successful submit."""

    valid: bool
    mode: Mode
    notification: Notification


# Sign-In Schemas
class SignInOutcome(str, Enum):
    SUCCEEDED = "succeeded"
    CANCELLED = "cancelled"
    FAILED = "failed"
    IGNORED = "ignored"


class SignInResponse(BaseModel):
    """Schema for the result of a provider sign-in."""

    outcome: SignInOutcome
    account: Optional[AccountDescriptor] = None
    notification: Optional[Notification] = None
    form: FormView
