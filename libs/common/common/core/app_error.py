from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from common.utils.json_model import JsonModel


class ErrorDetails(JsonModel):
    scope: str
    code: str
    message: str
    details: dict[str, Any] | None = None


class ErrorConfig(JsonModel):
    scope: str
    code: str
    default_message: str
    http_status: int | None = None
    retryable: bool = False

    def create(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
        http_status: int | None = None,
        cause: BaseException | None = None,
        retryable: bool | None = None,
    ) -> AppException:
        msg = message if message is not None else self.default_message
        http = http_status if http_status is not None else self.http_status
        retry = self.retryable if retryable is None else retryable

        # An AppException cause keeps its own identity; only the message is prefixed
        if isinstance(cause, AppException):
            scope = cause.details.scope
            code = cause.details.code
            http = cause.http_status
            retry = cause.retryable
            if details and cause.details.details:
                details = {**cause.details.details, **details}
            elif cause.details.details:
                details = cause.details.details
            if cause.details.message:
                msg = f"{msg}: {cause.details.message}" if msg else cause.details.message
        else:
            scope = self.scope
            code = self.code

        app_error = AppError(
            details=ErrorDetails(scope=scope, code=code, message=msg, details=details),
            http_status=http,
            cause=cause,
            retryable=retry,
        )
        return AppException(app_error)

    def is_(self, error: BaseException) -> bool:
        return AppException.is_(error, self)


class Errors:
    class Generic:
        INVALID_INPUT = ErrorConfig(scope="generic", code="invalid_input", default_message="Invalid input", http_status=400)
        INTERNAL_ERROR = ErrorConfig(scope="generic", code="internal_error", default_message="Internal error", http_status=500)
        NOT_CONFIGURED = ErrorConfig(scope="generic", code="not_configured", default_message="Service is not configured", http_status=500)

    class Auth:
        UNAUTHENTICATED = ErrorConfig(scope="auth", code="unauthenticated", default_message="Unauthenticated", http_status=401)
        INVALID_CREDENTIAL = ErrorConfig(scope="auth", code="invalid_credential", default_message="Invalid or expired token", http_status=401)
        FORBIDDEN = ErrorConfig(scope="auth", code="forbidden", default_message="Forbidden", http_status=403)
        SIGNUP_FAILED = ErrorConfig(scope="auth", code="signup_failed", default_message="Sign up failed", http_status=400)
        LOGIN_FAILED = ErrorConfig(scope="auth", code="login_failed", default_message="Invalid email or password", http_status=401)
        ROLE_MISMATCH = ErrorConfig(scope="auth", code="role_mismatch", default_message="Role mismatch", http_status=403)
        INVALID_ROLE = ErrorConfig(scope="auth", code="invalid_role", default_message="Invalid role", http_status=400)
        PROFILE_NOT_FOUND = ErrorConfig(scope="auth", code="profile_not_found", default_message="Profile not found", http_status=404)

    class Course:
        NOT_FOUND = ErrorConfig(scope="course", code="not_found", default_message="Course not found", http_status=404)
        NOT_OWNER = ErrorConfig(
            scope="course", code="not_owner", default_message="Only the course owner can update this course", http_status=403
        )
        EMPTY_PATCH = ErrorConfig(scope="course", code="empty_patch", default_message="No valid fields provided for update", http_status=400)

    class Lesson:
        NOT_FOUND = ErrorConfig(scope="lesson", code="not_found", default_message="Lesson not found", http_status=404)
        ENROLLMENT_REQUIRED = ErrorConfig(scope="lesson", code="enrollment_required", default_message="Enrollment required", http_status=403)

    class Quiz:
        NOT_FOUND = ErrorConfig(scope="quiz", code="not_found", default_message="Quiz not found", http_status=404)

    class Payment:
        NOT_PAYABLE = ErrorConfig(scope="payment", code="not_payable", default_message="Course is not payable", http_status=400)
        INVALID_SIGNATURE = ErrorConfig(scope="payment", code="invalid_signature", default_message="Invalid signature", http_status=400)
        UNKNOWN_REFERENCE = ErrorConfig(scope="payment", code="unknown_reference", default_message="Payment not found", http_status=404)
        RECONCILIATION_FAILED = ErrorConfig(
            scope="payment", code="reconciliation_failed", default_message="Unable to confirm payment", http_status=500
        )

    class Upstream:
        TIMEOUT = ErrorConfig(scope="upstream", code="timeout", default_message="Upstream service timed out", http_status=504, retryable=True)
        FAILED = ErrorConfig(scope="upstream", code="failed", default_message="Upstream service failed", http_status=502, retryable=True)


class AppError(BaseModel):
    model_config = {"arbitrary_types_allowed": True}

    details: ErrorDetails = Field(..., description="Error details")
    http_status: int | None = Field(default=None, description="HTTP status code")
    retryable: bool = Field(default=False, description="Whether the error is retryable")
    cause: BaseException | None = Field(default=None, description="Underlying cause")


class AppException(Exception):
    """Exception wrapper for AppError that can be raised."""

    def __init__(self, app_error: AppError) -> None:
        self.app_error = app_error
        super().__init__(app_error.details.message)

    @property
    def details(self) -> ErrorDetails:
        return self.app_error.details

    @property
    def http_status(self) -> int | None:
        return self.app_error.http_status

    @property
    def retryable(self) -> bool:
        return self.app_error.retryable

    @property
    def cause(self) -> BaseException | None:
        return self.app_error.cause

    @staticmethod
    def is_any_of(error: BaseException, *errors: ErrorConfig) -> bool:
        return any(AppException.is_(error, e) for e in errors)

    @staticmethod
    def is_(error: BaseException, error_config: ErrorConfig) -> bool:
        return isinstance(error, AppException) and error.details.scope == error_config.scope and error.details.code == error_config.code
