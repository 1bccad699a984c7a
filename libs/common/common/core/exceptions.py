"""Identity provider exceptions and their user-facing messages."""

from typing import Any


class IdentityProviderError(Exception):
    """Base exception for identity provider failures."""

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class CognitoError(IdentityProviderError):
    """Raised when Cognito rejects a request (bad credentials, unknown token, duplicate user...)."""


# Cognito error code -> message safe to show to API clients
COGNITO_ERROR_MESSAGES = {
    "UserNotFoundException": "User not found. Please check your email address.",
    "NotAuthorizedException": "Invalid email or password. Please try again.",
    "UserNotConfirmedException": "Please confirm your email address before signing in.",
    "PasswordResetRequiredException": "Password reset is required. Please reset your password.",
    "InvalidPasswordException": "Password does not meet requirements. Please choose a stronger password.",
    "InvalidParameterException": "Invalid request parameters. Please check your input.",
    "TooManyRequestsException": "Too many requests. Please wait a moment and try again.",
    "LimitExceededException": "Request limit exceeded. Please try again later.",
    "AliasExistsException": "An account with this email already exists.",
    "UsernameExistsException": "An account with this email already exists.",
    "InternalErrorException": "Internal service error. Please try again later.",
}

# Codes that signal provider trouble rather than a rejected request
COGNITO_TRANSIENT_ERROR_CODES = frozenset(
    {
        "TooManyRequestsException",
        "LimitExceededException",
        "InternalErrorException",
        "ServiceUnavailable",
        "ThrottlingException",
    }
)


def get_user_friendly_error_message(
    cognito_error_code: str,
    default_message: str | None = None,
) -> str:
    """Get a user-friendly error message for a Cognito error code.

    Args:
        cognito_error_code: The Cognito error code
        default_message: Default message if no mapping found

    Returns:
        User-friendly error message
    """
    return COGNITO_ERROR_MESSAGES.get(
        cognito_error_code,
        default_message or "An unexpected error occurred. Please try again.",
    )
