"""Bearer credential verification against the identity provider."""

import asyncio

from app.services.service_factory import IdentityProvider
from common.core.app_error import AppException, Errors
from common.core.exceptions import CognitoError
from common.ids import UserId
from common.utils.utils import get_logger
from shared_db.schemas.auth import Principal

logger = get_logger(__name__)


class TokenVerifier:
    def __init__(self, identity_provider: IdentityProvider, timeout_seconds: float) -> None:
        self._identity_provider = identity_provider
        self._timeout_seconds = timeout_seconds

    @staticmethod
    def extract_bearer_token(authorization: str | None) -> str:
        """Parse ``Bearer <token>``. Anything else is rejected before the identity provider is contacted."""
        if not authorization:
            raise Errors.Auth.UNAUTHENTICATED.create(message="No Authorization header")

        parts = authorization.split(" ")
        if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1]:
            raise Errors.Auth.UNAUTHENTICATED.create(message="Malformed Authorization header")
        return parts[1]

    async def verify(self, authorization: str | None) -> Principal:
        token = self.extract_bearer_token(authorization)

        try:
            user_info = await asyncio.wait_for(self._identity_provider.get_user_info(token), timeout=self._timeout_seconds)
        except CognitoError as e:
            logger.info("Credential rejected by identity provider", error_code=e.error_code)
            raise Errors.Auth.INVALID_CREDENTIAL.create(cause=e) from e
        except TimeoutError as e:
            logger.warning("Identity provider timed out", timeout=self._timeout_seconds)
            raise Errors.Upstream.TIMEOUT.create(message="Identity provider timed out", http_status=503, cause=e) from e
        except AppException as e:
            if AppException.is_any_of(e, Errors.Upstream.TIMEOUT, Errors.Upstream.FAILED):
                raise Errors.Upstream.FAILED.create(message="Identity provider unavailable", http_status=503, retryable=True) from e
            raise

        user_sub = user_info.get("user_sub")
        if not user_sub:
            raise Errors.Auth.INVALID_CREDENTIAL.create(message="Token has no subject")

        return Principal(
            user_id=UserId(str(user_sub)),
            email=user_info.get("email"),
            username=user_info.get("username"),
            metadata_role=user_info.get("role"),
        )
