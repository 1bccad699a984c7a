"""Cognito service for handling authentication operations.
Supports both LocalStack (development) and AWS Cognito (production).
"""

import base64
import hashlib
import hmac
from typing import Any

import boto3
from botocore.exceptions import ClientError

from common.core.app_error import AppException, Errors
from common.core.config_service import ConfigService
from common.core.exceptions import COGNITO_TRANSIENT_ERROR_CODES, CognitoError, get_user_friendly_error_message
from common.core.upstream import call_upstream
from common.utils.utils import get_logger

logger = get_logger(__name__)

ROLE_ATTRIBUTE = "custom:role"


def _client_error(e: ClientError, action: str, email: str | None = None) -> CognitoError | AppException:
    """Rejections become ``CognitoError``; throttling and provider faults become a retryable upstream failure."""
    error_code = e.response.get("Error", {}).get("Code", "Unknown")
    error_message = e.response.get("Error", {}).get("Message", "Unknown error")
    if error_code in COGNITO_TRANSIENT_ERROR_CODES:
        logger.warning("Cognito unavailable", action=action, error_code=error_code, error_message=error_message)
        return Errors.Upstream.FAILED.create(
            message="Identity provider unavailable",
            details={"service": "cognito", "errorCode": error_code},
            http_status=503,
            cause=e,
        )
    logger.warning("Cognito request rejected", action=action, email=email, error_code=error_code, error_message=error_message)
    return CognitoError(get_user_friendly_error_message(error_code, error_message), error_code=error_code)


class CognitoService:
    """Service for handling Cognito authentication operations.

    boto3 is blocking, so every call runs in a worker thread under the identity timeout.
    """

    def __init__(self, config_service: ConfigService) -> None:
        self.client: Any = None  # Will be initialized lazily when needed
        self.config: dict[str, str] = config_service.get_cognito_config()
        self.aws = config_service.aws
        self.timeout_seconds = config_service.timeouts.identity_seconds
        self.auto_confirm = not config_service.is_production()

    def _ensure_client(self) -> Any:
        """Ensure the Cognito client is initialized (lazy initialization)"""
        if self.client is not None:
            return self.client

        if self.aws.has_credentials():
            session = boto3.Session(
                aws_access_key_id=self.aws.access_key_id,
                aws_secret_access_key=self.aws.secret_access_key,
                aws_session_token=self.aws.session_token or None,
                region_name=self.config["region"],
            )
        else:
            # Let boto3 use default credential chain (env vars, profile, IAM role)
            session = boto3.Session(region_name=self.config["region"])

        if self.config["endpoint_url"]:
            self.client = session.client("cognito-idp", endpoint_url=self.config["endpoint_url"])
            logger.info("Initialized Cognito client with custom endpoint", endpoint_url=self.config["endpoint_url"])
        else:
            self.client = session.client("cognito-idp")
            logger.info("Initialized Cognito client with AWS endpoint")
        return self.client

    def _calculate_secret_hash(self, username: str) -> str:
        """Calculate the secret hash for Cognito client"""
        if not self.config["client_secret"]:
            return ""

        message = username + self.config["client_id"]
        dig = hmac.new(
            self.config["client_secret"].encode("utf-8"),
            message.encode("utf-8"),
            hashlib.sha256,
        ).digest()
        return base64.b64encode(dig).decode()

    async def _call(self, func: Any, **kwargs: Any) -> Any:
        return await call_upstream("cognito", func, timeout=self.timeout_seconds, passthrough=(ClientError,), **kwargs)

    async def sign_up(self, email: str, password: str, full_name: str = "", role: str = "student") -> dict[str, Any]:
        """Sign up a new user (email as username) with the role stored as the ``custom:role`` attribute."""
        client = self._ensure_client()
        params: dict[str, Any] = {
            "ClientId": self.config["client_id"],
            "Username": email,
            "Password": password,
            "UserAttributes": [
                {"Name": "email", "Value": email},
                {"Name": "name", "Value": full_name},
                {"Name": ROLE_ATTRIBUTE, "Value": role},
            ],
        }
        if self.config["client_secret"]:
            params["SecretHash"] = self._calculate_secret_hash(email)

        try:
            response: dict[str, Any] = await self._call(client.sign_up, **params)
        except ClientError as e:
            raise _client_error(e, "sign_up", email) from e

        user_confirmed: bool = response.get("UserConfirmed", False)
        if not user_confirmed and self.auto_confirm:
            try:
                await self._call(client.admin_confirm_sign_up, UserPoolId=self.config["user_pool_id"], Username=email)
                user_confirmed = True
            except ClientError as e:
                logger.warning("Failed to auto-confirm user", email=email, error=str(e))

        logger.info("User signed up", email=email, user_confirmed=user_confirmed)
        return {
            "user_sub": response["UserSub"],
            "user_confirmed": user_confirmed,
            "email": email,
        }

    async def sign_in(self, email: str, password: str) -> dict[str, Any]:
        """Sign in a user and return tokens"""
        client = self._ensure_client()
        auth_parameters = {"USERNAME": email, "PASSWORD": password}
        if self.config["client_secret"]:
            auth_parameters["SECRET_HASH"] = self._calculate_secret_hash(email)

        try:
            response: dict[str, Any] = await self._call(
                client.initiate_auth,
                ClientId=self.config["client_id"],
                AuthFlow="USER_PASSWORD_AUTH",
                AuthParameters=auth_parameters,
            )
        except ClientError as e:
            raise _client_error(e, "sign_in", email) from e

        auth_result: dict[str, Any] | None = response.get("AuthenticationResult")
        if auth_result is None:
            challenge = response.get("ChallengeName", "Unknown")
            logger.warning("Cognito sign in requires a challenge", email=email, challenge=challenge)
            raise CognitoError("Additional verification is required to sign in.", error_code=challenge)
        logger.debug("User signed in", email=email)
        return {
            "access_token": auth_result["AccessToken"],
            "id_token": auth_result.get("IdToken"),
            "refresh_token": auth_result.get("RefreshToken"),
            "expires_in": auth_result.get("ExpiresIn", 3600),
            "email": email,
        }

    async def get_user_info(self, access_token: str) -> dict[str, Any]:
        """Resolve an access token to the user's attributes.

        Unknown or expired tokens raise CognitoError; throttling and provider faults raise ``Errors.Upstream.FAILED``.
        """
        client = self._ensure_client()
        try:
            response: dict[str, Any] = await self._call(client.get_user, AccessToken=access_token)
        except ClientError as e:
            raise _client_error(e, "get_user") from e

        user_attributes = {attr["Name"]: attr["Value"] for attr in response["UserAttributes"]}
        return {
            "username": response["Username"],
            "user_sub": user_attributes.get("sub"),
            "email": user_attributes.get("email"),
            "name": user_attributes.get("name", ""),
            "role": user_attributes.get(ROLE_ATTRIBUTE),
        }
