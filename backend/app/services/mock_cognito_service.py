"""Mock Cognito service for local development and tests.
Provides the same interface as the real Cognito service; users live in memory and access
tokens are HS256 JWTs signed with a local secret.
"""

import hashlib
import time
from typing import Any

from jose import JWTError, jwt

from common.core.exceptions import CognitoError
from common.utils.utils import get_logger

logger = get_logger(__name__)

_ALGORITHM = "HS256"
_ISSUER = "mock-cognito"


class MockCognitoService:
    """Mock implementation of the Cognito service.
    Generates deterministic user_sub values so a re-created user keeps its profile.
    """

    def __init__(self, token_secret: str, token_ttl_seconds: int = 3600) -> None:
        self._token_secret = token_secret
        self._token_ttl_seconds = token_ttl_seconds
        self._users: dict[str, dict[str, Any]] = {}
        logger.info("Initialized Mock Cognito Service")

    @staticmethod
    def generate_user_sub(email: str) -> str:
        """Generate deterministic user_sub based on email"""
        email_hash = hashlib.sha256(email.lower().encode()).hexdigest()[:12]
        return f"mock-user-{email_hash}"

    def issue_token(self, user_sub: str, email: str, role: str | None = None, name: str = "") -> str:
        now = int(time.time())
        claims: dict[str, Any] = {
            "sub": user_sub,
            "email": email,
            "name": name,
            "iss": _ISSUER,
            "iat": now,
            "exp": now + self._token_ttl_seconds,
        }
        if role:
            claims["custom:role"] = role
        return jwt.encode(claims, self._token_secret, algorithm=_ALGORITHM)

    async def sign_up(self, email: str, password: str, full_name: str = "", role: str = "student") -> dict[str, Any]:
        if email in self._users:
            raise CognitoError("An account with this email already exists.", error_code="UsernameExistsException")

        user_sub = self.generate_user_sub(email)
        self._users[email] = {"user_sub": user_sub, "password": password, "name": full_name, "role": role}
        logger.info("Mock Cognito: created user", email=email, user_sub=user_sub)
        return {"user_sub": user_sub, "user_confirmed": True, "email": email}

    async def sign_in(self, email: str, password: str) -> dict[str, Any]:
        user = self._users.get(email)
        if user is None or user["password"] != password:
            raise CognitoError("Invalid email or password. Please try again.", error_code="NotAuthorizedException")

        access_token = self.issue_token(user["user_sub"], email, role=user["role"], name=user["name"])
        return {
            "access_token": access_token,
            "id_token": access_token,
            "refresh_token": None,
            "expires_in": self._token_ttl_seconds,
            "email": email,
        }

    async def get_user_info(self, access_token: str) -> dict[str, Any]:
        try:
            claims = jwt.decode(access_token, self._token_secret, algorithms=[_ALGORITHM], issuer=_ISSUER)
        except JWTError as e:
            raise CognitoError("Invalid or expired token", error_code="NotAuthorizedException") from e

        return {
            "username": claims.get("email") or claims["sub"],
            "user_sub": claims["sub"],
            "email": claims.get("email"),
            "name": claims.get("name", ""),
            "role": claims.get("custom:role"),
        }
