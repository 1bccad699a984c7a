"""Chooses between the real and the mock identity provider based on configuration."""

from app.services.cognito_service import CognitoService
from app.services.mock_cognito_service import MockCognitoService
from common.core.config_service import ConfigService
from common.utils.utils import get_logger

logger = get_logger(__name__)

IdentityProvider = CognitoService | MockCognitoService


def get_cognito_service(config_service: ConfigService) -> IdentityProvider:
    """Factory function to get appropriate Cognito service"""
    if config_service.use_mock_cognito():
        if config_service.is_production():
            raise RuntimeError("USE_MOCK_COGNITO is not allowed in production")
        logger.info("Using Mock Cognito Service", environment=config_service.get_environment())
        return MockCognitoService(config_service.get_mock_token_secret())

    logger.info("Using Real Cognito Service", environment=config_service.get_environment())
    return CognitoService(config_service)
