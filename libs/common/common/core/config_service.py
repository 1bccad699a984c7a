"""Configuration service for the backend application.
Loads configuration from environment variables, AWS Secrets Manager, and secrets file.
"""

import logging
import os
from pathlib import Path
from typing import Any, cast

import boto3
import yaml
from botocore.exceptions import BotoCoreError, ClientError
from dotenv import load_dotenv
from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class PaymentsSection(BaseModel):
    provider: str = "razorpay"
    key_id: str = ""
    key_secret: str = ""
    webhook_secret: str = ""
    currency: str = "INR"

    def is_configured(self) -> bool:
        return bool(self.key_id and self.key_secret)


class StorageSection(BaseModel):
    bucket: str = ""
    region: str = "us-east-1"
    endpoint_url: str = ""
    signed_url_ttl_seconds: int = 900


class TimeoutsSection(BaseModel):
    identity_seconds: float = 5.0
    payment_seconds: float = 10.0
    storage_seconds: float = 5.0


class AWSCredentials(BaseModel):
    """AWS credentials configuration."""

    access_key_id: str = ""
    secret_access_key: str = ""
    session_token: str = ""
    region: str = "us-east-1"

    def has_credentials(self) -> bool:
        """When False, boto3 falls back to its default credential chain (IAM roles, IRSA, profiles)."""
        return bool(self.access_key_id and self.secret_access_key)


class ConfigService:
    """Service for loading and accessing application configuration.
    Combines environment variables, AWS Secrets Manager, and secrets from YAML file.
    """

    payments: PaymentsSection
    storage: StorageSection
    timeouts: TimeoutsSection
    aws: AWSCredentials

    def __init__(self) -> None:
        self._config: dict[str, Any] = {}
        self._secrets: dict[str, Any] = {}
        self._aws_secrets: dict[str, Any] = {}

        self._env = os.getenv("APP_ENV", "local")

        self._load_env_file()
        self._load_env_vars()
        self._load_aws_secrets()
        self._load_secrets()

        # Secrets (yaml / Secrets Manager) win over plain env vars for key material
        self.payments = PaymentsSection(
            provider=str(self.get("payments.provider") or "razorpay"),
            key_id=str(self.get("payments.key_id") or os.getenv("RAZORPAY_KEY_ID", "")),
            key_secret=str(self.get("payments.key_secret") or os.getenv("RAZORPAY_KEY_SECRET", "")),
            webhook_secret=str(self.get("payments.webhook_secret") or os.getenv("RAZORPAY_WEBHOOK_SECRET", "")),
            currency=str(self.get("payments.currency") or "INR"),
        )

        self.storage = StorageSection(
            bucket=str(self.get("storage.bucket") or ""),
            region=str(self.get("storage.region") or os.getenv("AWS_DEFAULT_REGION", "us-east-1")),
            endpoint_url=str(self.get("storage.endpoint_url") or ""),
            signed_url_ttl_seconds=int(self.get("storage.signed_url_ttl_seconds") or 900),
        )

        self.timeouts = TimeoutsSection(
            identity_seconds=float(self.get("timeouts.identity_seconds") or 5.0),
            payment_seconds=float(self.get("timeouts.payment_seconds") or 10.0),
            storage_seconds=float(self.get("timeouts.storage_seconds") or 5.0),
        )

        self.aws = AWSCredentials(
            access_key_id=str(self.get("aws.access_key_id") or os.getenv("AWS_ACCESS_KEY_ID", "")),
            secret_access_key=str(self.get("aws.secret_access_key") or os.getenv("AWS_SECRET_ACCESS_KEY", "")),
            session_token=str(self.get("aws.session_token") or os.getenv("AWS_SESSION_TOKEN", "")),
            region=str(os.getenv("AWS_DEFAULT_REGION") or os.getenv("AWS_REGION", "us-east-1")),
        )

    def _load_env_file(self) -> None:
        """Load the appropriate .env file based on environment"""
        base_dir = Path(__file__).resolve().parent.parent.parent

        env_files_to_try: list[Path] = []
        if self._env == "local":
            env_files_to_try.append(base_dir / ".env.local")
        else:
            env_files_to_try.append(base_dir / f".env.{self._env}")
        env_files_to_try.append(base_dir / ".env")

        for env_file in env_files_to_try:
            if env_file.exists():
                logger.info(f"Loading environment from {env_file}")
                _ = load_dotenv(env_file)
                return

        logger.debug("No environment file found. Using default values.")

    def _load_env_vars(self) -> None:
        """Load configuration from environment variables"""
        self._config = {
            "app_env": self._env,
            "debug": os.getenv("DEBUG", "True").lower() in ("true", "1", "t"),
            "api_prefix": os.getenv("API_PREFIX", ""),
            "project_name": os.getenv("PROJECT_NAME", "LMS Backend"),
            "cors_origins": os.getenv("CORS_ORIGINS", os.getenv("FRONTEND_URL", "http://localhost:5173")).split(","),
            "frontend_url": os.getenv("FRONTEND_URL", "http://localhost:5173"),
            "port": int(os.getenv("PORT", "4000")),
            "host": os.getenv("HOST", "0.0.0.0"),
            "log_level": os.getenv("LOG_LEVEL", "INFO"),
            "log_json_format": os.getenv("LOG_JSON_FORMAT", "False").lower() in ("true", "1", "t"),
            "payments.currency": os.getenv("PAYMENT_CURRENCY", ""),
            "storage.bucket": os.getenv("STORAGE_BUCKET", ""),
            "storage.endpoint_url": os.getenv("STORAGE_ENDPOINT_URL", ""),
            "storage.signed_url_ttl_seconds": os.getenv("SIGNED_URL_TTL_SECONDS", ""),
            "timeouts.identity_seconds": os.getenv("IDENTITY_TIMEOUT_SECONDS", ""),
            "timeouts.payment_seconds": os.getenv("PAYMENT_TIMEOUT_SECONDS", ""),
            "timeouts.storage_seconds": os.getenv("STORAGE_TIMEOUT_SECONDS", ""),
        }
        # Empty env values fall through to secrets/defaults
        self._config = {k: v for k, v in self._config.items() if v != ""}

    def _load_aws_secrets(self) -> None:
        """Load secrets from AWS Secrets Manager if configured"""
        if self._env in ("local", "test", "testing"):
            logger.info(f"APP_ENV={self._env}. Skipping AWS Secrets Manager.")
            return

        if os.getenv("USE_AWS_SECRET_MANAGER", "true").lower() != "true":
            logger.info("AWS Secrets Manager disabled (USE_AWS_SECRET_MANAGER=false).")
            return

        secret_name = os.getenv("AWS_SECRETS_MANAGER_SECRET_NAME") or f"{self._env}_lms_secret"

        try:
            region_name = os.getenv("AWS_DEFAULT_REGION", "us-east-1")
            session = boto3.Session()
            client = session.client(  # type: ignore[misc]
                service_name="secretsmanager",
                region_name=region_name,
            )

            logger.info(f"Loading secrets from AWS Secrets Manager: {secret_name}")
            response: dict[str, Any] = client.get_secret_value(SecretId=secret_name)  # type: ignore[assignment]
            secret_string = cast(str, response["SecretString"])

            # Same YAML layout as the local secrets.yaml
            secrets_data: Any = yaml.safe_load(secret_string)
            self._aws_secrets = cast(dict[str, Any], secrets_data) if secrets_data else {}
            logger.info("Successfully loaded secrets from AWS Secrets Manager")

        except ClientError as e:
            error_code = cast(dict[str, Any], e.response).get("Error", {}).get("Code", "Unknown")
            if error_code == "ResourceNotFoundException":
                logger.exception(f"The requested secret {secret_name} was not found.")
            else:
                logger.exception(f"Error loading secrets from AWS Secrets Manager: {error_code}")
        except BotoCoreError:
            logger.exception("AWS credentials or endpoint unavailable. Cannot load secrets from AWS Secrets Manager.")
        except yaml.YAMLError:
            logger.exception("Failed to parse secrets from AWS Secrets Manager. Expected YAML format.")

    def _load_secrets(self) -> None:
        """Load secrets from YAML file"""
        base_dir = Path(__file__).resolve().parent.parent.parent
        secrets_files_to_try: list[Path] = [base_dir / "secrets.yaml", base_dir / f"secrets.{self._env}.yaml"]

        secrets_file = next((p for p in secrets_files_to_try if p.exists()), None)
        if secrets_file is None:
            logger.debug("No secrets file found. Using default values.")
            self._secrets = {}
            return

        try:
            with open(secrets_file) as f:
                self._secrets = yaml.safe_load(f) or {}
            logger.info(f"Loaded secrets from {secrets_file}")
        except (OSError, yaml.YAMLError):
            logger.exception(f"Error loading secrets file {secrets_file}")
            self._secrets = {}

    @staticmethod
    def _lookup(source: dict[str, Any], key: str) -> tuple[bool, Any]:
        value: Any = source
        for part in key.split("."):
            if isinstance(value, dict) and part in value:
                value = cast("Any", value[part])
            else:
                return False, None
        return True, value

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value by key (dotted keys address nested secrets).
        Priority order:
        1. Environment variables (from _config dict)
        2. AWS Secrets Manager
        3. Local secrets file
        4. Direct environment variable lookup (os.getenv)
        5. Default value
        """
        if key in self._config:
            return self._config[key]

        for source in (self._aws_secrets, self._secrets):
            if source:
                found, value = self._lookup(source, key)
                if found:
                    return value

        env_value = os.getenv(key)
        if env_value is not None:
            return env_value

        return default

    def get_database_url(self) -> str:
        """Get database URL.
        Priority:
        1. DATABASE_URL env var (always wins in test mode)
        2. database.url from AWS / local secrets
        3. Constructed from database.* components
        """
        db_url = os.getenv("DATABASE_URL")
        if self.is_testing() and db_url:
            return db_url

        found, url = self._lookup(self._aws_secrets, "database.url")
        if not found:
            found, url = self._lookup(self._secrets, "database.url")
        if found and url:
            return str(url)

        if db_url:
            return db_url

        username = self.get("database.username", "postgres")
        password = self.get("database.password", "postgres")
        host = self.get("database.host", "localhost")
        port = self.get("database.port", 5432)
        name = self.get("database.name", "lms")

        return f"postgresql://{username}:{password}@{host}:{port}/{name}"

    def get_cognito_config(self) -> dict[str, str]:
        """Get Cognito configuration from environment variables and secrets"""
        return {
            "user_pool_id": os.getenv("COGNITO_USER_POOL_ID", ""),
            "client_id": os.getenv("COGNITO_CLIENT_ID", ""),
            "client_secret": str(self.get("aws.cognito_client_secret", "")),
            "endpoint_url": os.getenv("COGNITO_ENDPOINT_URL", ""),
            "region": os.getenv("COGNITO_REGION", os.getenv("AWS_DEFAULT_REGION", "us-east-1")),
        }

    def get_mock_token_secret(self) -> str:
        """HS256 key for tokens issued by the mock identity provider"""
        return str(self.get("security.mock_token_secret", "local-mock-token-secret"))

    def is_development(self) -> bool:
        return self._env.lower() in ("development", "local")

    def is_production(self) -> bool:
        return self._env.lower() == "production"

    def is_testing(self) -> bool:
        return self._env.lower() in ("test", "testing")

    def use_mock_cognito(self) -> bool:
        """Check if mock Cognito service should be used"""
        return os.getenv("USE_MOCK_COGNITO", "false").lower() == "true"

    def get_environment(self) -> str:
        return self._env


# Create a singleton instance
config_service = ConfigService()


class Settings(BaseSettings):
    """Application settings that loads from environment variables and secrets file"""

    model_config = SettingsConfigDict(case_sensitive=True, extra="ignore")

    API_PREFIX: str = config_service.get("api_prefix", "")
    PROJECT_NAME: str = config_service.get("project_name", "LMS Backend")

    # Frontend origin(s), comma separated
    CORS_ORIGINS: str = ",".join(config_service.get("cors_origins", ["http://localhost:5173"]))

    DATABASE_URL: str = config_service.get_database_url()

    DEBUG: bool = config_service.get("debug", True)
    LOG_LEVEL: str = config_service.get("log_level", "INFO")

    @property
    def BACKEND_CORS_ORIGINS(self) -> list[str]:
        """Returns the CORS origins as a list"""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


settings = Settings()
