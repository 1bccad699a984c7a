"""Signed URLs for lesson videos stored in S3 (or an S3-compatible endpoint)."""

from typing import Any

import boto3
from botocore.config import Config

from common.core.app_error import Errors
from common.core.config_service import ConfigService
from common.core.upstream import call_upstream
from common.utils.utils import get_logger

logger = get_logger(__name__)


class StorageService:
    def __init__(self, config: ConfigService) -> None:
        self.bucket = config.storage.bucket
        self.region = config.storage.region
        self.endpoint_url = config.storage.endpoint_url or None
        self.default_ttl_seconds = config.storage.signed_url_ttl_seconds
        self.timeout_seconds = config.timeouts.storage_seconds
        self.aws = config.aws
        self._client: Any = None

    def _ensure_client(self) -> Any:
        if self._client is None:
            if self.aws.has_credentials():
                session = boto3.Session(
                    aws_access_key_id=self.aws.access_key_id,
                    aws_secret_access_key=self.aws.secret_access_key,
                    aws_session_token=self.aws.session_token or None,
                    region_name=self.region,
                )
            else:
                session = boto3.Session(region_name=self.region)
            self._client = session.client("s3", endpoint_url=self.endpoint_url, config=Config(signature_version="s3v4"))
        return self._client

    async def create_signed_url(self, path: str, ttl_seconds: int | None = None) -> str:
        """Presigned GET URL for ``path`` valid for ``ttl_seconds`` (default from config)."""
        if not self.bucket:
            raise Errors.Generic.NOT_CONFIGURED.create(message="Storage bucket is not configured")

        client = self._ensure_client()
        expires_in = ttl_seconds or self.default_ttl_seconds
        url: str = await call_upstream(
            "s3",
            client.generate_presigned_url,
            "get_object",
            Params={"Bucket": self.bucket, "Key": path},
            ExpiresIn=expires_in,
            timeout=self.timeout_seconds,
        )
        logger.debug("Created signed URL", key=path, expires_in=expires_in)
        return url
