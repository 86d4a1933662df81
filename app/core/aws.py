"""AWS S3 storage for cover and in-content images."""

import logging
import re
from typing import Optional
from urllib.parse import quote

import boto3
from botocore.exceptions import ClientError
from app.core.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)


class S3Service:
    """Handles S3 interactions."""

    _instance = None
    _s3_client = None

    def __new__(cls):
        """Singleton pattern."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            try:
                cls._instance._s3_client = boto3.client(
                    "s3",
                    aws_access_key_id=settings.AWS_ACCESS_KEY_ID or None,
                    aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY or None,
                    region_name=settings.AWS_REGION,
                    config=boto3.session.Config(s3={'addressing_style': 'path'})
                )
            except Exception as e:
                logger.error(f"Failed to initialize S3 client: {e}")
                cls._instance._s3_client = None
        return cls._instance

    @property
    def client(self):
        """Get S3 client."""
        return self._s3_client

    @staticmethod
    def _validated_bucket_name() -> str:
        bucket = (settings.AWS_S3_BUCKET or "").strip()
        # Prevent boto3 raising a cryptic "Invalid bucket name" error when env is misconfigured.
        if not bucket:
            raise ValueError("AWS_S3_BUCKET is not configured.")
        # https://docs.aws.amazon.com/AmazonS3/latest/userguide/bucketnamingrules.html
        if not re.fullmatch(r"[a-z0-9][a-z0-9.-]{1,61}[a-z0-9]", bucket):
            raise ValueError(f"Invalid AWS_S3_BUCKET value '{bucket}'.")
        return bucket

    def generate_presigned_put_url(self, object_name: str, file_type: str, expiration=300):
        """Presigned PUT URL the browser uploads an image to directly."""
        if not self.client:
            raise ValueError("AWS S3 credentials not configured.")

        try:
            bucket = self._validated_bucket_name()
            return self.client.generate_presigned_url(
                ClientMethod='put_object',
                Params={
                    'Bucket': bucket,
                    'Key': object_name,
                    'ContentType': file_type
                },
                ExpiresIn=expiration
            )
        except ClientError as e:
            logger.error(f"Error generating presigned PUT URL: {e}")
            raise

    def view_url(self, object_name: str, expiration=3600) -> str:
        """Original-size retrieval URL for a stored image."""
        if not self.client:
            raise ValueError("AWS S3 credentials not configured.")

        try:
            bucket = self._validated_bucket_name()
            return self.client.generate_presigned_url(
                ClientMethod='get_object',
                Params={
                    'Bucket': bucket,
                    'Key': object_name
                },
                ExpiresIn=expiration
            )
        except ClientError as e:
            logger.error(f"Error generating presigned GET URL: {e}")
            raise

    def preview_url(self, object_name: str, width: int = 800) -> str:
        """
        Resized retrieval URL.

        Uses the image-resizing endpoint in front of the bucket when
        S3_PREVIEW_BASE_URL is configured, the original otherwise.
        """
        base = (settings.S3_PREVIEW_BASE_URL or "").strip()
        if base:
            return f"{base.rstrip('/')}/{quote(object_name.lstrip('/'))}?width={width}"
        return self.view_url(object_name)


def resolve_image_url(key: Optional[str], *, preview: bool = False) -> Optional[str]:
    """Turn a stored file key into a loadable URL; absolute URLs pass through."""
    if not key:
        return None
    value = str(key).strip()
    if value.startswith("http://") or value.startswith("https://"):
        return value
    try:
        s3 = S3Service()
        return s3.preview_url(value) if preview else s3.view_url(value)
    except (ValueError, ClientError) as e:
        logger.warning(f"Could not build image URL for {value[:60]}: {e}")
        return None
