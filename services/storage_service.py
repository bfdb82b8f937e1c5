"""
Object storage for product and manufacturer images.

Only object keys are kept in the database. Clients get short-lived presigned
GET URLs for them on demand.
"""

import uuid
from functools import lru_cache
from typing import BinaryIO
from urllib.parse import urlparse, unquote

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from core.config import settings
from core.exceptions import ExternalServiceError
from utils.logger import get_logger

logger = get_logger(__name__)


def generate_filename(filename: str | None) -> str:
    """Random object key that keeps the original extension."""
    ext = ""
    if filename and "." in filename:
        ext = "." + filename.rsplit(".", 1)[1].lower()
    return f"uploads/{uuid.uuid4()}{ext}"


class StorageService:
    def __init__(self, bucket: str | None = None, client=None):
        self.bucket = bucket or settings.AWS_S3_BUCKET_NAME
        self.client = client or boto3.client(
            "s3",
            region_name=settings.AWS_REGION,
            aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
            aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
            config=Config(signature_version="s3v4"),
        )

    def generate_signed_url(self, key: str, expires_in: int | None = None) -> str:
        """
        Presigned GET URL for an object.

        Raises:
            ExternalServiceError: If the URL cannot be signed
        """
        if expires_in is None:
            expires_in = settings.SIGNED_URL_EXPIRES_SECONDS
        try:
            return self.client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket, "Key": key},
                ExpiresIn=expires_in,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error("Failed to sign URL", extra={"key": key, "error": str(e)})
            raise ExternalServiceError("Could not generate signed URL") from e

    def delete_object(self, key: str | None) -> bool:
        """Deletes an object. Returns False instead of raising on failure."""
        if not key:
            logger.warning("Cannot delete object: no key provided")
            return False
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as e:
            logger.error("Failed to delete object", extra={"key": key, "error": str(e)})
            return False

        logger.info("Deleted object", extra={"key": key})
        return True

    def upload_fileobj(self, fileobj: BinaryIO, filename: str | None, content_type: str | None = None) -> str:
        """
        Stores a file under a fresh random key and returns the key.

        Raises:
            ExternalServiceError: If the upload fails
        """
        key = generate_filename(filename)
        extra_args = {"ContentType": content_type} if content_type else {}
        try:
            self.client.upload_fileobj(fileobj, self.bucket, key, ExtraArgs=extra_args)
        except (BotoCoreError, ClientError) as e:
            logger.error("Failed to upload object", extra={"key": key, "error": str(e)})
            raise ExternalServiceError("Failed to upload file") from e

        logger.info("Uploaded object", extra={"key": key})
        return key

    def extract_key_from_url(self, url: str | None) -> str | None:
        return extract_key_from_url(url, self.bucket)


def _parse_bucket_url(url: str, bucket: str) -> tuple[bool, list[str]] | None:
    """
    Splits an S3 URL into (points at ``bucket``, decoded key segments).
    Virtual-hosted URLs carry the bucket in the host, path-style URLs in the
    first path segment.
    """
    try:
        parsed = urlparse(url)
    except ValueError:
        return None

    parts = [unquote(part) for part in parsed.path.split("/") if part]
    host = (parsed.hostname or "").lower()
    if not host.endswith("amazonaws.com"):
        return False, parts
    if host.startswith(f"{bucket.lower()}."):
        return True, parts
    if parts and parts[0] == bucket:
        return True, parts[1:]
    return False, parts


def extract_key_from_url(url: str | None, bucket: str | None = None) -> str | None:
    """
    Object key for a stored image reference.

    A value that is not a URL is already a key and comes back unchanged. For
    full URLs the path is used, minus a leading bucket segment
    (path-style URLs).

    Example:
        https://s3.us-east-1.amazonaws.com/my-bucket/uploads/a.png -> 'uploads/a.png'
    """
    if not url:
        return None

    if "://" not in url:
        return url

    parsed = _parse_bucket_url(url, bucket or settings.AWS_S3_BUCKET_NAME)
    if parsed is None:
        return None

    _, parts = parsed
    return "/".join(parts) or None


def is_bucket_reference(reference: str | None, bucket: str | None = None) -> bool:
    """True for bare object keys and for S3 URLs that point at ``bucket``."""
    if is_local_placeholder(reference):
        return False
    if "://" not in reference:
        return True

    parsed = _parse_bucket_url(reference, bucket or settings.AWS_S3_BUCKET_NAME)
    return parsed is not None and parsed[0]


def is_local_placeholder(reference: str | None) -> bool:
    # placeholders are served by the frontend, never stored in the bucket
    return not reference or reference.startswith("/")


@lru_cache
def get_storage() -> StorageService:
    return StorageService()
