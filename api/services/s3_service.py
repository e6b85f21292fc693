"""S3 Service for course material blobs."""

import io
import logging
import uuid
from datetime import datetime
from typing import Optional, Tuple

import boto3
from botocore.exceptions import ClientError

from api.core.config import get_settings

logger = logging.getLogger(__name__)

# Returned as the message when a delete finds nothing to delete
ALREADY_ABSENT = "Blob not found."

_MISSING_CODES = {"404", "NoSuchKey", "NotFound"}


def _is_missing(error: ClientError) -> bool:
    return str(error.response.get("Error", {}).get("Code")) in _MISSING_CODES


class S3Service:
    """Service for interacting with AWS S3 for course materials."""

    def __init__(self, s3_client=None):
        settings = get_settings()
        self.bucket_name = settings.aws_s3_bucket_name
        self.region = settings.aws_region
        self.max_file_size_mb = settings.aws_s3_max_file_size_mb
        self.max_file_size_bytes = self.max_file_size_mb * 1024 * 1024
        self.public_base_url = (
            settings.aws_s3_public_base_url
            or f"https://{self.bucket_name}.s3.{self.region}.amazonaws.com"
        ).rstrip("/")

        if s3_client is not None:
            self.s3_client = s3_client
            self.enabled = True
        elif settings.aws_access_key_id and settings.aws_secret_access_key:
            self.s3_client = boto3.client(
                "s3",
                aws_access_key_id=settings.aws_access_key_id,
                aws_secret_access_key=settings.aws_secret_access_key,
                region_name=self.region,
            )
            self.enabled = True
            logger.info(f"S3 service initialized with bucket: {self.bucket_name}")
        else:
            self.s3_client = None
            self.enabled = False
            logger.warning("S3 service disabled: AWS credentials not configured")

    def is_enabled(self) -> bool:
        """Check if S3 service is enabled."""
        return self.enabled

    def generate_s3_key(self, course_id: int, filename: str) -> str:
        """
        Generate a unique S3 key for a course material.

        Format: courses/{course_id}/materials/{uuid}_{filename}
        """
        unique_id = uuid.uuid4().hex[:12]
        safe_filename = filename.replace(" ", "_")
        return f"courses/{course_id}/materials/{unique_id}_{safe_filename}"

    def public_url(self, s3_key: str) -> str:
        return f"{self.public_base_url}/{s3_key}"

    def key_from_url(self, url: str) -> str:
        """Map a public URL back to its object key; ValueError if it is not one of ours."""
        prefix = self.public_base_url + "/"
        if not url or not url.startswith(prefix) or len(url) == len(prefix):
            raise ValueError(f"Not a course material URL: {url}")
        return url[len(prefix):]

    def upload_bytes(
        self,
        content: bytes,
        s3_key: str,
        content_type: str,
        filename: str,
    ) -> Tuple[bool, Optional[str]]:
        """
        Upload a file to S3.

        Args:
            content: Raw file bytes
            s3_key: S3 object key
            content_type: MIME type of the file
            filename: Original filename for Content-Disposition

        Returns:
            Tuple of (success, error_message)
        """
        if not self.enabled:
            return False, "S3 service is not configured"

        try:
            self.s3_client.upload_fileobj(
                io.BytesIO(content),
                self.bucket_name,
                s3_key,
                ExtraArgs={
                    "ContentType": content_type,
                    "ContentDisposition": f'attachment; filename="{filename}"',
                    "Metadata": {
                        "original_filename": filename,
                        "uploaded_at": datetime.utcnow().isoformat(),
                    },
                },
            )
            logger.info(f"Successfully uploaded file to S3: {s3_key}")
            return True, None
        except ClientError as e:
            error_msg = f"Failed to upload file to S3: {e}"
            logger.error(error_msg)
            return False, error_msg

    def download_file(self, s3_key: str) -> Tuple[Optional[bytes], Optional[str]]:
        """
        Fetch an object's bytes.

        Returns:
            Tuple of (content, error_message)
        """
        if not self.enabled:
            return None, "S3 service is not configured"

        try:
            response = self.s3_client.get_object(Bucket=self.bucket_name, Key=s3_key)
            return response["Body"].read(), None
        except ClientError as e:
            if _is_missing(e):
                return None, ALREADY_ABSENT
            error_msg = f"Failed to download file from S3: {e}"
            logger.error(error_msg)
            return None, error_msg

    def delete_file(self, s3_key: str) -> Tuple[bool, Optional[str]]:
        """
        Delete a file from S3.

        A key that is already gone counts as deleted; the message is then
        ``ALREADY_ABSENT``.

        Args:
            s3_key: S3 object key to delete

        Returns:
            Tuple of (success, error_message)
        """
        if not self.enabled:
            return False, "S3 service is not configured"

        try:
            # S3 deletes are silent for missing keys, so look first
            self.s3_client.head_object(Bucket=self.bucket_name, Key=s3_key)
        except ClientError as e:
            if _is_missing(e):
                logger.info(f"S3 object already absent: {s3_key}")
                return True, ALREADY_ABSENT
            error_msg = f"Failed to delete file from S3: {e}"
            logger.error(error_msg)
            return False, error_msg

        try:
            self.s3_client.delete_object(
                Bucket=self.bucket_name,
                Key=s3_key,
            )
            logger.info(f"Successfully deleted file from S3: {s3_key}")
            return True, None
        except ClientError as e:
            if _is_missing(e):
                return True, ALREADY_ABSENT
            error_msg = f"Failed to delete file from S3: {e}"
            logger.error(error_msg)
            return False, error_msg


# Singleton instance
_s3_service: Optional[S3Service] = None


def get_s3_service() -> S3Service:
    """Get or create the S3 service singleton."""
    global _s3_service
    if _s3_service is None:
        _s3_service = S3Service()
    return _s3_service
