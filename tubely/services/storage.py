"""
S3-compatible object storage for processed videos (AWS S3, or MinIO via s3_endpoint_url).
"""
import logging
from pathlib import Path

import boto3
from boto3.exceptions import S3UploadFailedError
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError
from fastapi import Request

from tubely.config import Settings
from tubely.errors import InternalError

logger = logging.getLogger(__name__)


class ObjectStorage:
    def __init__(self, settings: Settings, client=None):
        self.bucket = settings.s3_bucket
        self.public_base_url = settings.s3_cf_distribution.rstrip("/")
        if client is None:
            client = boto3.client(
                "s3",
                endpoint_url=settings.s3_endpoint_url or None,
                aws_access_key_id=settings.s3_access_key_id or None,
                aws_secret_access_key=settings.s3_secret_access_key or None,
                region_name=settings.s3_region,
                config=Config(
                    signature_version="s3v4",
                    s3={"addressing_style": "path"},
                    # Single attempt: failures surface to the request, never retried
                    retries={"total_max_attempts": 1, "mode": "standard"},
                ),
            )
        self.client = client

    def upload_file(self, file_path: Path | str, key: str, content_type: str) -> str:
        """Upload a local file to <bucket>/<key>. Returns the key."""
        try:
            self.client.upload_file(
                str(file_path),
                self.bucket,
                key,
                ExtraArgs={"ContentType": content_type},
            )
        except (ClientError, BotoCoreError, S3UploadFailedError) as e:
            logger.error("Upload to s3://%s/%s failed: %s", self.bucket, key, e)
            raise InternalError("Couldn't upload video to storage") from e
        logger.info("Uploaded %s to s3://%s/%s", file_path, self.bucket, key)
        return key

    def public_url(self, key: str) -> str:
        return f"{self.public_base_url}/{key}"


def get_object_storage(request: Request) -> ObjectStorage:
    return request.app.state.object_storage
