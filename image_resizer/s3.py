"""
AWS S3 object store — the blocking boto3 implementation of ObjectStore.

botocore errors are translated at this boundary:
  ClientError 404 / NoSuchKey / NotFound  →  ObjectNotFound
  any other ClientError or BotoCoreError   →  TransientIOError
Retries and timeouts are left to the botocore client configuration.
"""
from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from image_resizer.config import Settings
from image_resizer.exceptions import ObjectNotFound, TransientIOError

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}


def create_s3_client(settings: Settings) -> Any:
    return boto3.client("s3", region_name=settings.aws_region)


class S3ObjectStore:
    def __init__(self, client: Any) -> None:
        self._client = client

    def fetch_object(self, bucket: str, key: str) -> bytes:
        with _translate_errors(bucket, key):
            response = self._client.get_object(Bucket=bucket, Key=key)
            return response["Body"].read()

    def fetch_object_metadata(self, bucket: str, key: str) -> Mapping[str, str]:
        """Return the object's user metadata (x-amz-meta-* without the prefix)."""
        with _translate_errors(bucket, key):
            response = self._client.head_object(Bucket=bucket, Key=key)
        return dict(response.get("Metadata", {}))

    def copy_object(self, src_bucket: str, src_key: str, dest_bucket: str, dest_key: str) -> None:
        with _translate_errors(dest_bucket, dest_key):
            self._client.copy_object(
                Bucket=dest_bucket,
                Key=dest_key,
                CopySource={"Bucket": src_bucket, "Key": src_key},
            )
        logger.info("Copied s3://%s/%s → s3://%s/%s", src_bucket, src_key, dest_bucket, dest_key)

    def put_object(
        self, bucket: str, key: str, data: bytes, content_type: str | None = None,
    ) -> None:
        params: dict[str, Any] = {"Bucket": bucket, "Key": key, "Body": data}
        if content_type:
            params["ContentType"] = content_type
        with _translate_errors(bucket, key):
            self._client.put_object(**params)
        logger.info("Uploaded s3://%s/%s (%d bytes)", bucket, key, len(data))

    def delete_object(self, bucket: str, key: str) -> None:
        with _translate_errors(bucket, key):
            self._client.delete_object(Bucket=bucket, Key=key)
        logger.info("Deleted s3://%s/%s", bucket, key)


@contextmanager
def _translate_errors(bucket: str, key: str) -> Iterator[None]:
    try:
        yield
    except ClientError as exc:
        error_code = exc.response.get("Error", {}).get("Code", "")
        if error_code in _NOT_FOUND_CODES:
            raise ObjectNotFound(bucket, key) from exc
        raise TransientIOError(bucket, key, f"{error_code or 'ClientError'}") from exc
    except BotoCoreError as exc:
        raise TransientIOError(bucket, key, str(exc)) from exc
