"""
AWS Lambda handler — Image Resize

Triggered by S3 ObjectCreated / ObjectRemoved events on the source bucket,
either directly or through an SQS queue subscribed to the bucket.

Flow:
  1. Parses the first record into an ObjectArrivalEvent.
  2. Ignores removal events.
  3. Resizes the object to its resize-width/resize-height metadata bound
     and derives a thumbnail from thumbnail-width/thumbnail-height.
  4. Writes results to DEST_BUCKET (thumbnail under thumbnails/).
  5. Deletes the source object.

Environment variables:
  DEST_BUCKET       — S3 bucket for processed objects
  THUMBNAIL_PREFIX  — key prefix for thumbnails (default: thumbnails/)
  JPEG_QUALITY      — quality for re-encoded JPEGs (default: 80)
  LOG_LEVEL         — root log level (default: INFO)
  AWS_REGION        — AWS region (set by Lambda runtime)

Store errors are not caught here: the invocation fails and the source object
stays in place for the next retry.
"""
from __future__ import annotations

import json
import logging
from functools import lru_cache

from image_resizer.config import get_settings
from image_resizer.events import parse_event
from image_resizer.pipeline import ResizePipeline
from image_resizer.processor import PillowCodec
from image_resizer.s3 import S3ObjectStore, create_s3_client

logger = logging.getLogger()
logger.setLevel(get_settings().log_level)


@lru_cache()
def get_pipeline() -> ResizePipeline:
    """Build the pipeline once per Lambda container."""
    settings = get_settings()
    return ResizePipeline(
        S3ObjectStore(create_s3_client(settings)),
        PillowCodec(jpeg_quality=settings.jpeg_quality),
        dest_bucket=settings.dest_bucket,
        thumbnail_prefix=settings.thumbnail_prefix,
    )


def handler(event: dict, context: object) -> dict:
    """Lambda entry point — processes one S3 object notification."""
    logger.info("Received S3 event: %s", json.dumps(event, default=str))

    arrival = parse_event(event)
    result = get_pipeline().run(arrival)

    return {"statusCode": 200, "body": "DONE", "result": result.model_dump(mode="json")}
