"""
Trigger boundary — turns a raw Lambda payload into an ObjectArrivalEvent.

Accepted payloads:
  - An S3 notification: {"Records": [{"eventName": ..., "s3": {...}}]}
  - The same notification delivered through SQS:
    {"Records": [{"eventSource": "aws:sqs", "body": "<S3 notification JSON>"}]}

Only the first record is inspected; one object per invocation.
"""
from __future__ import annotations

import json
import logging
import urllib.parse
from typing import Any

from pydantic import BaseModel, ConfigDict

from image_resizer.constants import EventKind, S3_CREATED_PREFIX, S3_REMOVED_PREFIX
from image_resizer.exceptions import InvalidEvent

logger = logging.getLogger(__name__)


class ObjectArrivalEvent(BaseModel):
    """A single object notification from the source bucket."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    event_kind: EventKind
    source_bucket: str
    object_key: str


def classify_event_name(event_name: str) -> EventKind:
    if event_name.startswith(S3_REMOVED_PREFIX):
        return EventKind.REMOVED
    if event_name.startswith(S3_CREATED_PREFIX):
        return EventKind.CREATED
    return EventKind.OTHER


def should_process(event: ObjectArrivalEvent) -> bool:
    """Removal notifications end the invocation without touching the stores."""
    return event.event_kind is not EventKind.REMOVED


def parse_event(raw: dict[str, Any]) -> ObjectArrivalEvent:
    """Build an ObjectArrivalEvent from the first record of a Lambda payload."""
    record = _first_record(raw)

    if record.get("eventSource") == "aws:sqs":
        body = record.get("body") or "{}"
        if isinstance(body, (bytes, bytearray)):
            body = body.decode("utf-8")
        if isinstance(body, str):
            try:
                body = json.loads(body)
            except json.JSONDecodeError as exc:
                raise InvalidEvent(f"SQS body is not JSON ({exc.msg})") from exc
        record = _first_record(body)

    s3_info = record.get("s3") or {}
    bucket = (s3_info.get("bucket") or {}).get("name", "")
    key = urllib.parse.unquote_plus((s3_info.get("object") or {}).get("key", ""))

    if not bucket or not key:
        raise InvalidEvent("missing bucket or key")

    return ObjectArrivalEvent(
        event_kind=classify_event_name(record.get("eventName", "")),
        source_bucket=bucket,
        object_key=key,
    )


def _first_record(payload: Any) -> dict[str, Any]:
    records = payload.get("Records") if isinstance(payload, dict) else None
    if not records:
        raise InvalidEvent("no records")
    if len(records) > 1:
        logger.warning("Event carries %d records; only the first is processed", len(records))
    return records[0]
