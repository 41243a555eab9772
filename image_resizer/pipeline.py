"""
Resize pipeline — one object arrival in, up to two artifacts out.

Flow per invocation (strictly sequential, no branching back):
  1. Removal event?            → done, nothing touched.
  2. Unsupported extension?    → copy primary as is, no thumbnail, cleanup.
  3. Read user metadata once   → SizingPolicy.
  4. Primary stage:  no resize bound → copy; otherwise resize or copy.
  5. Thumbnail stage: no thumbnail bound → skip; otherwise resize or copy,
     reusing the image decoded by the primary stage.
  6. Delete the source object.

A decode or resize failure only downgrades its own artifact to a copy.
Store failures propagate and leave the source object in place.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from image_resizer.constants import (
    SUPPORTED_TYPES,
    PipelineStatus,
    StageAction,
    StageReason,
)
from image_resizer.events import ObjectArrivalEvent, should_process
from image_resizer.exceptions import ObjectNotFound, TransformFailure
from image_resizer.ports import ImageCodec, ObjectStore
from image_resizer.processor import DecodedImage
from image_resizer.schemas import PipelineResult, StageOutcome
from image_resizer.sizing import (
    Dimensions,
    compute_target_size,
    needs_resize,
    parse_policy,
    sniff_type,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Artifact:
    destination_key: str
    data: bytes


# ── Image source state ──────────────────────────────────────────────────────
# Fetched bytes → decoded handle (or the decode error), never back.

@dataclass(frozen=True, slots=True)
class RawBytes:
    data: bytes


@dataclass(frozen=True, slots=True)
class Decoded:
    image: DecodedImage


@dataclass(frozen=True, slots=True)
class Undecodable:
    error: TransformFailure


ImageSource = RawBytes | Decoded | Undecodable


class _SourceImage:
    """Per-invocation holder: fetches lazily, decodes at most once."""

    def __init__(self, store: ObjectStore, codec: ImageCodec, bucket: str, key: str) -> None:
        self._store = store
        self._codec = codec
        self._bucket = bucket
        self._key = key
        self.state: ImageSource | None = None

    def decoded(self) -> DecodedImage:
        if isinstance(self.state, Decoded):
            logger.info("Reusing decoded image %s", self.state.image)
            return self.state.image
        if isinstance(self.state, Undecodable):
            raise self.state.error

        if self.state is None:
            self.state = RawBytes(self._store.fetch_object(self._bucket, self._key))
        try:
            image = self._codec.decode_image(self.state.data)
        except TransformFailure as exc:
            self.state = Undecodable(exc)
            raise
        self.state = Decoded(image)
        logger.info("Decoded %s", image)
        return image

    def close(self) -> None:
        if isinstance(self.state, Decoded):
            self.state.image.close()


class ResizePipeline:
    def __init__(
        self,
        store: ObjectStore,
        codec: ImageCodec,
        *,
        dest_bucket: str,
        thumbnail_prefix: str = "thumbnails/",
    ) -> None:
        self._store = store
        self._codec = codec
        self._dest_bucket = dest_bucket
        self._thumbnail_prefix = thumbnail_prefix

    def thumbnail_key(self, key: str) -> str:
        return f"{self._thumbnail_prefix}{key}"

    def run(self, event: ObjectArrivalEvent) -> PipelineResult:
        bucket, key = event.source_bucket, event.object_key

        if not should_process(event):
            logger.info("Removal event for s3://%s/%s — nothing to do", bucket, key)
            return PipelineResult(status=PipelineStatus.IGNORED, source_bucket=bucket, object_key=key)

        logger.info("Source bucket: %s, key: %s → %s", bucket, key, self._dest_bucket)

        ext = sniff_type(key)
        if ext is None:
            logger.info("Unsupported image type, copying %s as is", key)
            primary = self._copy(bucket, key, key, StageReason.UNSUPPORTED_TYPE)
            thumbnail = StageOutcome(action=StageAction.SKIPPED, reason=StageReason.UNSUPPORTED_TYPE)
        else:
            primary, thumbnail = self._transform(bucket, key, SUPPORTED_TYPES[ext])

        self._cleanup(bucket, key)
        return PipelineResult(
            status=PipelineStatus.DONE,
            source_bucket=bucket,
            object_key=key,
            primary=primary,
            thumbnail=thumbnail,
        )

    def _transform(self, bucket: str, key: str, content_type: str) -> tuple[StageOutcome, StageOutcome]:
        policy = parse_policy(self._store.fetch_object_metadata(bucket, key))
        source = _SourceImage(self._store, self._codec, bucket, key)
        try:
            if policy.resize is None:
                logger.info("resize-width/resize-height not set, copying %s as is", key)
                primary = self._copy(bucket, key, key, StageReason.MISSING_SIZING_METADATA)
            else:
                primary = self._resize_or_copy(source, policy.resize, bucket, key, key, content_type)

            if policy.thumbnail is None:
                thumbnail = StageOutcome(
                    action=StageAction.SKIPPED, reason=StageReason.MISSING_SIZING_METADATA,
                )
            else:
                thumbnail = self._resize_or_copy(
                    source, policy.thumbnail, bucket, key, self.thumbnail_key(key), content_type,
                )
        finally:
            source.close()
        return primary, thumbnail

    def _resize_or_copy(
        self,
        source: _SourceImage,
        bound: Dimensions,
        bucket: str,
        key: str,
        dest_key: str,
        content_type: str,
    ) -> StageOutcome:
        try:
            image = source.decoded()
            if not needs_resize(image.size, bound):
                artifact = None
            else:
                target = compute_target_size(image.size, bound)
                logger.info("Resizing %s from %s to %s (bound %s)", key, image.size, target, bound)
                artifact = Artifact(dest_key, self._codec.resize_image(image, target))
        except TransformFailure:
            logger.exception("Error resizing %s for %s, copying as is", key, dest_key)
            return self._copy(bucket, key, dest_key, StageReason.TRANSFORM_FAILED)

        if artifact is None:
            logger.info("%s is within %s, copying as is", key, bound)
            return self._copy(bucket, key, dest_key, StageReason.WITHIN_BOUND)

        self._store.put_object(self._dest_bucket, artifact.destination_key, artifact.data, content_type)
        return StageOutcome(
            action=StageAction.RESIZED,
            reason=StageReason.RESIZED,
            destination_key=dest_key,
            width=target.width,
            height=target.height,
        )

    def _copy(self, bucket: str, key: str, dest_key: str, reason: StageReason) -> StageOutcome:
        self._store.copy_object(bucket, key, self._dest_bucket, dest_key)
        return StageOutcome(action=StageAction.COPIED, reason=reason, destination_key=dest_key)

    def _cleanup(self, bucket: str, key: str) -> None:
        try:
            self._store.delete_object(bucket, key)
        except ObjectNotFound:
            logger.warning("Source s3://%s/%s already gone", bucket, key)
            return
        logger.info("Deleted source object: %s/%s", bucket, key)
