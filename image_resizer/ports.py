"""
Collaborator ports consumed by the resize pipeline.

Keep these small and SDK-agnostic so tests can supply simple fakes.
The production implementations are S3ObjectStore (image_resizer.s3) and
PillowCodec (image_resizer.processor).
"""
from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol

from image_resizer.processor import DecodedImage
from image_resizer.sizing import Dimensions


class ObjectStore(Protocol):
    """Blocking object store operations.

    Failures raise ObjectNotFound or TransientIOError (both StoreIOFailure).
    """

    def fetch_object(self, bucket: str, key: str) -> bytes: ...

    def fetch_object_metadata(self, bucket: str, key: str) -> Mapping[str, str]: ...

    def copy_object(self, src_bucket: str, src_key: str, dest_bucket: str, dest_key: str) -> None: ...

    def put_object(
        self, bucket: str, key: str, data: bytes, content_type: str | None = None,
    ) -> None: ...

    def delete_object(self, bucket: str, key: str) -> None: ...


class ImageCodec(Protocol):
    """Failures raise a TransformFailure subclass."""

    def decode_image(self, data: bytes) -> DecodedImage: ...

    def resize_image(self, image: DecodedImage, size: Dimensions) -> bytes: ...


__all__ = ["ImageCodec", "ObjectStore"]
