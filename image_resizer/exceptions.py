"""
Image resizer — domain-specific exceptions.

All exceptions carry preset messages so that callers only pass the values that
identify the failing object.  Two families matter to the pipeline:

  StoreIOFailure    — raised by the object store adapter; never caught by the
                      pipeline, aborts the invocation.
  TransformFailure  — raised by the image codec; caught per stage and
                      downgraded to a passthrough copy.
"""
from __future__ import annotations


class ResizerError(Exception):
    """Base class for every error raised by image_resizer."""


# ── Trigger ─────────────────────────────────────────────────────────────────

class InvalidEvent(ResizerError):
    def __init__(self, reason: str) -> None:
        super().__init__(f"Invalid object arrival event: {reason}.")
        self.reason = reason


# ── Object store ────────────────────────────────────────────────────────────

class StoreIOFailure(ResizerError):
    def __init__(self, bucket: str, key: str, detail: str = "") -> None:
        message = f"Object store call failed for s3://{bucket}/{key}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.bucket = bucket
        self.key = key


class ObjectNotFound(StoreIOFailure):
    def __init__(self, bucket: str, key: str) -> None:
        super().__init__(bucket, key, "object not found")


class TransientIOError(StoreIOFailure):
    pass


# ── Image codec ─────────────────────────────────────────────────────────────

class TransformFailure(ResizerError):
    """Decode or resize failed; the pipeline falls back to a plain copy."""


class DecodeFailure(TransformFailure):
    pass


class UnsupportedFormat(DecodeFailure):
    def __init__(self, detail: str = "") -> None:
        super().__init__(f"Image format not recognised. {detail}".strip())


class CorruptData(DecodeFailure):
    def __init__(self, detail: str = "") -> None:
        super().__init__(f"Image data is corrupt or truncated. {detail}".strip())


class ResizeFailure(TransformFailure):
    pass


class ResourceExhausted(ResizeFailure):
    def __init__(self, detail: str = "") -> None:
        super().__init__(f"Image is too large to process. {detail}".strip())
