"""
Image resizer — static constants and enum types.
"""
import enum


class EventKind(str, enum.Enum):
    CREATED = "CREATED"
    REMOVED = "REMOVED"
    OTHER = "OTHER"


class PipelineStatus(str, enum.Enum):
    DONE = "DONE"
    IGNORED = "IGNORED"    # removal notification, nothing to do


class StageAction(str, enum.Enum):
    """What was written for one artifact."""
    RESIZED = "RESIZED"
    COPIED = "COPIED"
    SKIPPED = "SKIPPED"


class StageReason(str, enum.Enum):
    """Why a stage took its action."""
    RESIZED = "RESIZED"
    UNSUPPORTED_TYPE = "UNSUPPORTED_TYPE"
    MISSING_SIZING_METADATA = "MISSING_SIZING_METADATA"
    WITHIN_BOUND = "WITHIN_BOUND"
    TRANSFORM_FAILED = "TRANSFORM_FAILED"


# Extension (lower-case, no dot) -> content type of the re-encoded output
SUPPORTED_TYPES: dict[str, str] = {
    "jpeg": "image/jpeg",
    "jpg": "image/jpeg",
    "png": "image/png",
}

# User metadata keys (S3 strips the x-amz-meta- prefix)
META_RESIZE_WIDTH = "resize-width"
META_RESIZE_HEIGHT = "resize-height"
META_THUMBNAIL_WIDTH = "thumbnail-width"
META_THUMBNAIL_HEIGHT = "thumbnail-height"

# S3 notification eventName prefixes
S3_CREATED_PREFIX = "ObjectCreated:"
S3_REMOVED_PREFIX = "ObjectRemoved:"
