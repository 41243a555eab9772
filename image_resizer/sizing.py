"""
Sizing policy — what to produce for an object, and at which size.

Metadata → SizingPolicy is parsed once per invocation; everything downstream
works with Dimensions instead of raw metadata strings.

Scaling rule ("fit on the longer side"):
  - landscape (w > h): width = bound width, height derived from the ratio
  - otherwise:         height = bound height, width derived from the ratio
The derived side is not clamped to its own bound, so a near-square image with
a tighter bound on its shorter side can still exceed that bound.
"""
from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass

from image_resizer.constants import (
    META_RESIZE_HEIGHT,
    META_RESIZE_WIDTH,
    META_THUMBNAIL_HEIGHT,
    META_THUMBNAIL_WIDTH,
    SUPPORTED_TYPES,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Dimensions:
    width: int
    height: int

    def __post_init__(self) -> None:
        if self.width < 1 or self.height < 1:
            raise ValueError(f"Dimensions must be positive, got {self.width}x{self.height}")

    def __str__(self) -> str:
        return f"{self.width}x{self.height}"


@dataclass(frozen=True, slots=True)
class SizingPolicy:
    resize: Dimensions | None = None
    thumbnail: Dimensions | None = None


def sniff_type(key: str) -> str | None:
    """Return the supported image extension of *key* (lower-case), or None."""
    if "." not in key:
        return None
    ext = key.rsplit(".", 1)[-1].lower()
    return ext if ext in SUPPORTED_TYPES else None


def parse_policy(metadata: Mapping[str, str]) -> SizingPolicy:
    """Read the resize and thumbnail bounds out of S3 user metadata."""
    normalized = {k.lower(): v for k, v in metadata.items()}
    return SizingPolicy(
        resize=_bound(normalized, META_RESIZE_WIDTH, META_RESIZE_HEIGHT),
        thumbnail=_bound(normalized, META_THUMBNAIL_WIDTH, META_THUMBNAIL_HEIGHT),
    )


def needs_resize(source: Dimensions, bound: Dimensions) -> bool:
    return source.width > bound.width or source.height > bound.height


def compute_target_size(source: Dimensions, bound: Dimensions) -> Dimensions:
    ratio = source.width / source.height
    if source.width > source.height:
        return Dimensions(bound.width, max(1, _round_half_up(bound.width / ratio)))
    return Dimensions(max(1, _round_half_up(bound.height * ratio)), bound.height)


# ── Helpers ──────────────────────────────────────────────────────────────────

def _bound(metadata: Mapping[str, str], width_key: str, height_key: str) -> Dimensions | None:
    if width_key not in metadata or height_key not in metadata:
        return None
    width = _positive_int(metadata[width_key])
    height = _positive_int(metadata[height_key])
    if width is None or height is None:
        logger.warning(
            "Ignoring %s/%s: expected positive integers, got %r/%r",
            width_key, height_key, metadata[width_key], metadata[height_key],
        )
        return None
    return Dimensions(width, height)


def _positive_int(value: str) -> int | None:
    try:
        number = int(str(value).strip())
    except ValueError:
        return None
    return number if number > 0 else None


def _round_half_up(value: float) -> int:
    # Python's round() is banker's rounding; halves go up here.
    return math.floor(value + 0.5)
