"""
Image processor — decode, resize and re-encode with Pillow.

The output keeps the source format (JPEG stays JPEG, PNG stays PNG) and the
embedded metadata that matters for display: EXIF (including orientation),
the ICC colour profile and PNG transparency.

Decoding is lazy: Image.open() only parses the header, so the intrinsic size
is known without touching pixel data.  Pixels are loaded on the first resize
and the loaded image is reused by any later resize of the same DecodedImage.
"""
from __future__ import annotations

import io
import logging
from typing import Any

from PIL import Image, UnidentifiedImageError

from image_resizer.exceptions import (
    CorruptData,
    ResizeFailure,
    ResourceExhausted,
    UnsupportedFormat,
)
from image_resizer.sizing import Dimensions

logger = logging.getLogger(__name__)

DEFAULT_JPEG_QUALITY = 80

# Image.info keys carried over to the re-encoded output
_PRESERVED_INFO_KEYS = ("exif", "icc_profile", "transparency")

# MPO is what Pillow reports for multi-picture JPEGs (most phone cameras)
_JPEG_FORMATS = ("JPEG", "MPO")


class DecodedImage:
    """An opened image plus its intrinsic size and format."""

    def __init__(self, image: Image.Image) -> None:
        self._image = image
        self.format: str = image.format or ""
        self.size = Dimensions(*image.size)

    @property
    def image(self) -> Image.Image:
        return self._image

    def close(self) -> None:
        self._image.close()

    def __repr__(self) -> str:
        return f"DecodedImage({self.format} {self.size})"


class PillowCodec:
    """ImageCodec backed by Pillow."""

    def __init__(self, *, jpeg_quality: int = DEFAULT_JPEG_QUALITY) -> None:
        self._jpeg_quality = jpeg_quality

    def decode_image(self, data: bytes) -> DecodedImage:
        try:
            image = Image.open(io.BytesIO(data))
        except UnidentifiedImageError as exc:
            raise UnsupportedFormat(str(exc)) from exc
        except Image.DecompressionBombError as exc:
            raise ResourceExhausted(str(exc)) from exc
        except (OSError, ValueError, SyntaxError) as exc:
            raise CorruptData(str(exc)) from exc

        if not image.format:
            raise UnsupportedFormat("decoder did not report a format")
        return DecodedImage(image)

    def resize_image(self, image: DecodedImage, size: Dimensions) -> bytes:
        """Resize to exactly *size* and encode in the source format."""
        try:
            resized = image.image.resize((size.width, size.height), Image.Resampling.LANCZOS)
            buf = io.BytesIO()
            resized.save(buf, format=image.format, **self._save_params(image))
        except (Image.DecompressionBombError, MemoryError) as exc:
            raise ResourceExhausted(str(exc)) from exc
        except (OSError, ValueError, SyntaxError) as exc:
            raise ResizeFailure(f"Could not resize {image} to {size}: {exc}") from exc

        logger.debug("Resized %s to %s (%d bytes)", image, size, buf.tell())
        return buf.getvalue()

    def _save_params(self, image: DecodedImage) -> dict[str, Any]:
        # Read after resize(): PNG chunks behind IDAT only appear in info once loaded.
        info = image.image.info
        params: dict[str, Any] = {
            key: info[key] for key in _PRESERVED_INFO_KEYS if info.get(key) is not None
        }
        if image.format in _JPEG_FORMATS:
            params.pop("transparency", None)
            params["quality"] = self._jpeg_quality
        return params
