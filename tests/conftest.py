import io
from collections.abc import Mapping

import pytest
from PIL import Image

from image_resizer.exceptions import CorruptData, ObjectNotFound, TransientIOError
from image_resizer.pipeline import ResizePipeline
from image_resizer.processor import DecodedImage, PillowCodec

SOURCE_BUCKET = "src-bucket"
DEST_BUCKET = "dest-bucket"


class FakeObjectStore:
    """In-memory ObjectStore: {bucket: {key: (bytes, metadata)}}."""

    def __init__(self) -> None:
        self.buckets: dict[str, dict[str, tuple[bytes, dict[str, str]]]] = {}
        self.calls: list[tuple[str, ...]] = []
        self.fail_on: set[str] = set()

    def add(self, bucket: str, key: str, data: bytes, metadata: Mapping[str, str] | None = None) -> None:
        self.buckets.setdefault(bucket, {})[key] = (data, dict(metadata or {}))

    def get(self, bucket: str, key: str) -> bytes | None:
        entry = self.buckets.get(bucket, {}).get(key)
        return entry[0] if entry else None

    def keys(self, bucket: str) -> set[str]:
        return set(self.buckets.get(bucket, {}))

    def _check(self, op: str, bucket: str, key: str) -> None:
        self.calls.append((op, bucket, key))
        if op in self.fail_on:
            raise TransientIOError(bucket, key, "injected")

    def _entry(self, bucket: str, key: str) -> tuple[bytes, dict[str, str]]:
        try:
            return self.buckets[bucket][key]
        except KeyError:
            raise ObjectNotFound(bucket, key) from None

    def fetch_object(self, bucket: str, key: str) -> bytes:
        self._check("fetch", bucket, key)
        return self._entry(bucket, key)[0]

    def fetch_object_metadata(self, bucket: str, key: str) -> Mapping[str, str]:
        self._check("head", bucket, key)
        return dict(self._entry(bucket, key)[1])

    def copy_object(self, src_bucket: str, src_key: str, dest_bucket: str, dest_key: str) -> None:
        self._check("copy", dest_bucket, dest_key)
        data, metadata = self._entry(src_bucket, src_key)
        self.add(dest_bucket, dest_key, data, metadata)

    def put_object(self, bucket: str, key: str, data: bytes, content_type: str | None = None) -> None:
        self._check("put", bucket, key)
        self.add(bucket, key, data)

    def delete_object(self, bucket: str, key: str) -> None:
        self._check("delete", bucket, key)
        self._entry(bucket, key)
        del self.buckets[bucket][key]

    def ops(self, op: str) -> list[tuple[str, ...]]:
        return [call for call in self.calls if call[0] == op]


class CountingCodec(PillowCodec):
    def __init__(self) -> None:
        super().__init__()
        self.decodes = 0

    def decode_image(self, data: bytes) -> DecodedImage:
        self.decodes += 1
        return super().decode_image(data)


class CorruptCodec(CountingCodec):
    def decode_image(self, data: bytes) -> DecodedImage:
        self.decodes += 1
        raise CorruptData("injected")


def make_image(width: int, height: int, fmt: str = "PNG", **save_params) -> bytes:
    mode = "RGBA" if fmt == "PNG" else "RGB"
    img = Image.new(mode, (width, height), (200, 30, 30) if mode == "RGB" else (200, 30, 30, 255))
    buf = io.BytesIO()
    img.save(buf, format=fmt, **save_params)
    return buf.getvalue()


def make_truncated_jpeg(width: int = 400, height: int = 300) -> bytes:
    """A JPEG whose header is intact but whose scan data stops three quarters in."""
    img = Image.effect_noise((width, height), 64).convert("RGB")
    buf = io.BytesIO()
    img.save(buf, format="JPEG", quality=95)
    data = buf.getvalue()
    return data[: len(data) * 3 // 4]


def make_mpo(width: int, height: int) -> bytes:
    frames = [Image.effect_noise((width, height), sigma).convert("RGB") for sigma in (32, 64)]
    buf = io.BytesIO()
    frames[0].save(buf, format="MPO", save_all=True, append_images=frames[1:])
    return buf.getvalue()


def image_size(data: bytes) -> tuple[int, int]:
    with Image.open(io.BytesIO(data)) as img:
        return img.size


@pytest.fixture
def store() -> FakeObjectStore:
    return FakeObjectStore()


@pytest.fixture
def codec() -> CountingCodec:
    return CountingCodec()


@pytest.fixture
def pipeline(store: FakeObjectStore, codec: CountingCodec) -> ResizePipeline:
    return ResizePipeline(store, codec, dest_bucket=DEST_BUCKET)
