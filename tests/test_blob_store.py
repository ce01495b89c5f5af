import struct
import zlib

import pytest

from app.utils.media_files import build_object_key, validate_bytes, ALLOWED_IMAGE_MIME
from app.utils.s3 import BlobStoreError, S3BlobStore


def _png() -> bytes:
    ihdr = struct.pack(">IIBBBBB", 1, 1, 8, 2, 0, 0, 0)
    chunk = b"IHDR" + ihdr
    return b"\x89PNG\r\n\x1a\n" + struct.pack(">I", len(ihdr)) + chunk + struct.pack(">I", zlib.crc32(chunk))


MP4 = b"\x00\x00\x00\x18ftypmp42" + b"\x00" * 16


class FakeS3:
    def __init__(self, error=None):
        self.calls = []
        self.error = error

    def upload_fileobj(self, Fileobj, Bucket, Key, ExtraArgs):
        if self.error:
            raise self.error
        self.calls.append({"bucket": Bucket, "key": Key, "body": Fileobj.read(), **ExtraArgs})


@pytest.fixture
def s3():
    return FakeS3()


@pytest.fixture
def store(s3):
    return S3BlobStore(bucket="media", public_base_url="https://cdn.example.com/", s3_client_factory=lambda: s3)


class TestValidateBytes:
    def test_png_is_detected(self):
        mime, ext, size, sha = validate_bytes(_png(), max_mb=1, allowed_mime=ALLOWED_IMAGE_MIME)
        assert (mime, ext) == ("image/png", ".png")
        assert size == len(_png())
        assert len(sha) == 64

    def test_empty_file(self):
        with pytest.raises(ValueError, match="Empty"):
            validate_bytes(b"", max_mb=1, allowed_mime=ALLOWED_IMAGE_MIME)

    def test_too_large(self):
        with pytest.raises(ValueError, match="too large"):
            validate_bytes(_png() + b"\x00" * (1024 * 1024), max_mb=1, allowed_mime=ALLOWED_IMAGE_MIME)

    def test_text_is_not_an_image(self):
        with pytest.raises(ValueError, match="not allowed"):
            validate_bytes(b"hello world, not an image", max_mb=1, allowed_mime=ALLOWED_IMAGE_MIME)

    def test_object_key_layout(self):
        key = build_object_key(prefix="thumbnails", owner_id=7, ext_with_dot="png")
        assert key.startswith("thumbnails/users/7/")
        assert key.endswith(".png")
        assert build_object_key(prefix="avatars", owner_id=None, ext_with_dot=".jpg").startswith("avatars/users/anonymous/")


class TestS3BlobStore:
    def test_image_upload_returns_public_url(self, store, s3):
        out = store.upload(_png(), resource_type="image", folder="avatars", owner_id=3)
        assert out.url == f"https://cdn.example.com/{out.key}"
        assert out.key.startswith("avatars/users/3/")
        assert out.mime == "image/png"
        assert s3.calls[0]["bucket"] == "media"
        assert s3.calls[0]["ContentType"] == "image/png"
        assert s3.calls[0]["body"] == _png()

    def test_video_upload(self, store, s3):
        out = store.upload(MP4, resource_type="video", folder="videos", owner_id=1)
        assert out.mime == "video/mp4"
        assert out.key.endswith(".mp4")

    def test_image_is_not_a_video(self, store, s3):
        with pytest.raises(ValueError):
            store.upload(_png(), resource_type="video", folder="videos")
        assert s3.calls == []

    def test_unknown_resource_type(self, store):
        with pytest.raises(ValueError):
            store.upload(_png(), resource_type="audio", folder="x")

    def test_storage_failure(self):
        store = S3BlobStore(
            bucket="media",
            public_base_url="https://cdn.example.com",
            s3_client_factory=lambda: FakeS3(error=RuntimeError("connection refused")),
        )
        with pytest.raises(BlobStoreError):
            store.upload(_png(), resource_type="image", folder="avatars", owner_id=1)
