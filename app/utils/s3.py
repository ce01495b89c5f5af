"""
➡️ But : Le "blob store" : pousse des octets dans S3/MinIO et renvoie une URL publique.

BlobStore : interface minimale utilisée par les services (facile à remplacer en test).

S3BlobStore : implémentation boto3, valide les octets (type réel + taille) avant l'envoi.
"""

import io
import logging
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

import boto3
from botocore.client import Config as BotoConfig

from app.core.config import settings
from app.utils.media_files import (
    ALLOWED_IMAGE_MIME,
    ALLOWED_VIDEO_MIME,
    build_object_key,
    validate_bytes,
)

logger = logging.getLogger(__name__)


def make_s3_client(endpoint_url: str):
    cfg = BotoConfig(
        signature_version="s3v4",
        s3={"addressing_style": "path"},
    )
    return boto3.client(
        "s3",
        endpoint_url=endpoint_url,
        region_name=settings.S3_REGION,
        aws_access_key_id=settings.S3_KEY,
        aws_secret_access_key=settings.S3_SECRET,
        config=cfg,
        use_ssl=endpoint_url.startswith("https"),
    )

def make_s3_internal():
    return make_s3_client(str(settings.S3_ENDPOINT))


class BlobStoreError(Exception):
    """Échec d'envoi vers le stockage objet (réseau, droits, bucket...)."""


@dataclass(frozen=True)
class BlobUpload:
    url: str
    key: str
    mime: str
    bytes: int


class BlobStore(Protocol):
    def upload(self, data: bytes, *, resource_type: str, folder: str, owner_id: Optional[int] = None) -> BlobUpload:
        """Lève ValueError si les octets sont refusés, BlobStoreError si l'envoi échoue."""
        ...


class S3BlobStore:
    # resource_type -> (mimes autorisés, taille max en Mo)
    LIMITS = {
        "video": (ALLOWED_VIDEO_MIME, lambda: settings.MAX_VIDEO_UPLOAD_MB),
        "image": (ALLOWED_IMAGE_MIME, lambda: settings.MAX_IMAGE_UPLOAD_MB),
    }

    def __init__(
        self,
        *,
        bucket: Optional[str] = None,
        public_base_url: Optional[str] = None,
        s3_client_factory: Callable[[], object] = make_s3_internal,
    ):
        self.bucket = bucket or settings.S3_BUCKET
        self.public_base_url = (public_base_url or settings.S3_PUBLIC_BASE_URL or "").rstrip("/")
        self._s3_factory = s3_client_factory

    def upload(self, data: bytes, *, resource_type: str, folder: str, owner_id: Optional[int] = None) -> BlobUpload:
        if resource_type not in self.LIMITS:
            raise ValueError(f"Type de ressource inconnu: {resource_type}")
        allowed, max_mb = self.LIMITS[resource_type]
        mime, ext, size, sha = validate_bytes(data, max_mb=max_mb(), allowed_mime=allowed)

        key = build_object_key(prefix=folder, owner_id=owner_id, ext_with_dot=ext)
        s3 = self._s3_factory()
        try:
            s3.upload_fileobj(
                Fileobj=io.BytesIO(data),
                Bucket=self.bucket,
                Key=key,
                ExtraArgs={"ContentType": mime, "Metadata": {"sha256": sha}},
            )
        except Exception as e:
            logger.error("Upload to bucket %s failed for %s: %s", self.bucket, key, e)
            raise BlobStoreError(f"Erreur upload S3: {e}") from e

        return BlobUpload(url=f"{self.public_base_url}/{key}", key=key, mime=mime, bytes=size)
