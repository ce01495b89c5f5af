"""
➡️ But : Contrôler les octets d'un média avant de les confier au stockage objet.

Le type réel est déduit du contenu (`filetype`), jamais du nom ni du Content-Type client.
"""

import datetime
import hashlib
from typing import FrozenSet, NamedTuple, Optional
from uuid import uuid4

import filetype

ALLOWED_IMAGE_MIME: FrozenSet[str] = frozenset(
    {"image/jpeg", "image/png", "image/webp", "image/avif", "image/gif"}
)

ALLOWED_VIDEO_MIME: FrozenSet[str] = frozenset(
    {
        "video/mp4",
        "video/webm",
        "video/quicktime",   # mov
        "video/x-matroska",  # mkv
        "video/x-m4v",
    }
)

UNKNOWN_MIME = "application/octet-stream"


class CheckedMedia(NamedTuple):
    mime: str
    ext: str      # avec le point : ".mp4"
    size: int
    sha256: str


def sniff(data: bytes) -> CheckedMedia:
    kind = filetype.guess(data)
    return CheckedMedia(
        mime=kind.mime if kind else UNKNOWN_MIME,
        ext=f".{kind.extension}" if kind else ".bin",
        size=len(data),
        sha256=hashlib.sha256(data).hexdigest(),
    )


def validate_bytes(data: bytes, *, max_mb: int, allowed_mime: FrozenSet[str]) -> CheckedMedia:
    """Lève ValueError si le fichier est vide, trop gros ou d'un type refusé."""
    if not data:
        raise ValueError("Empty file")
    if len(data) > max_mb * 1024 * 1024:
        raise ValueError(f"File too large (max {max_mb} MB)")

    checked = sniff(data)
    if checked.mime not in allowed_mime:
        raise ValueError(f"File type not allowed: {checked.mime}")
    return checked


def build_object_key(*, prefix: str, owner_id: Optional[int], ext_with_dot: str) -> str:
    """videos/users/12/2026-01-15/<uuid>.mp4"""
    ext = ext_with_dot if ext_with_dot.startswith(".") else f".{ext_with_dot}"
    owner = owner_id if owner_id is not None else "anonymous"
    return f"{prefix}/users/{owner}/{datetime.date.today().isoformat()}/{uuid4().hex}{ext}"
