"""
➡️ But : Cycle de vie d'une vidéo (publication, modification, suppression, visibilité).

Le média principal est obligatoire : échec d'upload → erreur (400 fichier refusé, 500 stockage).
La miniature est facultative : en cas d'échec on garde "" (ou l'ancienne miniature).

Seul le propriétaire ou un admin peut modifier / supprimer / (dé)publier.
"""

import logging
import math
from typing import Any, Optional

from app.core.config import settings
from app.core.errors import Forbidden, Internal, InvalidArgument, NotFound, parse_id
from app.db.models.users import User
from app.db.models.videos import Category, Video
from app.db.repositories.videos import VideoRepository
from app.features.videos.presenter import VideoPresenter
from app.features.videos.schemas import (
    PublishStatusOut,
    PublishVideoIn,
    UpdateVideoIn,
    VideoOut,
)
from app.utils.s3 import BlobStore, BlobStoreError

logger = logging.getLogger(__name__)


def is_short_duration(duration: float) -> bool:
    return duration <= settings.SHORT_MAX_DURATION_SECONDS


def _parse_duration(raw: Optional[str]) -> float:
    try:
        duration = float(raw)
    except (TypeError, ValueError):
        raise InvalidArgument("Duration (in seconds) is required and must be a number")
    if math.isnan(duration) or math.isinf(duration) or duration < 0:
        raise InvalidArgument("Duration (in seconds) is required and must be a number")
    return duration


class VideoService:
    def __init__(
        self,
        *,
        video_repo: VideoRepository,
        blob_store: BlobStore,
        presenter: VideoPresenter,
    ):
        self.videos = video_repo
        self.blobs = blob_store
        self.presenter = presenter

    # ---------- Publication ----------
    def publish(
        self,
        payload: PublishVideoIn,
        *,
        owner: User,
        video_file: Optional[bytes],
        thumbnail: Optional[bytes] = None,
    ) -> VideoOut:
        if not video_file:
            raise InvalidArgument("Video file is required", errors=[{"field": "videoFile"}])
        title = payload.title.strip()
        if not title:
            raise InvalidArgument("Title is required", errors=[{"field": "title"}])
        duration = _parse_duration(payload.duration)

        try:
            uploaded = self.blobs.upload(video_file, resource_type="video", folder="videos", owner_id=owner.id)
        except ValueError as e:
            raise InvalidArgument(f"Video file rejected: {e}")
        except BlobStoreError as e:
            raise Internal(f"Failed to upload video: {e}")

        thumbnail_url = self._try_thumbnail(thumbnail, owner_id=owner.id) or ""

        video = self.videos.create(
            commit=False,
            title=title,
            description=payload.description.strip(),
            video_file=uploaded.url,
            thumbnail=thumbnail_url,
            duration=duration,
            category=payload.category or Category.OTHER,
            is_short=is_short_duration(duration),
            owner_id=owner.id,
        )
        self.videos.replace_tags(video.id, payload.tags, commit=False)
        self.videos.session.commit()
        self.videos.session.refresh(video)

        logger.info("Video %s published by user %s (short=%s)", video.id, owner.id, video.is_short)
        return self.presenter.card(video, viewer_id=owner.id)

    def _try_thumbnail(self, data: Optional[bytes], *, owner_id: int) -> Optional[str]:
        if not data:
            return None
        try:
            return self.blobs.upload(data, resource_type="image", folder="thumbnails", owner_id=owner_id).url
        except (ValueError, BlobStoreError) as e:
            logger.warning("Thumbnail upload failed for user %s: %s", owner_id, e)
            return None

    # ---------- Modification ----------
    def _get_for_edit(self, video_id: Any, actor: User, action: str) -> Video:
        vid = parse_id(video_id, "video id")
        video = self.videos.get(vid)
        if not video:
            raise NotFound("Video not found")
        if video.owner_id != actor.id and not actor.is_admin:
            raise Forbidden(f"Not authorized to {action} this video")
        return video

    def update(
        self,
        video_id: Any,
        payload: UpdateVideoIn,
        *,
        actor: User,
        thumbnail: Optional[bytes] = None,
    ) -> VideoOut:
        video = self._get_for_edit(video_id, actor, "update")

        changes = {}
        if payload.title is not None:
            title = payload.title.strip()
            if not title:
                raise InvalidArgument("Title cannot be empty", errors=[{"field": "title"}])
            changes["title"] = title
        if payload.description is not None:
            changes["description"] = payload.description.strip()
        if payload.category is not None:
            changes["category"] = payload.category

        thumbnail_url = self._try_thumbnail(thumbnail, owner_id=video.owner_id)
        if thumbnail_url:
            changes["thumbnail"] = thumbnail_url

        if payload.tags is not None:
            self.videos.replace_tags(video.id, payload.tags, commit=False)
        video = self.videos.touch(video, **changes)
        return self.presenter.card(video, viewer_id=actor.id)

    def delete(self, video_id: Any, *, actor: User) -> None:
        video = self._get_for_edit(video_id, actor, "delete")
        vid = video.id
        self.videos.delete_cascade(video)
        logger.info("Video %s deleted by user %s", vid, actor.id)

    def toggle_publish(self, video_id: Any, *, actor: User) -> PublishStatusOut:
        video = self._get_for_edit(video_id, actor, "change publish status of")
        video = self.videos.touch(video, is_published=not video.is_published)
        return PublishStatusOut(id=video.id, is_published=video.is_published)
