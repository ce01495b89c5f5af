from typing import Any, List

from app.core.errors import NotFound, parse_id
from app.db.repositories.users import UserRepository
from app.db.repositories.videos import VideoRepository
from app.db.repositories.watch_history import WatchHistoryRepository
from app.features.users.schemas import OwnerCardOut
from app.features.watch_progress.schemas import (
    ContinueVideoOut,
    ContinueWatchingOut,
    ProgressIn,
    ProgressOut,
)


def progress_percent(watch_time: float, duration: float) -> float:
    """watch_time / duration × 100, 0 pour une durée nulle."""
    if not duration or duration <= 0:
        return 0.0
    return watch_time / duration * 100


class WatchProgressService:
    def __init__(
        self,
        *,
        history_repo: WatchHistoryRepository,
        video_repo: VideoRepository,
        user_repo: UserRepository,
    ):
        self.history = history_repo
        self.videos = video_repo
        self.users = user_repo

    def save(self, payload: ProgressIn, *, user_id: int) -> ProgressOut:
        vid = parse_id(payload.video_id, "video id")
        if not self.videos.get(vid):
            raise NotFound("Video not found")
        row = self.history.upsert(
            user_id=user_id,
            video_id=vid,
            watch_time=payload.watch_time,
            completed=payload.completed,
        )
        return ProgressOut.model_validate(row)

    def get(self, video_id: Any, *, user_id: int) -> ProgressOut:
        vid = parse_id(video_id, "video id")
        row = self.history.get_for(user_id=user_id, video_id=vid)
        if not row:
            return ProgressOut(video_id=vid, watch_time=0, completed=False)
        return ProgressOut.model_validate(row)

    def continue_watching(self, *, user_id: int, limit: int = 10) -> List[ContinueWatchingOut]:
        rows = self.history.list_in_progress(user_id, limit=limit)
        owners = self.users.get_many(video.owner_id for _, video in rows)

        items = []
        for entry, video in rows:
            owner = owners.get(video.owner_id)
            card = ContinueVideoOut.model_validate(video.model_dump())
            card.owner = OwnerCardOut.model_validate(owner) if owner else None
            items.append(
                ContinueWatchingOut(
                    id=entry.id,
                    watch_time=entry.watch_time,
                    watched_at=entry.watched_at,
                    progress=progress_percent(entry.watch_time, video.duration),
                    video=card,
                )
            )
        return items
