from typing import Optional, Sequence, Tuple

from sqlalchemy.exc import IntegrityError
from sqlmodel import select

from app.db.repositories.base import BaseRepository
from app.db.models.base import utcnow
from app.db.models.videos import Video
from app.db.models.watch_history import WatchHistory


class WatchHistoryRepository(BaseRepository[WatchHistory]):
    model = WatchHistory

    def get_for(self, *, user_id: int, video_id: int) -> Optional[WatchHistory]:
        stmt = select(WatchHistory).where(
            WatchHistory.user_id == user_id,
            WatchHistory.video_id == video_id,
        )
        return self.session.exec(stmt).first()

    def upsert(self, *, user_id: int, video_id: int, watch_time: float, completed: bool) -> WatchHistory:
        """Une ligne par (user, vidéo) : création au premier rapport, mise à jour ensuite."""
        now = utcnow()
        fields = {"watch_time": watch_time, "completed": completed, "watched_at": now}

        existing = self.get_for(user_id=user_id, video_id=video_id)
        if existing is None:
            try:
                return self.create(user_id=user_id, video_id=video_id, **fields)
            except IntegrityError:
                # premier rapport concurrent : la ligne existe maintenant, on la met à jour
                self.session.rollback()
                existing = self.get_for(user_id=user_id, video_id=video_id)
                if existing is None:
                    raise
        return self.update(existing, updated_at=now, **fields)

    def list_in_progress(self, user_id: int, *, limit: int) -> Sequence[Tuple[WatchHistory, Video]]:
        """Non terminées, avec progression > 0, les plus récentes d'abord."""
        stmt = (
            select(WatchHistory, Video)
            .join(Video, Video.id == WatchHistory.video_id)
            .where(
                WatchHistory.user_id == user_id,
                WatchHistory.completed.is_(False),
                WatchHistory.watch_time > 0,
            )
            .order_by(WatchHistory.watched_at.desc(), WatchHistory.id.desc())
            .limit(limit)
        )
        return self.session.exec(stmt).all()

    def list_watched_videos(self, user_id: int) -> Sequence[Video]:
        stmt = (
            select(Video)
            .join(WatchHistory, WatchHistory.video_id == Video.id)
            .where(WatchHistory.user_id == user_id)
            .order_by(WatchHistory.watched_at.desc(), WatchHistory.id.desc())
        )
        return self.session.exec(stmt).all()
