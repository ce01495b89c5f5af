from datetime import datetime
from sqlmodel import Field
from sqlalchemy import UniqueConstraint

from app.db.models.base import BaseModelDB, utcnow


class WatchHistory(BaseModelDB, table=True):
    """Progression de lecture, une ligne par (user, vidéo), upsert à chaque rapport."""
    __table_args__ = (
        UniqueConstraint("user_id", "video_id", name="uq_watch_history_user_video"),
    )

    user_id: int = Field(foreign_key="user.id", index=True, nullable=False)
    video_id: int = Field(foreign_key="video.id", index=True, nullable=False)
    watch_time: float = Field(default=0, ge=0)
    completed: bool = Field(default=False)
    watched_at: datetime = Field(default_factory=utcnow, index=True)
