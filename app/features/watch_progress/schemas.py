from datetime import datetime
from typing import Optional

from pydantic import Field

from app.core.responses import ApiSchema
from app.features.users.schemas import OwnerCardOut


class ProgressIn(ApiSchema):
    video_id: str
    watch_time: float = Field(ge=0)
    completed: bool = False


class ProgressOut(ApiSchema):
    video_id: Optional[int] = None
    watch_time: float = 0
    completed: bool = False
    watched_at: Optional[datetime] = None


class ContinueVideoOut(ApiSchema):
    id: int
    title: str
    thumbnail: str = ""
    duration: float
    views: int
    created_at: Optional[datetime] = None
    owner: Optional[OwnerCardOut] = None


class ContinueWatchingOut(ApiSchema):
    id: int
    watch_time: float
    watched_at: datetime
    progress: float
    video: ContinueVideoOut
