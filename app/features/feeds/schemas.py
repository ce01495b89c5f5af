from typing import List

from app.core.responses import ApiSchema
from app.features.users.schemas import OwnerProfileOut
from app.features.videos.schemas import VideoOut


class ChannelProfileOut(OwnerProfileOut):
    subscriber_count: int = 0
    channels_subscribed_to_count: int = 0
    is_subscribed: bool = False


class ProfileStatsOut(ApiSchema):
    total_videos: int = 0
    total_views: int = 0
    total_likes: int = 0


class UserProfileOut(ApiSchema):
    user: OwnerProfileOut
    videos: List[VideoOut]
    stats: ProfileStatsOut
