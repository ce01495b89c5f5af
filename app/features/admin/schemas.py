from app.core.responses import ApiSchema


class BanOut(ApiSchema):
    user_id: int
    is_banned: bool


class UserStatsOut(ApiSchema):
    total_users: int = 0
    banned_users: int = 0
    admin_users: int = 0


class VideoStatsOut(ApiSchema):
    total_videos: int = 0
    total_views: int = 0
    total_likes: int = 0
    shorts: int = 0


class EngagementOut(ApiSchema):
    videos_last_7_days: int = 0
    views_last_7_days: int = 0


class AnalyticsOut(ApiSchema):
    users: UserStatsOut
    videos: VideoStatsOut
    engagement: EngagementOut
