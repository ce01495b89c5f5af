"""
➡️ But : Opérations réservées aux administrateurs (modération, statistiques, annuaire).

Un admin ne peut pas être banni ; bannir coupe aussi sa session (refresh token effacé).
"""

import logging
from datetime import timedelta
from typing import Any, Optional

from app.core.errors import Forbidden, NotFound, parse_id
from app.core.responses import Page, make_page
from app.db.models.base import utcnow
from app.db.models.users import Role, User
from app.db.repositories.users import UserRepository
from app.db.repositories.videos import VideoRepository
from app.features.admin.schemas import (
    AnalyticsOut,
    BanOut,
    EngagementOut,
    UserStatsOut,
    VideoStatsOut,
)
from app.features.users.schemas import UserOut

logger = logging.getLogger(__name__)

ENGAGEMENT_WINDOW = timedelta(days=7)


class AdminService:
    def __init__(self, *, user_repo: UserRepository, video_repo: VideoRepository):
        self.users = user_repo
        self.videos = video_repo

    def delete_video(self, video_id: Any, *, admin: User) -> None:
        vid = parse_id(video_id, "video id")
        video = self.videos.get(vid)
        if not video:
            raise NotFound("Video not found")
        self.videos.delete_cascade(video)
        logger.info("Admin %s deleted video %s", admin.id, vid)

    def toggle_ban(self, user_id: Any, *, admin: User) -> BanOut:
        uid = parse_id(user_id, "user id")
        user = self.users.get(uid)
        if not user:
            raise NotFound("User not found")
        if user.is_admin:
            raise Forbidden("Cannot ban an admin")

        banned = not user.is_banned
        changes = {"is_banned": banned, "updated_at": utcnow()}
        if banned:
            changes["refresh_token"] = None
        user = self.users.update(user, **changes)
        logger.info("Admin %s set is_banned=%s on user %s", admin.id, banned, uid)
        return BanOut(user_id=user.id, is_banned=user.is_banned)

    def analytics(self) -> AnalyticsOut:
        return AnalyticsOut(
            users=UserStatsOut(**self.users.stats()),
            videos=VideoStatsOut(**self.videos.stats()),
            engagement=EngagementOut(**self.videos.engagement_since(utcnow() - ENGAGEMENT_WINDOW)),
        )

    def list_users(
        self,
        *,
        search: Optional[str] = None,
        role: Optional[Role] = None,
        banned: Optional[bool] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Page:
        users, total = self.users.search(
            q=search,
            role=role,
            banned=banned,
            offset=(page - 1) * limit,
            limit=limit,
        )
        return make_page([UserOut.model_validate(u) for u in users], page=page, limit=limit, total=total)
