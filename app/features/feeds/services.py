"""
➡️ But : Lectures du catalogue (listes filtrées, détail, recommandations, shorts, profils).

Le service ne construit pas de SQL lui-même : les conditions viennent de
filters.build_video_conditions, les requêtes des repositories.
"""

from datetime import datetime
from typing import Any, Optional

from app.core.errors import NotFound, parse_id
from app.core.responses import Page, make_page
from app.db.repositories.subscriptions import SubscriptionRepository
from app.db.repositories.users import UserRepository
from app.db.repositories.videos import VideoRepository
from app.features.feeds.filters import (
    SORT_OPTIONS,
    SortOption,
    VideoFilterSpec,
    build_video_conditions,
)
from app.features.feeds.schemas import ChannelProfileOut, ProfileStatsOut, UserProfileOut
from app.features.users.schemas import OwnerProfileOut
from app.features.videos.presenter import VideoPresenter
from app.features.videos.schemas import VideoDetailOut


class FeedService:
    def __init__(
        self,
        *,
        video_repo: VideoRepository,
        user_repo: UserRepository,
        subscription_repo: SubscriptionRepository,
        presenter: VideoPresenter,
    ):
        self.videos = video_repo
        self.users = user_repo
        self.subscriptions = subscription_repo
        self.presenter = presenter

    # ---------- Catalogue ----------
    def list_videos(
        self,
        spec: VideoFilterSpec,
        *,
        sort: SortOption = SortOption.NEWEST,
        page: int = 1,
        limit: int = 10,
        viewer_id: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> Page:
        conditions = build_video_conditions(spec, now)
        rows = self.videos.search(
            conditions,
            order_by=SORT_OPTIONS[sort],
            offset=(page - 1) * limit,
            limit=limit,
        )
        total = self.videos.count_where(conditions)
        return make_page(self.presenter.cards(rows, viewer_id=viewer_id), page=page, limit=limit, total=total)

    def get_video_detail(self, video_id: Any, *, viewer_id: Optional[int] = None) -> VideoDetailOut:
        vid = parse_id(video_id, "video id")
        # chaque consultation compte (pas de déduplication)
        if not self.videos.increment_views(vid):
            raise NotFound("Video not found")
        video = self.videos.get(vid)
        if not video:
            raise NotFound("Video not found")
        return self.presenter.detail(video, viewer_id=viewer_id)

    def get_recommendations(self, video_id: Any, *, limit: int = 10, viewer_id: Optional[int] = None) -> Page:
        vid = parse_id(video_id, "video id")
        source = self.videos.get(vid)
        if not source:
            raise NotFound("Video not found")
        tags = self.videos.tags_for([vid]).get(vid, [])
        rows, total = self.videos.recommendations(source, tags, limit=limit)
        return make_page(self.presenter.cards(rows, viewer_id=viewer_id), page=1, limit=limit, total=total)

    def get_shorts_feed(self, *, limit: int = 10, viewer_id: Optional[int] = None) -> Page:
        rows, total = self.videos.random_shorts(limit=limit)
        return make_page(self.presenter.cards(rows, viewer_id=viewer_id), page=1, limit=limit, total=total)

    # ---------- Profils ----------
    def get_channel_profile(self, username: str, *, viewer_id: Optional[int] = None) -> ChannelProfileOut:
        if not username or not username.strip():
            raise NotFound("Channel not found")
        channel = self.users.get_by_username(username)
        if not channel:
            raise NotFound("Channel not found")

        is_subscribed = False
        if viewer_id is not None:
            is_subscribed = self.subscriptions.get_for(subscriber_id=viewer_id, channel_id=channel.id) is not None

        return ChannelProfileOut(
            **OwnerProfileOut.model_validate(channel).model_dump(),
            subscriber_count=self.subscriptions.count_subscribers(channel.id),
            channels_subscribed_to_count=self.subscriptions.count_subscribed_to(channel.id),
            is_subscribed=is_subscribed,
        )

    def get_user_profile(self, user_id: Any, *, viewer_id: Optional[int] = None) -> UserProfileOut:
        uid = parse_id(user_id, "user id")
        user = self.users.get(uid)
        if not user:
            raise NotFound("User not found")

        videos = self.videos.list_by_owner(uid)
        return UserProfileOut(
            user=OwnerProfileOut.model_validate(user),
            videos=self.presenter.cards(videos, viewer_id=viewer_id),
            stats=ProfileStatsOut(**self.videos.owner_totals(uid)),
        )
