from typing import Optional

from sqlmodel import select, func

from app.db.repositories.base import BaseRepository
from app.db.models.subscriptions import Subscription


class SubscriptionRepository(BaseRepository[Subscription]):
    model = Subscription

    def get_for(self, *, subscriber_id: int, channel_id: int) -> Optional[Subscription]:
        stmt = select(Subscription).where(
            Subscription.subscriber_id == subscriber_id,
            Subscription.channel_id == channel_id,
        )
        return self.session.exec(stmt).first()

    def count_subscribers(self, channel_id: int) -> int:
        stmt = select(func.count(Subscription.id)).where(Subscription.channel_id == channel_id)
        return int(self.session.exec(stmt).one())

    def count_subscribed_to(self, subscriber_id: int) -> int:
        stmt = select(func.count(Subscription.id)).where(Subscription.subscriber_id == subscriber_id)
        return int(self.session.exec(stmt).one())
