from sqlmodel import Field
from sqlalchemy import UniqueConstraint

from app.db.models.base import BaseModelDB


class Subscription(BaseModelDB, table=True):
    __table_args__ = (
        UniqueConstraint("subscriber_id", "channel_id", name="uq_subscription_subscriber_channel"),
    )

    subscriber_id: int = Field(foreign_key="user.id", index=True, nullable=False)
    channel_id: int = Field(foreign_key="user.id", index=True, nullable=False)
