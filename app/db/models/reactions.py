from enum import Enum
from sqlmodel import Field
from sqlalchemy import UniqueConstraint

from app.db.models.base import BaseModelDB


class ReactionType(str, Enum):
    LIKE = "like"
    DISLIKE = "dislike"


class Reaction(BaseModelDB, table=True):
    """Au plus une réaction par (user, vidéo)."""
    __table_args__ = (
        UniqueConstraint("user_id", "video_id", name="uq_reaction_user_video"),
    )

    user_id: int = Field(foreign_key="user.id", index=True, nullable=False)
    video_id: int = Field(foreign_key="video.id", index=True, nullable=False)
    type: ReactionType = Field(nullable=False)
