from enum import Enum
from sqlmodel import Field
from sqlalchemy import Column, ForeignKey, Integer, UniqueConstraint

from .base import BaseModelDB


class Category(str, Enum):
    GAMING = "gaming"
    MUSIC = "music"
    EDUCATION = "education"
    ENTERTAINMENT = "entertainment"
    SPORTS = "sports"
    TECHNOLOGY = "technology"
    NEWS = "news"
    COMEDY = "comedy"
    LIFESTYLE = "lifestyle"
    OTHER = "other"


class Video(BaseModelDB, table=True):
    """Vidéos stockées dans le blob store, référencées en DB."""

    title: str = Field(index=True)
    description: str = Field(default="")
    video_file: str = Field(description="URL publique du média")
    thumbnail: str = Field(default="", description="URL de la miniature (vide si absente)")
    duration: float = Field(ge=0, description="Durée en secondes")

    views: int = Field(default=0, ge=0, index=True)
    likes: int = Field(default=0, ge=0, index=True)
    dislikes: int = Field(default=0, ge=0)

    is_published: bool = Field(default=True)
    is_short: bool = Field(default=False, index=True)
    category: Category = Field(default=Category.OTHER, index=True)

    owner_id: int = Field(
        sa_column=Column(
            Integer,
            ForeignKey("user.id"),
            nullable=False,
            index=True,
        ),
        description="Propriétaire de la vidéo",
    )


class VideoTag(BaseModelDB, table=True):
    __table_args__ = (
        UniqueConstraint("video_id", "tag", name="uq_video_tag_video_tag"),
    )

    video_id: int = Field(foreign_key="video.id", index=True, nullable=False)
    tag: str = Field(index=True, nullable=False)
