from datetime import datetime
from typing import List, Optional

from app.core.responses import ApiSchema
from app.db.models.reactions import ReactionType
from app.db.models.videos import Category
from app.features.users.schemas import OwnerCardOut, OwnerProfileOut


class VideoOut(ApiSchema):
    id: int
    title: str
    description: str = ""
    video_file: str
    thumbnail: str = ""
    duration: float
    views: int
    likes: int
    dislikes: int
    is_published: bool
    is_short: bool
    category: Category
    tags: List[str] = []
    owner: Optional[OwnerCardOut] = None
    user_reaction: Optional[ReactionType] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class VideoDetailOut(VideoOut):
    owner: Optional[OwnerProfileOut] = None


class ReactIn(ApiSchema):
    type: Optional[ReactionType] = None


class PublishVideoIn(ApiSchema):
    # champs texte du formulaire multipart, validés par le service
    title: str = ""
    description: str = ""
    duration: Optional[str] = None
    category: Optional[Category] = None
    tags: List[str] = []


class UpdateVideoIn(ApiSchema):
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[Category] = None
    tags: Optional[List[str]] = None


class PublishStatusOut(ApiSchema):
    id: int
    is_published: bool
