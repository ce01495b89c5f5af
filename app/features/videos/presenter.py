from typing import Dict, List, Optional, Sequence, Type

from app.db.models.users import User
from app.db.models.videos import Video
from app.db.repositories.reactions import ReactionRepository
from app.db.repositories.users import UserRepository
from app.db.repositories.videos import VideoRepository
from app.features.users.schemas import OwnerCardOut, OwnerProfileOut
from app.features.videos.schemas import VideoDetailOut, VideoOut


class VideoPresenter:
    """
    Compose les vues vidéo côté application :
    vidéos → propriétaires (par id) → réactions du viewer (par id) → tags (par id).
    Quatre requêtes au plus, quel que soit le nombre de vidéos.
    """

    def __init__(
        self,
        *,
        video_repo: VideoRepository,
        user_repo: UserRepository,
        reaction_repo: ReactionRepository,
    ):
        self.videos = video_repo
        self.users = user_repo
        self.reactions = reaction_repo

    def cards(self, videos: Sequence[Video], *, viewer_id: Optional[int] = None) -> List[VideoOut]:
        ids = [v.id for v in videos]
        owners: Dict[int, User] = self.users.get_many(v.owner_id for v in videos)
        reactions = self.reactions.types_for_viewer(viewer_id, ids)
        tags = self.videos.tags_for(ids)
        return [
            self._build(
                VideoOut,
                video,
                owner=OwnerCardOut.model_validate(owners[video.owner_id]) if video.owner_id in owners else None,
                tags=tags.get(video.id, []),
                user_reaction=reactions.get(video.id),
            )
            for video in videos
        ]

    def detail(self, video: Video, *, viewer_id: Optional[int] = None) -> VideoDetailOut:
        owner = self.users.get(video.owner_id)
        reaction = self.reactions.types_for_viewer(viewer_id, [video.id]).get(video.id)
        return self._build(
            VideoDetailOut,
            video,
            owner=OwnerProfileOut.model_validate(owner) if owner else None,
            tags=self.videos.tags_for([video.id]).get(video.id, []),
            user_reaction=reaction,
        )

    def card(self, video: Video, *, viewer_id: Optional[int] = None) -> VideoOut:
        return self.cards([video], viewer_id=viewer_id)[0]

    @staticmethod
    def _build(schema: Type[VideoOut], video: Video, **extra) -> VideoOut:
        data = video.model_dump()
        data.update(extra)
        return schema.model_validate(data)
