"""
➡️ But : Appliquer la réaction d'un utilisateur à une vidéo (like / dislike / retrait).

Transitions (réaction existante → demandée) :

aucune → like|dislike : insertion + incrément du compteur

X → X : rien

X → Y : mise à jour conditionnelle de la ligne (type encore X), décrément de X, incrément de Y

X → None : suppression conditionnelle + décrément (jamais sous 0)

Une écriture conditionnelle qui ne touche aucune ligne (StaleReaction) ou une
insertion en collision annule la transaction ; la transition est rejouée une fois.

La ligne Reaction et les compteurs de Video sont commités ensemble.
Les compteurs sont des UPDATE SQL relatifs (likes = likes + 1), jamais lus puis réécrits.
"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy.exc import IntegrityError

from app.core.errors import Conflict, NotFound, parse_id
from app.db.models.reactions import ReactionType
from app.db.repositories.reactions import ReactionRepository
from app.db.repositories.videos import VideoRepository
from app.features.videos.presenter import VideoPresenter
from app.features.videos.schemas import VideoOut

logger = logging.getLogger(__name__)

_COUNTER = {ReactionType.LIKE: "likes", ReactionType.DISLIKE: "dislikes"}

# une lecture puis au plus un rejeu
MAX_ATTEMPTS = 2


class StaleReaction(Exception):
    """La ligne Reaction lue a changé avant l'écriture conditionnelle."""


def _delta(type_: ReactionType, step: int) -> Dict[str, int]:
    return {_COUNTER[type_]: step}


class ReactionService:
    def __init__(
        self,
        *,
        video_repo: VideoRepository,
        reaction_repo: ReactionRepository,
        presenter: VideoPresenter,
    ):
        self.videos = video_repo
        self.reactions = reaction_repo
        self.presenter = presenter
        self.session = reaction_repo.session

    def react(self, video_id: Any, *, user_id: int, desired: Optional[ReactionType]) -> VideoOut:
        vid = parse_id(video_id, "video id")
        video = self.videos.get(vid)
        if not video:
            raise NotFound("Video not found")

        for attempt in range(1, MAX_ATTEMPTS + 1):
            try:
                self._apply(vid, user_id, desired)
                break
            except (IntegrityError, StaleReaction):
                # requête concurrente du même utilisateur : on rejoue sur l'état commité
                self.session.rollback()
                logger.info("Reaction race on video %s for user %s (attempt %s)", vid, user_id, attempt)
        else:
            raise Conflict("Reaction was modified concurrently")

        self.session.refresh(video)
        return self.presenter.card(video, viewer_id=user_id)

    def _apply(self, video_id: int, user_id: int, desired: Optional[ReactionType]) -> None:
        existing = self.reactions.get_for(user_id=user_id, video_id=video_id)

        if existing is None:
            if desired is None:
                return
            self.reactions.create(commit=False, user_id=user_id, video_id=video_id, type=desired)
            self.videos.adjust_reaction_counters(video_id, commit=False, **_delta(desired, 1))

        elif existing.type == desired:
            return

        elif desired is None:
            previous = existing.type
            if not self.reactions.delete_if(existing.id, expected=previous):
                raise StaleReaction()
            self.videos.adjust_reaction_counters(video_id, commit=False, **_delta(previous, -1))

        else:
            previous = existing.type
            if not self.reactions.change_type(existing.id, expected=previous, new=desired):
                raise StaleReaction()
            self.videos.adjust_reaction_counters(
                video_id, commit=False, **_delta(previous, -1), **_delta(desired, 1)
            )

        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
