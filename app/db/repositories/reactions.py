from typing import Dict, Iterable, Optional

from sqlalchemy import delete, update
from sqlmodel import select, func

from app.db.repositories.base import BaseRepository
from app.db.models.base import utcnow
from app.db.models.reactions import Reaction, ReactionType


class ReactionRepository(BaseRepository[Reaction]):
    model = Reaction

    def get_for(self, *, user_id: int, video_id: int) -> Optional[Reaction]:
        stmt = select(Reaction).where(
            Reaction.user_id == user_id,
            Reaction.video_id == video_id,
        )
        return self.session.exec(stmt).first()

    # Écritures conditionnelles : ne touchent la ligne que si elle a encore le type lu.
    # False = une autre requête l'a modifiée entre-temps.

    def change_type(self, reaction_id: int, *, expected: ReactionType, new: ReactionType) -> bool:
        result = self.session.exec(
            update(Reaction)
            .where(Reaction.id == reaction_id, Reaction.type == expected)
            .values(type=new, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def delete_if(self, reaction_id: int, *, expected: ReactionType) -> bool:
        result = self.session.exec(
            delete(Reaction)
            .where(Reaction.id == reaction_id, Reaction.type == expected)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def types_for_viewer(self, viewer_id: Optional[int], video_ids: Iterable[int]) -> Dict[int, ReactionType]:
        """video_id -> réaction du viewer (absent si aucune)."""
        ids = set(video_ids)
        if viewer_id is None or not ids:
            return {}
        rows = self.session.exec(
            select(Reaction.video_id, Reaction.type).where(
                Reaction.user_id == viewer_id,
                Reaction.video_id.in_(ids),
            )
        ).all()
        return {video_id: type_ for video_id, type_ in rows}

    def count_by_type(self, video_id: int) -> Dict[ReactionType, int]:
        rows = self.session.exec(
            select(Reaction.type, func.count(Reaction.id))
            .where(Reaction.video_id == video_id)
            .group_by(Reaction.type)
        ).all()
        counts = {t: 0 for t in ReactionType}
        for type_, count in rows:
            counts[type_] = int(count)
        return counts
