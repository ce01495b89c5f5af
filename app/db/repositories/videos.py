from collections import defaultdict
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import case, delete, update
from sqlmodel import select, func, or_

from app.db.repositories.base import BaseRepository
from app.db.models.base import utcnow
from app.db.models.videos import Video, VideoTag
from app.db.models.reactions import Reaction
from app.db.models.watch_history import WatchHistory


def _floored(column, delta: int):
    """column + delta, jamais négatif (calculé côté SQL)."""
    if delta >= 0:
        return column + delta
    return case((column + delta < 0, 0), else_=column + delta)


class VideoRepository(BaseRepository[Video]):
    """CRUD Vidéos + requêtes du catalogue (filtres, compteurs atomiques, tags)."""
    model = Video

    # ---------- LISTES / RECHERCHE ----------

    def search(
        self,
        conditions: Sequence,
        *,
        order_by: Sequence,
        offset: int = 0,
        limit: int = 10,
    ) -> Sequence[Video]:
        stmt = (
            select(self.model)
            .where(*conditions)
            .order_by(*order_by)
            .offset(offset)
            .limit(limit)
        )
        return self.session.exec(stmt).all()

    def count_where(self, conditions: Sequence) -> int:
        return int(self.session.exec(select(func.count(self.model.id)).where(*conditions)).one())

    def list_by_owner(self, owner_id: int) -> Sequence[Video]:
        stmt = (
            select(self.model)
            .where(self.model.owner_id == owner_id)
            .order_by(self.model.created_at.desc(), self.model.id.desc())
        )
        return self.session.exec(stmt).all()

    def _recommendation_conditions(self, source: Video, tags: List[str]) -> list:
        matches = [
            self.model.category == source.category,
            self.model.owner_id == source.owner_id,
        ]
        if tags:
            matches.append(
                self.model.id.in_(select(VideoTag.video_id).where(VideoTag.tag.in_(tags)))
            )
        return [self.model.id != source.id, or_(*matches)]

    def recommendations(self, source: Video, tags: List[str], *, limit: int) -> Tuple[Sequence[Video], int]:
        """Même catégorie OU tag commun OU même propriétaire ; vues puis likes décroissants."""
        conditions = self._recommendation_conditions(source, tags)
        stmt = (
            select(self.model)
            .where(*conditions)
            .order_by(self.model.views.desc(), self.model.likes.desc(), self.model.id.desc())
            .limit(limit)
        )
        return self.session.exec(stmt).all(), self.count_where(conditions)

    def random_shorts(self, *, limit: int) -> Tuple[Sequence[Video], int]:
        """Échantillon aléatoire de shorts publiés (pas d'ordre stable)."""
        conditions = [self.model.is_short.is_(True), self.model.is_published.is_(True)]
        stmt = select(self.model).where(*conditions).order_by(func.random()).limit(limit)
        return self.session.exec(stmt).all(), self.count_where(conditions)

    # ---------- COMPTEURS ATOMIQUES ----------

    def increment_views(self, video_id: int) -> bool:
        """views = views + 1 en SQL. False si la vidéo n'existe pas."""
        result = self.session.exec(
            update(Video)
            .where(Video.id == video_id)
            .values(views=Video.views + 1)
            .execution_options(synchronize_session=False)
        )
        self.session.commit()
        return result.rowcount == 1

    def adjust_reaction_counters(
        self, video_id: int, *, likes: int = 0, dislikes: int = 0, commit: bool = True
    ) -> None:
        """Ajuste likes/dislikes par incrément SQL (plancher à 0), jamais en lecture-écriture."""
        values = {}
        if likes:
            values["likes"] = _floored(Video.likes, likes)
        if dislikes:
            values["dislikes"] = _floored(Video.dislikes, dislikes)
        if not values:
            return
        self.session.exec(
            update(Video)
            .where(Video.id == video_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if commit:
            self.session.commit()
        else:
            self.session.flush()

    # ---------- TAGS ----------

    def tags_for(self, video_ids: Iterable[int]) -> Dict[int, List[str]]:
        ids = set(video_ids)
        if not ids:
            return {}
        rows = self.session.exec(
            select(VideoTag.video_id, VideoTag.tag)
            .where(VideoTag.video_id.in_(ids))
            .order_by(VideoTag.id)
        ).all()
        tags: Dict[int, List[str]] = defaultdict(list)
        for video_id, tag in rows:
            tags[video_id].append(tag)
        return dict(tags)

    def replace_tags(self, video_id: int, tags: Iterable[str], *, commit: bool = True) -> None:
        self.session.exec(delete(VideoTag).where(VideoTag.video_id == video_id))
        for tag in dict.fromkeys(tags):
            self.session.add(VideoTag(video_id=video_id, tag=tag))
        if commit:
            self.session.commit()
        else:
            self.session.flush()

    # ---------- SUPPRESSION ----------

    def delete_cascade(self, video: Video) -> None:
        """Supprime la vidéo avec ses tags, réactions et progressions."""
        for model in (VideoTag, Reaction, WatchHistory):
            self.session.exec(delete(model).where(model.video_id == video.id))
        self.delete(video)

    # ---------- AGRÉGATS ----------

    def owner_totals(self, owner_id: int) -> dict:
        count, views, likes = self.session.exec(
            select(
                func.count(self.model.id),
                func.coalesce(func.sum(self.model.views), 0),
                func.coalesce(func.sum(self.model.likes), 0),
            ).where(self.model.owner_id == owner_id)
        ).one()
        return {"total_videos": int(count), "total_views": int(views), "total_likes": int(likes)}

    def stats(self) -> dict:
        count, views, likes, shorts = self.session.exec(
            select(
                func.count(self.model.id),
                func.coalesce(func.sum(self.model.views), 0),
                func.coalesce(func.sum(self.model.likes), 0),
                func.coalesce(func.sum(case((self.model.is_short.is_(True), 1), else_=0)), 0),
            )
        ).one()
        return {
            "total_videos": int(count),
            "total_views": int(views),
            "total_likes": int(likes),
            "shorts": int(shorts),
        }

    def engagement_since(self, since: datetime) -> dict:
        count, views = self.session.exec(
            select(
                func.count(self.model.id),
                func.coalesce(func.sum(self.model.views), 0),
            ).where(self.model.created_at >= since)
        ).one()
        return {"videos_last_7_days": int(count), "views_last_7_days": int(views)}

    def touch(self, video: Video, **changes) -> Video:
        return self.update(video, updated_at=utcnow(), **changes)
