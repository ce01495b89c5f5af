"""
➡️ But : Traduire les paramètres de catalogue en conditions SQL (fonction pure).

VideoFilterSpec → liste de conditions SQLAlchemy, sans accès à la session.
L'heure courante est injectée (`now`) pour rendre les fenêtres de date testables.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, List, Optional, Tuple

from sqlmodel import or_, select

from app.core.config import settings
from app.db.models.videos import Category, Video, VideoTag


class UploadDate(str, Enum):
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"


class SortOption(str, Enum):
    NEWEST = "newest"
    OLDEST = "oldest"
    VIEWS = "views"
    LIKES = "likes"


# id en tie-break pour un ordre stable entre pages
SORT_OPTIONS = {
    SortOption.NEWEST: (Video.created_at.desc(), Video.id.desc()),
    SortOption.OLDEST: (Video.created_at.asc(), Video.id.asc()),
    SortOption.VIEWS: (Video.views.desc(), Video.id.desc()),
    SortOption.LIKES: (Video.likes.desc(), Video.id.desc()),
}


@dataclass
class VideoFilterSpec:
    search: Optional[str] = None
    owner_id: Optional[int] = None
    category: Optional[Category] = None
    min_duration: Optional[float] = None
    max_duration: Optional[float] = None
    min_views: Optional[int] = None
    max_views: Optional[int] = None
    upload_date: Optional[UploadDate] = None
    is_short: Optional[bool] = None
    tags: List[str] = field(default_factory=list)


def parse_tags(raw: Optional[str]) -> List[str]:
    """"a, b,,c" -> ["a", "b", "c"] (ordre conservé, doublons retirés)."""
    if not raw:
        return []
    return list(dict.fromkeys(t.strip() for t in raw.split(",") if t.strip()))


def upload_date_cutoff(upload_date: UploadDate, now: datetime) -> datetime:
    """
    Borne basse en UTC naïf (format des colonnes created_at).
    `now` doit être aware ; "today" = minuit de l'heure locale de `now`.
    """
    if upload_date == UploadDate.TODAY:
        since = now.replace(hour=0, minute=0, second=0, microsecond=0)
    elif upload_date == UploadDate.WEEK:
        since = now - timedelta(days=7)
    else:
        since = now - timedelta(days=30)
    return since.astimezone(timezone.utc).replace(tzinfo=None)


def build_video_conditions(spec: VideoFilterSpec, now: Optional[datetime] = None) -> List[Any]:
    conditions: List[Any] = []

    search = (spec.search or "").strip()
    if search:
        # sous-chaîne littérale : % et _ saisis par l'utilisateur sont échappés
        conditions.append(
            or_(
                Video.title.icontains(search, autoescape=True),
                Video.description.icontains(search, autoescape=True),
                Video.id.in_(select(VideoTag.video_id).where(VideoTag.tag.icontains(search, autoescape=True))),
            )
        )
    if spec.owner_id is not None:
        conditions.append(Video.owner_id == spec.owner_id)
    if spec.category is not None:
        conditions.append(Video.category == spec.category)
    if spec.min_duration is not None:
        conditions.append(Video.duration >= spec.min_duration)
    if spec.max_duration is not None:
        conditions.append(Video.duration <= spec.max_duration)
    if spec.min_views is not None:
        conditions.append(Video.views >= spec.min_views)
    if spec.max_views is not None:
        conditions.append(Video.views <= spec.max_views)
    if spec.upload_date is not None:
        now = now or datetime.now().astimezone()
        conditions.append(Video.created_at >= upload_date_cutoff(spec.upload_date, now))
    if spec.is_short is not None:
        conditions.append(Video.is_short.is_(spec.is_short))
    if spec.tags:
        conditions.append(Video.id.in_(select(VideoTag.video_id).where(VideoTag.tag.in_(spec.tags))))

    return conditions


def _positive_int(value: Any, default: int) -> int:
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return default
    return max(1, parsed)


def coerce_pagination(
    page: Any,
    limit: Any,
    *,
    default_limit: Optional[int] = None,
    max_limit: Optional[int] = None,
) -> Tuple[int, int]:
    """page/limit ≥ 1 (non numérique → défaut), limit plafonné."""
    default_limit = default_limit or settings.DEFAULT_PAGE_SIZE
    max_limit = max_limit or settings.MAX_PAGE_SIZE
    return _positive_int(page, 1), min(_positive_int(limit, default_limit), max_limit)
