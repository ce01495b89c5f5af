from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from starlette.concurrency import run_in_threadpool

from app.api.v1.dependencies import (
    PageParams,
    get_active_user,
    get_feed_service,
    get_optional_viewer,
    get_reaction_service,
    get_video_service,
    pagination,
    read_upload,
)
from app.core.errors import parse_id
from app.core.responses import ApiResponse, Page, ok
from app.db.models.users import User
from app.db.models.videos import Category
from app.features.feeds.filters import SortOption, UploadDate, VideoFilterSpec, parse_tags
from app.features.feeds.services import FeedService
from app.features.reactions.services import ReactionService
from app.features.videos.schemas import (
    PublishStatusOut,
    PublishVideoIn,
    ReactIn,
    UpdateVideoIn,
    VideoDetailOut,
    VideoOut,
)
from app.features.videos.services import VideoService

router = APIRouter(
    prefix="/videos",
    tags=["videos"],
    responses={404: {"description": "Not Found"}},
)


def _viewer_id(viewer: Optional[User]) -> Optional[int]:
    return viewer.id if viewer else None

# -----------------------------
# Lectures publiques
# -----------------------------
@router.get(
    "",
    summary="Lister / rechercher les vidéos",
    description="Filtres combinables ; `tags` séparés par des virgules ; `sort` = newest | oldest | views | likes.",
    response_model=ApiResponse[Page[VideoOut]],
)
def list_videos(
    search: Optional[str] = Query(None),
    user_id: Optional[str] = Query(None, alias="userId"),
    category: Optional[Category] = Query(None),
    min_duration: Optional[float] = Query(None, alias="minDuration", ge=0),
    max_duration: Optional[float] = Query(None, alias="maxDuration", ge=0),
    min_views: Optional[int] = Query(None, alias="minViews", ge=0),
    max_views: Optional[int] = Query(None, alias="maxViews", ge=0),
    upload_date: Optional[UploadDate] = Query(None, alias="uploadDate"),
    is_short: Optional[bool] = Query(None, alias="isShort"),
    tags: Optional[str] = Query(None),
    sort: SortOption = Query(SortOption.NEWEST),
    pages: PageParams = Depends(pagination),
    viewer: Optional[User] = Depends(get_optional_viewer),
    feeds: FeedService = Depends(get_feed_service),
):
    spec = VideoFilterSpec(
        search=search,
        owner_id=parse_id(user_id, "userId") if user_id else None,
        category=category,
        min_duration=min_duration,
        max_duration=max_duration,
        min_views=min_views,
        max_views=max_views,
        upload_date=upload_date,
        is_short=is_short,
        tags=parse_tags(tags),
    )
    page = feeds.list_videos(
        spec,
        sort=sort,
        page=pages.page,
        limit=pages.limit,
        viewer_id=_viewer_id(viewer),
    )
    return ok(page, "Videos fetched successfully")


@router.get("/shorts/feed", summary="Fil de shorts aléatoire", response_model=ApiResponse[Page[VideoOut]])
def shorts_feed(
    pages: PageParams = Depends(pagination),
    viewer: Optional[User] = Depends(get_optional_viewer),
    feeds: FeedService = Depends(get_feed_service),
):
    return ok(feeds.get_shorts_feed(limit=pages.limit, viewer_id=_viewer_id(viewer)), "Shorts fetched successfully")


@router.get(
    "/recommendations/{video_id}",
    summary="Vidéos similaires (catégorie, tags, auteur)",
    response_model=ApiResponse[Page[VideoOut]],
)
def recommendations(
    video_id: str,
    pages: PageParams = Depends(pagination),
    viewer: Optional[User] = Depends(get_optional_viewer),
    feeds: FeedService = Depends(get_feed_service),
):
    page = feeds.get_recommendations(video_id, limit=pages.limit, viewer_id=_viewer_id(viewer))
    return ok(page, "Recommendations fetched successfully")


@router.get(
    "/{video_id}",
    summary="Détail d'une vidéo",
    description="Chaque appel incrémente `views` de 1.",
    response_model=ApiResponse[VideoDetailOut],
)
def get_video(
    video_id: str,
    viewer: Optional[User] = Depends(get_optional_viewer),
    feeds: FeedService = Depends(get_feed_service),
):
    return ok(feeds.get_video_detail(video_id, viewer_id=_viewer_id(viewer)), "Video fetched successfully")

# -----------------------------
# Écritures (authentifiées)
# -----------------------------
@router.post(
    "",
    summary="Publier une vidéo",
    description="Formulaire multipart : `videoFile` obligatoire, `thumbnail` facultatif, `tags` séparés par des virgules.",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse[VideoOut],
)
async def publish_video(
    title: str = Form(""),
    description: str = Form(""),
    duration: Optional[str] = Form(None),
    category: Optional[Category] = Form(None),
    tags: str = Form(""),
    video_file: Optional[UploadFile] = File(None, alias="videoFile"),
    thumbnail: Optional[UploadFile] = File(None),
    user: User = Depends(get_active_user),
    svc: VideoService = Depends(get_video_service),
):
    payload = PublishVideoIn(
        title=title,
        description=description,
        duration=duration,
        category=category,
        tags=parse_tags(tags),
    )
    video = await run_in_threadpool(
        svc.publish,
        payload,
        owner=user,
        video_file=await read_upload(video_file),
        thumbnail=await read_upload(thumbnail),
    )
    return ok(video, "Video published successfully", status.HTTP_201_CREATED)


@router.patch("/toggle/publish/{video_id}", summary="(Dé)publier une vidéo", response_model=ApiResponse[PublishStatusOut])
def toggle_publish(
    video_id: str,
    user: User = Depends(get_active_user),
    svc: VideoService = Depends(get_video_service),
):
    return ok(svc.toggle_publish(video_id, actor=user), "Publish status toggled")


@router.patch("/{video_id}", summary="Modifier une vidéo", response_model=ApiResponse[VideoOut])
async def update_video(
    video_id: str,
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    category: Optional[Category] = Form(None),
    tags: Optional[str] = Form(None),
    thumbnail: Optional[UploadFile] = File(None),
    user: User = Depends(get_active_user),
    svc: VideoService = Depends(get_video_service),
):
    payload = UpdateVideoIn(
        title=title,
        description=description,
        category=category,
        tags=parse_tags(tags) if tags is not None else None,
    )
    video = await run_in_threadpool(
        svc.update,
        video_id,
        payload,
        actor=user,
        thumbnail=await read_upload(thumbnail),
    )
    return ok(video, "Video updated successfully")


@router.delete("/{video_id}", summary="Supprimer une vidéo", response_model=ApiResponse)
def delete_video(
    video_id: str,
    user: User = Depends(get_active_user),
    svc: VideoService = Depends(get_video_service),
):
    svc.delete(video_id, actor=user)
    return ok(None, "Video deleted successfully")


@router.post(
    "/{video_id}/react",
    summary="Réagir à une vidéo",
    description="`type` = like | dislike | null (null retire la réaction).",
    response_model=ApiResponse[VideoOut],
)
def react(
    video_id: str,
    payload: ReactIn,
    user: User = Depends(get_active_user),
    svc: ReactionService = Depends(get_reaction_service),
):
    return ok(svc.react(video_id, user_id=user.id, desired=payload.type), "Reaction updated")
