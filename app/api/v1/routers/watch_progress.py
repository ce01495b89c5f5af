from typing import List

from fastapi import APIRouter, Depends

from app.api.v1.dependencies import (
    PageParams,
    get_current_user,
    get_watch_progress_service,
    pagination,
)
from app.core.responses import ApiResponse, ok
from app.db.models.users import User
from app.features.watch_progress.schemas import ContinueWatchingOut, ProgressIn, ProgressOut
from app.features.watch_progress.services import WatchProgressService

router = APIRouter(
    prefix="/watch-progress",
    tags=["watch-progress"],
    responses={404: {"description": "Not Found"}},
)


@router.post("", summary="Enregistrer la progression", response_model=ApiResponse[ProgressOut])
def save_progress(
    payload: ProgressIn,
    user: User = Depends(get_current_user),
    svc: WatchProgressService = Depends(get_watch_progress_service),
):
    return ok(svc.save(payload, user_id=user.id), "Watch progress saved")


@router.get(
    "/continue-watching",
    summary="Reprendre la lecture",
    response_model=ApiResponse[List[ContinueWatchingOut]],
)
def continue_watching(
    pages: PageParams = Depends(pagination),
    user: User = Depends(get_current_user),
    svc: WatchProgressService = Depends(get_watch_progress_service),
):
    return ok(svc.continue_watching(user_id=user.id, limit=pages.limit), "Continue watching fetched successfully")


@router.get("/{video_id}", summary="Progression sur une vidéo", response_model=ApiResponse[ProgressOut])
def get_progress(
    video_id: str,
    user: User = Depends(get_current_user),
    svc: WatchProgressService = Depends(get_watch_progress_service),
):
    return ok(svc.get(video_id, user_id=user.id), "Watch progress fetched successfully")
