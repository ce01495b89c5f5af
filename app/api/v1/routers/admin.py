from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.api.v1.dependencies import (
    PageParams,
    admin_pagination,
    get_admin_service,
    get_admin_user,
)
from app.core.responses import ApiResponse, Page, ok
from app.db.models.users import Role, User
from app.features.admin.schemas import AnalyticsOut, BanOut
from app.features.admin.services import AdminService
from app.features.users.schemas import UserOut

# Toutes les routes exigent un admin non banni
router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    responses={403: {"description": "Forbidden"}, 404: {"description": "Not Found"}},
)


@router.delete("/videos/{video_id}", summary="Supprimer n'importe quelle vidéo", response_model=ApiResponse)
def delete_any_video(
    video_id: str,
    admin: User = Depends(get_admin_user),
    svc: AdminService = Depends(get_admin_service),
):
    svc.delete_video(video_id, admin=admin)
    return ok(None, "Video deleted successfully")


@router.patch("/users/{user_id}/ban", summary="Bannir / débannir un utilisateur", response_model=ApiResponse[BanOut])
def toggle_ban(
    user_id: str,
    admin: User = Depends(get_admin_user),
    svc: AdminService = Depends(get_admin_service),
):
    result = svc.toggle_ban(user_id, admin=admin)
    return ok(result, "User banned" if result.is_banned else "User unbanned")


@router.get("/analytics", summary="Statistiques globales", response_model=ApiResponse[AnalyticsOut])
def analytics(
    admin: User = Depends(get_admin_user),
    svc: AdminService = Depends(get_admin_service),
):
    return ok(svc.analytics(), "Analytics fetched successfully")


@router.get("/users", summary="Annuaire des utilisateurs", response_model=ApiResponse[Page[UserOut]])
def list_users(
    search: Optional[str] = Query(None),
    role: Optional[Role] = Query(None),
    banned: Optional[bool] = Query(None),
    pages: PageParams = Depends(admin_pagination),
    admin: User = Depends(get_admin_user),
    svc: AdminService = Depends(get_admin_service),
):
    page = svc.list_users(search=search, role=role, banned=banned, page=pages.page, limit=pages.limit)
    return ok(page, "Users fetched successfully")
