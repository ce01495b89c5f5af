from typing import List, Optional

from fastapi import APIRouter, Cookie, Depends, File, Form, Response, UploadFile, status
from starlette.concurrency import run_in_threadpool

from app.api.v1.dependencies import (
    get_auth_service,
    get_active_user,
    get_current_user,
    get_feed_service,
    get_optional_viewer,
    get_user_service,
    read_upload,
)
from app.core.config import settings
from app.core.responses import ApiResponse, ok
from app.db.models.users import User
from app.features.authentication.schemas import (
    ChangePasswordIn,
    RefreshIn,
    SignInIn,
    SignInOut,
    SignUpIn,
    TokenPairOut,
)
from app.features.authentication.services import AuthService
from app.features.feeds.schemas import ChannelProfileOut, UserProfileOut
from app.features.feeds.services import FeedService
from app.features.users.schemas import UpdateAccountIn, UserOut
from app.features.users.services import UserService
from app.features.videos.schemas import VideoOut
from app.security.cookies import clear_auth_cookies, set_auth_cookies

router = APIRouter(
    prefix="/users",
    tags=["users"],
    responses={404: {"description": "Not Found"}},
)

# -----------------------------
# Register
# -----------------------------
@router.post(
    "/register",
    summary="Créer un compte",
    description="Formulaire multipart ; `avatar` et `coverImage` sont facultatifs.",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse[UserOut],
)
async def register(
    full_name: str = Form("", alias="fullName"),
    email: str = Form(""),
    username: str = Form(""),
    password: str = Form(""),
    avatar: Optional[UploadFile] = File(None),
    cover_image: Optional[UploadFile] = File(None, alias="coverImage"),
    svc: AuthService = Depends(get_auth_service),
):
    payload = SignUpIn(full_name=full_name, email=email, username=username, password=password)
    user = await run_in_threadpool(
        svc.sign_up,
        payload,
        avatar=await read_upload(avatar),
        cover_image=await read_upload(cover_image),
    )
    return ok(UserOut.model_validate(user), "User registered successfully", status.HTTP_201_CREATED)

# -----------------------------
# Login / Logout / Refresh
# -----------------------------
@router.post(
    "/login",
    summary="Se connecter",
    description="Pose les cookies `accessToken` et `refreshToken` (httpOnly) et retourne aussi les tokens.",
    response_model=ApiResponse[SignInOut],
)
def login(payload: SignInIn, response: Response, svc: AuthService = Depends(get_auth_service)):
    user, pair = svc.sign_in(payload)
    set_auth_cookies(response, pair)
    return ok(SignInOut(user=UserOut.model_validate(user), **pair), "User logged in successfully")


@router.post(
    "/logout",
    summary="Se déconnecter (révocation du refresh)",
    response_model=ApiResponse,
)
def logout(
    response: Response,
    user: User = Depends(get_current_user),
    svc: AuthService = Depends(get_auth_service),
):
    svc.log_out(user.id)
    clear_auth_cookies(response)
    return ok(None, "User logged out")


@router.post(
    "/refresh-token",
    summary="Renouveler les tokens (rotation)",
    description="Lit le refresh dans le cookie httpOnly **ou** dans le body.",
    response_model=ApiResponse[TokenPairOut],
)
def refresh_token(
    response: Response,
    payload: Optional[RefreshIn] = None,
    refresh_cookie: Optional[str] = Cookie(default=None, alias=settings.AUTH_REFRESH_COOKIE_NAME),
    svc: AuthService = Depends(get_auth_service),
):
    _, pair = svc.refresh(refresh_cookie or (payload.refresh_token if payload else None))
    set_auth_cookies(response, pair)
    return ok(TokenPairOut(**pair), "Access token refreshed")

# -----------------------------
# Compte courant
# -----------------------------
@router.post(
    "/change-password",
    summary="Changer le mot de passe",
    response_model=ApiResponse,
    responses={400: {"description": "Ancien mot de passe invalide"}},
)
def change_password(
    payload: ChangePasswordIn,
    user: User = Depends(get_active_user),
    svc: AuthService = Depends(get_auth_service),
):
    svc.change_password(user_id=user.id, payload=payload)
    return ok(None, "Password changed successfully")


@router.get("/current-user", summary="Utilisateur courant", response_model=ApiResponse[UserOut])
def current_user(user: User = Depends(get_current_user)):
    return ok(UserOut.model_validate(user), "Current user fetched successfully")


@router.patch("/update-account", summary="Modifier nom / email", response_model=ApiResponse[UserOut])
def update_account(
    payload: UpdateAccountIn,
    user: User = Depends(get_active_user),
    svc: UserService = Depends(get_user_service),
):
    return ok(svc.update_account(user.id, payload), "Account details updated successfully")


@router.patch("/avatar", summary="Changer l'avatar", response_model=ApiResponse[UserOut])
async def update_avatar(
    avatar: UploadFile = File(...),
    user: User = Depends(get_active_user),
    svc: UserService = Depends(get_user_service),
):
    data = await read_upload(avatar)
    return ok(await run_in_threadpool(svc.update_avatar, user.id, data), "Avatar updated successfully")


@router.patch("/cover-image", summary="Changer l'image de couverture", response_model=ApiResponse[UserOut])
async def update_cover_image(
    cover_image: UploadFile = File(..., alias="coverImage"),
    user: User = Depends(get_active_user),
    svc: UserService = Depends(get_user_service),
):
    data = await read_upload(cover_image)
    return ok(await run_in_threadpool(svc.update_cover_image, user.id, data), "Cover image updated successfully")

# -----------------------------
# Profils publics / historique
# -----------------------------
@router.get("/c/{username}", summary="Profil de chaîne", response_model=ApiResponse[ChannelProfileOut])
def channel_profile(
    username: str,
    viewer: Optional[User] = Depends(get_optional_viewer),
    feeds: FeedService = Depends(get_feed_service),
):
    return ok(feeds.get_channel_profile(username, viewer_id=viewer.id if viewer else None), "Channel fetched successfully")


@router.get("/history", summary="Historique de visionnage", response_model=ApiResponse[List[VideoOut]])
def watch_history(
    user: User = Depends(get_current_user),
    svc: UserService = Depends(get_user_service),
):
    return ok(svc.watch_history(user.id), "Watch history fetched successfully")


@router.get("/{user_id}/profile", summary="Profil utilisateur + vidéos + totaux", response_model=ApiResponse[UserProfileOut])
def user_profile(
    user_id: str,
    viewer: Optional[User] = Depends(get_optional_viewer),
    feeds: FeedService = Depends(get_feed_service),
):
    return ok(feeds.get_user_profile(user_id, viewer_id=viewer.id if viewer else None), "User profile fetched successfully")
