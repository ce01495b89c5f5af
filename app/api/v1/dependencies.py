"""
➡️ But : Centraliser les dépendances réutilisables des routes.

Exemples :

get_feed_service() : crée un FeedService à partir d’une session DB.

get_current_user() : résout la session (cookies / Bearer), renouvelle si besoin.

pagination() : paramètres communs page et limit.

🔹 Avantages :

Routes plus propres (pas de code dupliqué).

Facile à injecter dans plusieurs endpoints (Depends()).
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Query, Request, Response, Security, UploadFile
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from app.core.config import jwt_settings, settings
from app.core.errors import Forbidden, Unauthorized
from app.db.session import get_session

from app.db.models.users import User
from app.db.repositories.users import UserRepository
from app.db.repositories.videos import VideoRepository
from app.db.repositories.reactions import ReactionRepository
from app.db.repositories.subscriptions import SubscriptionRepository
from app.db.repositories.watch_history import WatchHistoryRepository

from app.features.authentication.services import AuthService
from app.features.authentication.session import SessionResolver
from app.features.feeds.filters import coerce_pagination
from app.features.feeds.services import FeedService
from app.features.reactions.services import ReactionService
from app.features.users.services import UserService
from app.features.videos.presenter import VideoPresenter
from app.features.videos.services import VideoService
from app.features.watch_progress.services import WatchProgressService
from app.features.admin.services import AdminService

from app.security.cookies import remember_renewal
from app.utils.s3 import BlobStore, S3BlobStore


# -----------------------------
# Pagination
# -----------------------------
@dataclass
class PageParams:
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def pagination(
    page: Optional[str] = Query(None, description="Numéro de page", examples=["1"]),
    limit: Optional[str] = Query(None, description="Taille de page", examples=["10"]),
) -> PageParams:
    # valeurs non numériques → défauts, jamais d'erreur
    p, l = coerce_pagination(page, limit)
    return PageParams(page=p, limit=l)


def admin_pagination(
    page: Optional[str] = Query(None, description="Numéro de page", examples=["1"]),
    limit: Optional[str] = Query(None, description="Taille de page", examples=["20"]),
) -> PageParams:
    p, l = coerce_pagination(page, limit, default_limit=20)
    return PageParams(page=p, limit=l)


# -----------------------------
# Infra
# -----------------------------
def get_blob_store() -> BlobStore:
    return S3BlobStore()


# -----------------------------
# Repositories
# -----------------------------
def get_user_repository(session: Session = Depends(get_session)) -> UserRepository:
    return UserRepository(session)

def get_video_repository(session: Session = Depends(get_session)) -> VideoRepository:
    return VideoRepository(session)

def get_reaction_repository(session: Session = Depends(get_session)) -> ReactionRepository:
    return ReactionRepository(session)

def get_subscription_repository(session: Session = Depends(get_session)) -> SubscriptionRepository:
    return SubscriptionRepository(session)

def get_watch_history_repository(session: Session = Depends(get_session)) -> WatchHistoryRepository:
    return WatchHistoryRepository(session)


# -----------------------------
# Services
# -----------------------------
def get_auth_service(
    user_repo: UserRepository = Depends(get_user_repository),
    blob_store: BlobStore = Depends(get_blob_store),
) -> AuthService:
    return AuthService(user_repo=user_repo, jwt_settings=jwt_settings, blob_store=blob_store)

def get_video_presenter(
    video_repo: VideoRepository = Depends(get_video_repository),
    user_repo: UserRepository = Depends(get_user_repository),
    reaction_repo: ReactionRepository = Depends(get_reaction_repository),
) -> VideoPresenter:
    return VideoPresenter(video_repo=video_repo, user_repo=user_repo, reaction_repo=reaction_repo)

def get_feed_service(
    video_repo: VideoRepository = Depends(get_video_repository),
    user_repo: UserRepository = Depends(get_user_repository),
    subscription_repo: SubscriptionRepository = Depends(get_subscription_repository),
    presenter: VideoPresenter = Depends(get_video_presenter),
) -> FeedService:
    return FeedService(
        video_repo=video_repo,
        user_repo=user_repo,
        subscription_repo=subscription_repo,
        presenter=presenter,
    )

def get_reaction_service(
    video_repo: VideoRepository = Depends(get_video_repository),
    reaction_repo: ReactionRepository = Depends(get_reaction_repository),
    presenter: VideoPresenter = Depends(get_video_presenter),
) -> ReactionService:
    return ReactionService(video_repo=video_repo, reaction_repo=reaction_repo, presenter=presenter)

def get_video_service(
    video_repo: VideoRepository = Depends(get_video_repository),
    blob_store: BlobStore = Depends(get_blob_store),
    presenter: VideoPresenter = Depends(get_video_presenter),
) -> VideoService:
    return VideoService(video_repo=video_repo, blob_store=blob_store, presenter=presenter)

def get_user_service(
    user_repo: UserRepository = Depends(get_user_repository),
    blob_store: BlobStore = Depends(get_blob_store),
    history_repo: WatchHistoryRepository = Depends(get_watch_history_repository),
    subscription_repo: SubscriptionRepository = Depends(get_subscription_repository),
    presenter: VideoPresenter = Depends(get_video_presenter),
) -> UserService:
    return UserService(
        repo=user_repo,
        blob_store=blob_store,
        history_repo=history_repo,
        subscription_repo=subscription_repo,
        presenter=presenter,
    )

def get_watch_progress_service(
    history_repo: WatchHistoryRepository = Depends(get_watch_history_repository),
    video_repo: VideoRepository = Depends(get_video_repository),
    user_repo: UserRepository = Depends(get_user_repository),
) -> WatchProgressService:
    return WatchProgressService(history_repo=history_repo, video_repo=video_repo, user_repo=user_repo)

def get_admin_service(
    user_repo: UserRepository = Depends(get_user_repository),
    video_repo: VideoRepository = Depends(get_video_repository),
) -> AdminService:
    return AdminService(user_repo=user_repo, video_repo=video_repo)


# -----------------------------
# Authentication data
# -----------------------------
bearer_scheme = HTTPBearer(auto_error=False)

def get_access_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
) -> Optional[str]:
    """Cookie `accessToken` d'abord, sinon `Authorization: Bearer`."""
    token = request.cookies.get(settings.AUTH_ACCESS_COOKIE_NAME)
    if token:
        return token
    if credentials and credentials.scheme.lower() == "bearer":
        return credentials.credentials
    return None


def get_current_user(
    request: Request,
    response: Response,
    access_token: Optional[str] = Depends(get_access_token),
    auth: AuthService = Depends(get_auth_service),
) -> User:
    """Toute identité authentifiée (bannie comprise). Ré-émet les cookies après renouvellement."""
    result = SessionResolver(auth).resolve(
        access_token=access_token,
        refresh_token=request.cookies.get(settings.AUTH_REFRESH_COOKIE_NAME),
    )
    if result.renewed:
        remember_renewal(request, response, result.renewed)
    return result.user


def get_active_user(user: User = Depends(get_current_user)) -> User:
    if user.is_banned:
        raise Forbidden("Your account has been banned")
    return user


def get_admin_user(user: User = Depends(get_current_user)) -> User:
    if not user.is_admin or user.is_banned:
        raise Forbidden("Admin access required")
    return user


def get_optional_viewer(
    request: Request,
    response: Response,
    access_token: Optional[str] = Depends(get_access_token),
    auth: AuthService = Depends(get_auth_service),
) -> Optional[User]:
    """Lecture publique : identifiants absents ou refusés → anonyme."""
    refresh_token = request.cookies.get(settings.AUTH_REFRESH_COOKIE_NAME)
    if not access_token and not refresh_token:
        return None
    try:
        result = SessionResolver(auth).resolve(access_token=access_token, refresh_token=refresh_token)
    except Unauthorized:
        return None
    if result.renewed:
        remember_renewal(request, response, result.renewed)
    return result.user


# -----------------------------
# Uploads multipart
# -----------------------------
async def read_upload(file: Optional[UploadFile]) -> Optional[bytes]:
    """Octets d'un champ fichier, None si absent ou vide."""
    if file is None:
        return None
    data = await file.read()
    return data or None
