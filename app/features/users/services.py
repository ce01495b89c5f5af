"""
➡️ But : Contenir la logique métier du compte : orchestrer les repos, appliquer des règles, gérer les erreurs.

UserService : profil du compte courant, images (avatar / couverture), historique, abonnements.

Lève les erreurs API (app.core.errors) pour informer proprement le client.

🔹 Avantages :

Code métier découplé du web.

Test unitaire possible sans passer par FastAPI.
"""

import logging
from typing import Any, List

from sqlalchemy.exc import IntegrityError

from app.core.errors import Conflict, Internal, InvalidArgument, NotFound, parse_id
from app.db.models.base import utcnow
from app.db.models.users import User
from app.db.repositories.subscriptions import SubscriptionRepository
from app.db.repositories.users import UserRepository
from app.db.repositories.watch_history import WatchHistoryRepository
from app.features.users.schemas import SubscriptionToggleOut, UpdateAccountIn, UserOut
from app.features.videos.presenter import VideoPresenter
from app.features.videos.schemas import VideoOut
from app.utils.s3 import BlobStore, BlobStoreError

logger = logging.getLogger(__name__)


class UserService:
    def __init__(
        self,
        *,
        repo: UserRepository,
        blob_store: BlobStore,
        history_repo: WatchHistoryRepository,
        subscription_repo: SubscriptionRepository,
        presenter: VideoPresenter,
    ):
        self.repo = repo
        self.blobs = blob_store
        self.history = history_repo
        self.subscriptions = subscription_repo
        self.presenter = presenter

    def get(self, user_id: int) -> User:
        user = self.repo.get(user_id)
        if not user:
            raise NotFound("User not found")
        return user

    # ---------- Compte ----------
    def update_account(self, user_id: int, payload: UpdateAccountIn) -> UserOut:
        user = self.get(user_id)
        email = str(payload.email).strip().lower()
        full_name = payload.full_name.strip()
        if not full_name:
            raise InvalidArgument("All fields are required", errors=[{"field": "fullName"}])

        other = self.repo.get_by_email(email)
        if other and other.id != user.id:
            raise Conflict(f'Email "{email}" is already registered', field="email")

        try:
            user = self.repo.update(user, full_name=full_name, email=email, updated_at=utcnow())
        except IntegrityError:
            self.repo.session.rollback()
            raise Conflict(f'Email "{email}" is already registered', field="email")
        return UserOut.model_validate(user)

    def update_avatar(self, user_id: int, data: bytes) -> UserOut:
        return self._update_image(user_id, data, field="avatar", folder="avatars", label="Avatar")

    def update_cover_image(self, user_id: int, data: bytes) -> UserOut:
        return self._update_image(user_id, data, field="cover_image", folder="covers", label="Cover image")

    def _update_image(self, user_id: int, data: bytes, *, field: str, folder: str, label: str) -> UserOut:
        if not data:
            raise InvalidArgument(f"{label} file is missing")
        user = self.get(user_id)
        try:
            uploaded = self.blobs.upload(data, resource_type="image", folder=folder, owner_id=user.id)
        except ValueError as e:
            raise InvalidArgument(f"{label}: {e}")
        except BlobStoreError:
            logger.error("%s upload failed for user %s", label, user.id)
            raise Internal(f"Error while uploading {label.lower()}")
        user = self.repo.update(user, **{field: uploaded.url}, updated_at=utcnow())
        return UserOut.model_validate(user)

    # ---------- Historique ----------
    def watch_history(self, user_id: int) -> List[VideoOut]:
        videos = self.history.list_watched_videos(user_id)
        return self.presenter.cards(videos, viewer_id=user_id)

    # ---------- Abonnements ----------
    def toggle_subscription(self, channel_id: Any, *, subscriber_id: int) -> SubscriptionToggleOut:
        cid = parse_id(channel_id, "channel id")
        if cid == subscriber_id:
            raise InvalidArgument("You cannot subscribe to yourself")
        if not self.repo.get(cid):
            raise NotFound("Channel not found")

        existing = self.subscriptions.get_for(subscriber_id=subscriber_id, channel_id=cid)
        if existing:
            self.subscriptions.delete(existing)
            subscribed = False
        else:
            try:
                self.subscriptions.create(subscriber_id=subscriber_id, channel_id=cid)
            except IntegrityError:
                # double clic concurrent : l'abonnement existe déjà
                self.subscriptions.session.rollback()
            subscribed = True

        return SubscriptionToggleOut(
            channel_id=cid,
            subscribed=subscribed,
            subscriber_count=self.subscriptions.count_subscribers(cid),
        )
