import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from pydantic import EmailStr, TypeAdapter, ValidationError
from sqlalchemy.exc import IntegrityError

from app.core.errors import Conflict, Internal, InvalidArgument, Unauthorized
from app.db.models.base import utcnow
from app.db.models.users import User
from app.db.repositories.users import UserRepository
from app.security.password import verify_password, hash_password
from app.security.tokens import (
    JWTSettings,
    TokenError,
    TokenInvalidError,
    TokenPair,
    mint_token_pair,
    verify_access_token,
    verify_refresh_token,
)
from app.features.authentication.schemas import (
    SignUpIn,
    SignInIn,
    ChangePasswordIn,
)
from app.utils.s3 import BlobStore, BlobStoreError
from app.utils.ids import positive_db_id

logger = logging.getLogger(__name__)

_email_adapter = TypeAdapter(EmailStr)


@dataclass
class Rotation:
    """Résultat d'une rotation : `pair` vaut None si un renouvellement concurrent a gagné."""
    user: User
    pair: Optional[TokenPair]


class AuthService:
    """
    Service d'authentification : orchestre le repository User + tokens.
    Ne contient pas d'accès SQL direct et lève des erreurs API propres.
    """

    def __init__(
        self,
        *,
        user_repo: UserRepository,
        jwt_settings: JWTSettings,
        blob_store: Optional[BlobStore] = None,
    ):
        self.user_repo = user_repo
        self.jwt = jwt_settings
        self.blobs = blob_store

    # ---------- Sign up ----------
    def sign_up(
        self,
        payload: SignUpIn,
        *,
        avatar: Optional[bytes] = None,
        cover_image: Optional[bytes] = None,
    ) -> User:
        full_name = payload.full_name.strip()
        username = payload.username.strip().lower()
        email = payload.email.strip().lower()
        if not all([full_name, username, email, payload.password]):
            raise InvalidArgument("All fields are required")
        try:
            _email_adapter.validate_python(email)
        except ValidationError:
            raise InvalidArgument("Invalid email", errors=[{"field": "email"}])

        existing = self.user_repo.get_by_username_or_email(username=username, email=email)
        if existing:
            self._raise_duplicate(existing, username=username, email=email)

        avatar_url = self._upload_image(avatar, folder="avatars", label="Avatar") if avatar else ""
        cover_url = self._upload_image(cover_image, folder="covers", label="Cover image") if cover_image else ""

        try:
            return self.user_repo.create(
                username=username,
                email=email,
                full_name=full_name,
                hashed_password=hash_password(payload.password),
                avatar=avatar_url,
                cover_image=cover_url,
            )
        except IntegrityError:
            # course entre la vérification et l'insert
            self.user_repo.session.rollback()
            existing = self.user_repo.get_by_username_or_email(username=username, email=email)
            if existing:
                self._raise_duplicate(existing, username=username, email=email)
            raise Conflict("User already exists")

    @staticmethod
    def _raise_duplicate(existing: User, *, username: str, email: str) -> None:
        if existing.username == username:
            raise Conflict(f'Username "{username}" is already taken', field="username")
        if existing.email == email:
            raise Conflict(f'Email "{email}" is already registered', field="email")
        raise Conflict("User already exists")

    def _upload_image(self, data: bytes, *, folder: str, label: str) -> str:
        if self.blobs is None:
            raise Internal(f"{label} upload failed")
        try:
            return self.blobs.upload(data, resource_type="image", folder=folder).url
        except ValueError as e:
            raise InvalidArgument(f"{label}: {e}")
        except BlobStoreError:
            raise Internal(f"{label} upload failed")

    # ---------- Sign in ----------
    def sign_in(self, payload: SignInIn) -> Tuple[User, TokenPair]:
        if not payload.username and not payload.email:
            raise InvalidArgument("Username or email is required")

        user = self.user_repo.get_by_username_or_email(username=payload.username, email=payload.email)
        if not user or not verify_password(payload.password, user.hashed_password):
            # Ne pas révéler si l'utilisateur existe
            raise Unauthorized("Invalid credentials")

        return user, self.issue_session(user)

    def issue_session(self, user: User) -> TokenPair:
        """Nouveau couple ; le refresh précédent (autre appareil) est invalidé."""
        pair = mint_token_pair(user_id=user.id, settings=self.jwt)
        self.user_repo.set_refresh_token(user.id, pair["refresh_token"])
        return pair

    # ---------- Access token ----------
    def user_from_access_token(self, access_token: str) -> User:
        """
        Lève TokenExpiredError telle quelle (l'appelant décide de renouveler),
        Unauthorized pour tout le reste.
        """
        try:
            decoded = verify_access_token(access_token, self.jwt)
        except TokenInvalidError:
            raise Unauthorized("Invalid access token")

        user = self.user_repo.get(positive_db_id(decoded["sub"]))
        if not user:
            raise Unauthorized("Invalid access token: user not found")
        return user

    # ---------- Refresh (rotation) ----------
    def rotate(self, refresh_token: str) -> Rotation:
        try:
            decoded = verify_refresh_token(refresh_token, self.jwt)
        except TokenError:
            raise Unauthorized("Refresh token expired or invalid")

        user = self.user_repo.get(positive_db_id(decoded["sub"]))
        if not user:
            raise Unauthorized("Invalid refresh token")
        if user.refresh_token != refresh_token:
            # token remplacé (autre login, rotation déjà faite) ou révoqué
            logger.warning("Rejected superseded refresh token for user %s", user.id)
            raise Unauthorized("Refresh token expired or already used")

        pair = mint_token_pair(user_id=user.id, settings=self.jwt)
        if not self.user_repo.swap_refresh_token(user.id, expected=refresh_token, new=pair["refresh_token"]):
            logger.info("Concurrent session renewal for user %s, keeping the winner's tokens", user.id)
            return Rotation(user=user, pair=None)

        logger.info("Session renewed for user %s", user.id)
        return Rotation(user=user, pair=pair)

    def refresh(self, refresh_token: Optional[str]) -> Tuple[User, TokenPair]:
        if not refresh_token:
            raise Unauthorized("Unauthorized request")
        rotation = self.rotate(refresh_token)
        if rotation.pair is None:
            raise Unauthorized("Refresh token expired or already used")
        return rotation.user, rotation.pair

    # ---------- Logout ----------
    def log_out(self, user_id: int) -> None:
        self.user_repo.set_refresh_token(user_id, None)

    # ---------- Changement de mot de passe ----------
    def change_password(self, *, user_id: int, payload: ChangePasswordIn) -> None:
        user = self.user_repo.get(user_id)
        if not user:
            raise Unauthorized("User not found")

        if not verify_password(payload.old_password, user.hashed_password):
            raise InvalidArgument("Old password is incorrect")

        self.user_repo.update(
            user,
            hashed_password=hash_password(payload.new_password),
            updated_at=utcnow(),
        )
