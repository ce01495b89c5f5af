import logging

from sqlmodel import Session

from app.db.models.base import utcnow
from app.db.models.users import Role, User
from app.db.repositories.users import UserRepository
from app.security.password import hash_password

logger = logging.getLogger(__name__)


def seed_admin(session: Session, *, username: str, email: str, password: str) -> User:
    """
    Crée le compte admin s'il n'existe pas ; sinon le promeut (rôle admin, débanni).
    Idempotent : relancer le seed ne crée pas de doublon et ne change pas le mot de passe.
    """
    repo = UserRepository(session)
    existing = repo.get_by_username_or_email(username=username, email=email)
    if existing:
        if existing.role != Role.ADMIN or existing.is_banned:
            existing = repo.update(existing, role=Role.ADMIN, is_banned=False, updated_at=utcnow())
            logger.info("Promoted existing user %s to admin", existing.username)
        return existing

    admin = repo.create(
        username=username.strip().lower(),
        email=email.strip().lower(),
        full_name="Administrator",
        hashed_password=hash_password(password),
        role=Role.ADMIN,
    )
    logger.info("Created admin account %s", admin.username)
    return admin
