"""
➡️ But : Encapsuler toutes les opérations de base de données.

UserRepository : CRUD (create, read, update, delete) sur la table User,
plus le "Credential Store" : lecture par identifiant, mises à jour atomiques
du refresh token courant (compare-and-swap).

Ne contient aucune logique métier, juste de la persistance.

🔹 Avantages :

Réutilisable (les services n’ont pas à savoir comment la DB fonctionne).

Testable indépendamment (mock du repo sans base réelle).
"""

# app/db/repositories/users.py
from __future__ import annotations

from typing import Optional, Sequence, Tuple
from sqlalchemy import case, update
from sqlmodel import select, or_, func

from app.db.repositories.base import BaseRepository
from app.db.models.base import utcnow
from app.db.models.users import User, Role

class UserRepository(BaseRepository[User]):
    """
    Repository pour la table User.
    Hérite du CRUD générique de BaseRepository.
    Contient uniquement les requêtes spécifiques à User.
    """
    model = User

    def get_by_username(self, username: str) -> Optional[User]:
        """Retourne un utilisateur par son nom d'utilisateur (insensible à la casse)."""
        return self.session.exec(
            select(self.model).where(self.model.username == username.strip().lower())
        ).first()

    def get_by_email(self, email: str) -> Optional[User]:
        return self.session.exec(
            select(self.model).where(self.model.email == email.strip().lower())
        ).first()

    def get_by_username_or_email(
        self, *, username: Optional[str] = None, email: Optional[str] = None
    ) -> Optional[User]:
        clauses = []
        if username:
            clauses.append(self.model.username == username.strip().lower())
        if email:
            clauses.append(self.model.email == email.strip().lower())
        if not clauses:
            return None
        return self.session.exec(select(self.model).where(or_(*clauses))).first()

    # ---------- REFRESH TOKEN (session unique) ----------

    def set_refresh_token(self, user_id: int, token: Optional[str]) -> None:
        """Écrase le refresh token courant (login / logout) : dernier écrit gagne."""
        self.session.exec(
            update(User)
            .where(User.id == user_id)
            .values(refresh_token=token, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        self.session.commit()

    def swap_refresh_token(self, user_id: int, *, expected: str, new: str) -> bool:
        """
        Compare-and-swap : remplace le refresh token seulement s'il vaut encore `expected`.
        Retourne False si un autre renouvellement l'a déjà remplacé.
        """
        result = self.session.exec(
            update(User)
            .where(User.id == user_id, User.refresh_token == expected)
            .values(refresh_token=new, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        self.session.commit()
        return result.rowcount == 1

    # ---------- ADMIN ----------

    def search(
        self,
        *,
        q: Optional[str] = None,
        role: Optional[Role] = None,
        banned: Optional[bool] = None,
        offset: int = 0,
        limit: int = 20,
    ) -> Tuple[Sequence[User], int]:
        """Liste paginée + total, filtres optionnels (recherche sur username/email/nom)."""
        conditions = []
        q = (q or "").strip()
        if q:
            conditions.append(
                or_(
                    self.model.username.icontains(q, autoescape=True),
                    self.model.email.icontains(q, autoescape=True),
                    self.model.full_name.icontains(q, autoescape=True),
                )
            )
        if role is not None:
            conditions.append(self.model.role == role)
        if banned is not None:
            conditions.append(self.model.is_banned.is_(banned))

        stmt = (
            select(self.model)
            .where(*conditions)
            .order_by(self.model.created_at.desc(), self.model.id.desc())
            .offset(offset)
            .limit(limit)
        )
        total = self.session.exec(select(func.count(self.model.id)).where(*conditions)).one()
        return self.session.exec(stmt).all(), int(total)

    def stats(self) -> dict:
        total, banned, admins = self.session.exec(
            select(
                func.count(self.model.id),
                func.coalesce(func.sum(case((self.model.is_banned.is_(True), 1), else_=0)), 0),
                func.coalesce(func.sum(case((self.model.role == Role.ADMIN, 1), else_=0)), 0),
            )
        ).one()
        return {"total_users": int(total), "banned_users": int(banned), "admin_users": int(admins)}
