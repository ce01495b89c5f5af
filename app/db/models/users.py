"""
➡️ But : Définir la structure des tables de la base (ORM).

Représente les objets persistés. Ici on représente les tables ayant un rapport avec les users.

Le refresh token courant est stocké sur l'utilisateur : une seule session active,
en émettre un nouveau invalide le précédent.
"""

from enum import Enum
from typing import Optional

from sqlmodel import Field

from .base import BaseModelDB


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


class User(BaseModelDB, table=True):
    username: str = Field(index=True, unique=True)   # toujours en minuscules
    email: str = Field(index=True, unique=True)      # toujours en minuscules
    full_name: str
    hashed_password: str
    avatar: str = Field(default="")
    cover_image: str = Field(default="")
    role: Role = Field(default=Role.USER)
    is_banned: bool = Field(default=False)
    refresh_token: Optional[str] = Field(default=None)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN
