"""
➡️ But : Définir les formats d’entrée/sortie de l’API (couche validation).

Plusieurs projections d'un même utilisateur, de la plus restreinte à la plus large :

OwnerCardOut → carte publique dans les listes (id, username, avatar)

OwnerProfileOut → profil public complet (détail vidéo, profil de chaîne)

UserOut → vue privée du compte courant (jamais le hash ni le refresh token)

🔹 Avantages :

Empêche d’exposer par erreur des infos sensibles (ex: hash de mot de passe).
"""

from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field

from app.core.responses import ApiSchema
from app.db.models.users import Role


class OwnerCardOut(ApiSchema):
    id: int
    username: str
    avatar: str = ""


class OwnerProfileOut(OwnerCardOut):
    full_name: str
    cover_image: str = ""
    created_at: Optional[datetime] = None


class UserOut(OwnerProfileOut):
    email: str
    role: Role
    is_banned: bool
    updated_at: Optional[datetime] = None


class UpdateAccountIn(ApiSchema):
    full_name: str = Field(min_length=1, max_length=128)
    email: EmailStr


class SubscriptionToggleOut(ApiSchema):
    channel_id: int
    subscribed: bool
    subscriber_count: int
