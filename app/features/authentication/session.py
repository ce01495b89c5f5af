"""
➡️ But : Résoudre l'identité de l'appelant à chaque requête authentifiée.

Cycle par requête : non authentifié → résolution → authentifié | rejeté.

1. access token (cookie ou Bearer) absent → renouvellement via le refresh cookie, sinon 401.
2. access token valide → utilisateur chargé.
3. access token expiré → renouvellement ; illisible/falsifié → 401.
4. renouvellement : refresh valide ET identique à la valeur stockée → nouveau couple,
   persistance par compare-and-swap, cookies ré-émis par la dépendance FastAPI.

Course connue : deux requêtes qui renouvellent avec le même refresh token.
Une seule écriture gagne ; la perdante reste authentifiée pour sa requête
mais n'émet pas de nouveaux cookies (le navigateur garde ceux du gagnant).
"""

from dataclasses import dataclass
from typing import Optional

from app.core.errors import Unauthorized
from app.db.models.users import User
from app.features.authentication.services import AuthService
from app.security.tokens import TokenExpiredError, TokenPair


@dataclass
class SessionResult:
    user: User
    renewed: Optional[TokenPair] = None


class SessionResolver:
    def __init__(self, auth: AuthService):
        self.auth = auth

    def resolve(self, *, access_token: Optional[str], refresh_token: Optional[str]) -> SessionResult:
        if not access_token:
            if not refresh_token:
                raise Unauthorized("Unauthorized: Access token missing")
            return self._renew(refresh_token)

        try:
            user = self.auth.user_from_access_token(access_token)
        except TokenExpiredError:
            if not refresh_token:
                raise Unauthorized("Access token expired and no refresh token")
            return self._renew(refresh_token)
        return SessionResult(user=user)

    def _renew(self, refresh_token: str) -> SessionResult:
        rotation = self.auth.rotate(refresh_token)
        return SessionResult(user=rotation.user, renewed=rotation.pair)
