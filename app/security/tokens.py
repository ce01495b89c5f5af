import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import TypedDict

from jose import jwt, JWTError, ExpiredSignatureError

from app.utils.ids import positive_db_id

# ==========================================================
# 🔧 Configuration : paramètres de génération/validation JWT
# ==========================================================

@dataclass(frozen=True)
class JWTSettings:
    """
    Configuration des tokens JWT.

    - `access_secret` : clé secrète pour signer/valider les access tokens
    - `refresh_secret` : clé secrète distincte pour les refresh tokens
    - `issuer` : émetteur (utilisé dans le payload)
    - `algorithm` : algo de signature (HS256 recommandé)
    - `access_ttl` : durée de vie d’un access token
    - `refresh_ttl` : durée de vie d’un refresh token
    """
    access_secret: str
    refresh_secret: str
    issuer: str = "my-app"
    algorithm: str = "HS256"
    access_ttl: timedelta = timedelta(hours=1)
    refresh_ttl: timedelta = timedelta(days=7)


# ==========================================================
# 🧱 Types
# ==========================================================

ACCESS = "access"
REFRESH = "refresh"


class TokenPair(TypedDict):
    access_token: str
    refresh_token: str
    token_type: str     # "bearer"
    expires_in: int     # durée de vie de l'access token (en secondes)

class DecodedToken(TypedDict, total=False):
    iss: str
    sub: str            # identifiant utilisateur
    typ: str            # "access" | "refresh"
    jti: str
    iat: int
    exp: int


class TokenError(Exception):
    """Base des erreurs de vérification de token."""

class TokenExpiredError(TokenError):
    """Signature valide mais token expiré."""

class TokenInvalidError(TokenError):
    """Token illisible, falsifié ou du mauvais type."""


# ==========================================================
# 🧩 Fonctions utilitaires
# ==========================================================

def _now() -> datetime:
    """Renvoie l'heure UTC actuelle."""
    return datetime.now(timezone.utc)

def new_jti() -> str:
    """Crée un identifiant unique pour un token."""
    return str(uuid.uuid4())


def _encode(*, user_id: int, typ: str, secret: str, ttl: timedelta, settings: JWTSettings) -> str:
    now = _now()
    payload: DecodedToken = {
        "iss": settings.issuer,
        "sub": str(user_id),
        "typ": typ,
        "jti": new_jti(),
        "iat": int(now.timestamp()),
        "exp": int((now + ttl).timestamp()),
    }
    return jwt.encode(payload, secret, algorithm=settings.algorithm)


# ==========================================================
# 🎟️ Génération des tokens
# ==========================================================

def create_access_token(*, user_id: int, settings: JWTSettings) -> str:
    """
    Crée un access token JWT court (par défaut 1 h).
    """
    return _encode(
        user_id=user_id,
        typ=ACCESS,
        secret=settings.access_secret,
        ttl=settings.access_ttl,
        settings=settings,
    )


def create_refresh_token(*, user_id: int, settings: JWTSettings) -> str:
    """
    Crée un refresh token JWT long (par défaut 7 jours).
    Sa valeur exacte est stockée sur l'utilisateur (une seule session active).
    """
    return _encode(
        user_id=user_id,
        typ=REFRESH,
        secret=settings.refresh_secret,
        ttl=settings.refresh_ttl,
        settings=settings,
    )


# ==========================================================
# 🔍 Décodage / Validation
# ==========================================================

def verify_token(token: str, *, secret: str, algorithm: str, expected_type: str) -> DecodedToken:
    """
    Décode et valide un token JWT (signature + expiration + type).
    Lève TokenExpiredError si expiré, TokenInvalidError sinon.
    Aucune lecture en base : la comparaison avec la valeur stockée
    reste à la charge de l'appelant pour les refresh tokens.
    """
    try:
        decoded = jwt.decode(
            token,
            secret,
            algorithms=[algorithm],
            options={"verify_aud": False},
        )
    except ExpiredSignatureError as e:
        raise TokenExpiredError(str(e)) from e
    except JWTError as e:
        raise TokenInvalidError(str(e)) from e

    if decoded.get("typ") != expected_type:
        raise TokenInvalidError("Invalid token type")

    if positive_db_id(decoded.get("sub")) is None:
        raise TokenInvalidError("Invalid token subject")
    return decoded  # type: ignore[return-value]


def verify_access_token(token: str, settings: JWTSettings) -> DecodedToken:
    return verify_token(
        token,
        secret=settings.access_secret,
        algorithm=settings.algorithm,
        expected_type=ACCESS,
    )


def verify_refresh_token(token: str, settings: JWTSettings) -> DecodedToken:
    return verify_token(
        token,
        secret=settings.refresh_secret,
        algorithm=settings.algorithm,
        expected_type=REFRESH,
    )


# ==========================================================
# 🪙 Utilitaire pratique pour générer un couple complet
# ==========================================================

def mint_token_pair(*, user_id: int, settings: JWTSettings) -> TokenPair:
    """
    Génère un couple (access_token + refresh_token) cohérent.

    ⚠️ Le refresh_token n'est pas enregistré ici
       (à stocker sur l'utilisateur via le repository).
    """
    return {
        "access_token": create_access_token(user_id=user_id, settings=settings),
        "refresh_token": create_refresh_token(user_id=user_id, settings=settings),
        "token_type": "bearer",
        "expires_in": int(settings.access_ttl.total_seconds()),
    }
