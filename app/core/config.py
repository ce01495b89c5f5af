"""
➡️ But : Centraliser tous les paramètres configurables (nom d’app, chemin DB, secrets, cookies, stockage...)

Utilise pydantic-settings pour charger automatiquement les variables d’environnement (.env, variables système…).

Fournit un objet settings unique, que tu importes ailleurs :

from app.core.config import settings
print(settings.APP_NAME)


🔹 Avantages :

Plus propre que des constantes éparpillées dans le code.

Facilite le passage entre environnements (dev / prod / test).
"""

from datetime import timedelta
from typing import List, Optional

from pydantic_settings import BaseSettings
from app.security.tokens import JWTSettings


class Settings(BaseSettings):
    # -----------------------------
    # App
    # -----------------------------
    APP_NAME: str = "VidShare-Back"
    ENV: str = "dev"  # dev | prod | test
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["*"]

    # -----------------------------
    # DB
    # -----------------------------
    SQLITE_PATH: str = "app.db"  # fichier SQLite
    # Si tu veux forcer une URL différente (ex: Postgres), définis DATABASE_URL dans l'env.
    DATABASE_URL: Optional[str] = None

    # -----------------------------
    # JWT / Auth
    # -----------------------------
    ACCESS_TOKEN_SECRET: str = "CHANGE_ME_ACCESS"     # ⚠️ change en prod
    REFRESH_TOKEN_SECRET: str = "CHANGE_ME_REFRESH"   # ⚠️ change en prod
    JWT_ISSUER: str = "vidshare-api"
    JWT_ALGORITHM: str = "HS256"

    ACCESS_TTL_MINUTES: int = 60          # access token court
    REFRESH_TTL_DAYS: int = 7             # refresh token long

    # Cookies (access + refresh), cross-site pour le front SPA
    AUTH_ACCESS_COOKIE_NAME: str = "accessToken"
    AUTH_REFRESH_COOKIE_NAME: str = "refreshToken"
    AUTH_COOKIE_SAMESITE: str = "none"    # "lax" | "strict" | "none"
    AUTH_COOKIE_PATH: str = "/"
    AUTH_COOKIE_SECURE: bool = True

    # -----------------------------
    # Stockage objet (S3 / MinIO)
    # -----------------------------
    S3_ENDPOINT: str = "http://localhost:9000"
    S3_PUBLIC_BASE_URL: Optional[str] = None   # auto depuis S3_ENDPOINT/S3_BUCKET si None
    S3_REGION: str = "us-east-1"
    S3_KEY: str = "minioadmin"
    S3_SECRET: str = "minioadmin"
    S3_BUCKET: str = "media"
    MAX_VIDEO_UPLOAD_MB: int = 500
    MAX_IMAGE_UPLOAD_MB: int = 10

    # -----------------------------
    # Catalogue / pagination
    # -----------------------------
    SHORT_MAX_DURATION_SECONDS: float = 60
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    # -----------------------------
    # Seed admin
    # -----------------------------
    ADMIN_USERNAME: str = "admin"
    ADMIN_EMAIL: str = "admin@example.com"
    ADMIN_PASSWORD: str = "CHANGE_ME_ADMIN"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
    }

    # -----------------------------
    # Post-process values
    # -----------------------------
    def model_post_init(self, __context): # appelée automatiquement
        # DATABASE_URL par défaut depuis SQLITE_PATH si non fourni
        if not self.DATABASE_URL:
            object.__setattr__(self, "DATABASE_URL", f"sqlite:///{self.SQLITE_PATH}")

        # URL publique des objets : endpoint + bucket (path-style)
        if not self.S3_PUBLIC_BASE_URL:
            base = f"{self.S3_ENDPOINT.rstrip('/')}/{self.S3_BUCKET}"
            object.__setattr__(self, "S3_PUBLIC_BASE_URL", base)

    @property
    def is_production(self) -> bool:
        return self.ENV == "prod"


# Instance globale importable partout
settings = Settings()

# Objet JWT prêt à l'emploi pour les services
jwt_settings = JWTSettings(
    access_secret=settings.ACCESS_TOKEN_SECRET,
    refresh_secret=settings.REFRESH_TOKEN_SECRET,
    issuer=settings.JWT_ISSUER,
    algorithm=settings.JWT_ALGORITHM,
    access_ttl=timedelta(minutes=settings.ACCESS_TTL_MINUTES),
    refresh_ttl=timedelta(days=settings.REFRESH_TTL_DAYS),
)
