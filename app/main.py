"""
➡️ But : assembler toutes les pièces du puzzle.

Crée l’instance FastAPI (app).

Configure :

logging (format unique pour l'app et uvicorn)

CORS (le front SPA envoie les cookies : allow_credentials)

handlers d'erreurs (enveloppe uniforme)

schéma OpenAPI personnalisé

Inclut les routers (ex : /api/v1/videos).

Initialise la base au démarrage (@app.on_event("startup")).

🔹 Avantages :

Centralise la configuration du serveur HTTP.

Point unique d’exécution : uvicorn app.main:app --reload.
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.core.config import settings
from app.core.errors import register_exception_handlers
from app.core.logging import setup_logging
from app.core.openapi import custom_openapi
from app.db.session import init_db

from app.api.v1.routers import admin, healthcheck, subscriptions, users, videos, watch_progress

import uvicorn

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    openapi_tags=[
        {"name": "users", "description": "Comptes, authentification, profils de chaîne"},
        {"name": "videos", "description": "Catalogue, détail, recommandations, shorts, réactions"},
        {"name": "subscriptions", "description": "Abonnements aux chaînes"},
        {"name": "watch-progress", "description": "Progression de lecture"},
        {"name": "admin", "description": "Modération et statistiques (admin)"},
        {"name": "healthcheck", "description": "Supervision"},
    ],
)

# CORS : origines explicites quand on envoie des cookies cross-site
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS, allow_credentials=True,
    allow_methods=["*"], allow_headers=["*"],
)

register_exception_handlers(app)

# Routers
app.include_router(healthcheck.router, prefix="/api/v1")
app.include_router(users.router, prefix="/api/v1")
app.include_router(videos.router, prefix="/api/v1")
app.include_router(subscriptions.router, prefix="/api/v1")
app.include_router(watch_progress.router, prefix="/api/v1")
app.include_router(admin.router, prefix="/api/v1")

# Génération du schéma OpenAPI custom
app.openapi = lambda: custom_openapi(app)

# Démarrage
@app.on_event("startup")
def on_startup():
    init_db()
    logger.info("%s started (env=%s)", settings.APP_NAME, settings.ENV)

if __name__ == "__main__":
    uvicorn.run("app.main:app", host="127.0.0.1", port=8080, reload=(settings.ENV == "dev")) # http://localhost:8080
