"""
➡️ But : Personnaliser la documentation Swagger/OpenAPI.

custom_openapi(app) modifie le schéma généré par FastAPI pour :

ajouter une description détaillée (conventions d'API),

déclarer l'authentification par cookie à côté du Bearer.

🔹 Avantages :

La doc est toujours complète et cohérente.
"""

from fastapi.openapi.utils import get_openapi

from app.core.config import settings


def custom_openapi(app):
    if app.openapi_schema:
        return app.openapi_schema
    openapi_schema = get_openapi(
        title=app.title,
        version=app.version,
        description=(
            "API de partage de vidéos (FastAPI + SQLModel + S3).\n\n"
            "### Conventions\n"
            "- Toutes les réponses : `{success, statusCode, message, data, errors}`.\n"
            "- JSON en camelCase ; heures en UTC.\n"
            "- Pagination : query params `page` & `limit` → `{items, page, limit, total, totalPages}`.\n"
            f"- Session : cookies httpOnly `{settings.AUTH_ACCESS_COOKIE_NAME}` / "
            f"`{settings.AUTH_REFRESH_COOKIE_NAME}` ou `Authorization: Bearer`, "
            "renouvellement transparent quand l'access token expire.\n"
        ),
        routes=app.routes,
        tags=app.openapi_tags,
    )
    schemes = openapi_schema.setdefault("components", {}).setdefault("securitySchemes", {})
    schemes["cookieAuth"] = {
        "type": "apiKey",
        "in": "cookie",
        "name": settings.AUTH_ACCESS_COOKIE_NAME,
    }
    app.openapi_schema = openapi_schema
    return app.openapi_schema
