from fastapi import Request, Response

from app.core.config import settings
from app.security.tokens import TokenPair


def _cookie_options() -> dict:
    return {
        "httponly": True,
        "secure": settings.AUTH_COOKIE_SECURE,
        "samesite": settings.AUTH_COOKIE_SAMESITE,
        "path": settings.AUTH_COOKIE_PATH,
    }


def set_auth_cookies(response: Response, pair: TokenPair) -> None:
    opts = _cookie_options()
    response.set_cookie(
        key=settings.AUTH_ACCESS_COOKIE_NAME,
        value=pair["access_token"],
        max_age=settings.ACCESS_TTL_MINUTES * 60,
        **opts,
    )
    response.set_cookie(
        key=settings.AUTH_REFRESH_COOKIE_NAME,
        value=pair["refresh_token"],
        max_age=settings.REFRESH_TTL_DAYS * 24 * 3600,
        **opts,
    )


def clear_auth_cookies(response: Response) -> None:
    opts = _cookie_options()
    response.delete_cookie(key=settings.AUTH_ACCESS_COOKIE_NAME, **opts)
    response.delete_cookie(key=settings.AUTH_REFRESH_COOKIE_NAME, **opts)


def remember_renewal(request: Request, response: Response, pair: TokenPair) -> None:
    """Pose les cookies renouvelés et garde le couple pour les réponses d'erreur."""
    request.state.renewed_tokens = pair
    set_auth_cookies(response, pair)


def apply_pending_renewal(request: Request, response: Response) -> Response:
    # le refresh est déjà remplacé en base : la réponse doit porter le nouveau couple
    pair = getattr(request.state, "renewed_tokens", None)
    if pair:
        set_auth_cookies(response, pair)
    return response
