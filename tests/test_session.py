"""
Résolution de session : access valide / expiré / illisible, renouvellement par refresh token.
"""
from datetime import timedelta

import pytest

from app.core.config import jwt_settings
from app.core.errors import Unauthorized
from app.db.repositories.users import UserRepository
from app.features.authentication.services import AuthService
from app.features.authentication.session import SessionResolver
from app.security.tokens import (
    JWTSettings,
    create_access_token,
    create_refresh_token,
    mint_token_pair,
    verify_refresh_token,
)


@pytest.fixture
def auth(session):
    return AuthService(user_repo=UserRepository(session), jwt_settings=jwt_settings)


@pytest.fixture
def resolver(auth):
    return SessionResolver(auth)


def _store_refresh(session, user):
    pair = mint_token_pair(user_id=user.id, settings=jwt_settings)
    user.refresh_token = pair["refresh_token"]
    session.add(user)
    session.commit()
    return pair


class TestSessionResolver:
    def test_valid_access_token(self, resolver, make_user):
        user = make_user("alice")
        token = create_access_token(user_id=user.id, settings=jwt_settings)
        result = resolver.resolve(access_token=token, refresh_token=None)
        assert result.user.id == user.id
        assert result.renewed is None

    def test_no_credentials(self, resolver):
        with pytest.raises(Unauthorized):
            resolver.resolve(access_token=None, refresh_token=None)

    def test_malformed_access_token_is_rejected_without_renewal(self, resolver, make_user, session):
        user = make_user("alice")
        pair = _store_refresh(session, user)
        with pytest.raises(Unauthorized) as exc:
            resolver.resolve(access_token="garbage", refresh_token=pair["refresh_token"])
        assert "Invalid access token" in exc.value.message

    def test_expired_access_with_matching_refresh_renews(self, resolver, make_user, session, expired_jwt):
        user = make_user("alice")
        old = _store_refresh(session, user)
        expired = create_access_token(user_id=user.id, settings=expired_jwt)

        result = resolver.resolve(access_token=expired, refresh_token=old["refresh_token"])

        assert result.user.id == user.id
        assert result.renewed is not None
        assert result.renewed["access_token"] != expired
        assert result.renewed["refresh_token"] != old["refresh_token"]
        assert result.renewed["access_token"] != result.renewed["refresh_token"]
        session.expire_all()
        assert UserRepository(session).get(user.id).refresh_token == result.renewed["refresh_token"]

    def test_missing_access_renews_from_refresh(self, resolver, make_user, session):
        user = make_user("alice")
        old = _store_refresh(session, user)
        result = resolver.resolve(access_token=None, refresh_token=old["refresh_token"])
        assert result.renewed is not None
        assert verify_refresh_token(result.renewed["refresh_token"], jwt_settings)["sub"] == str(user.id)

    def test_expired_access_without_refresh(self, resolver, make_user, expired_jwt):
        user = make_user("alice")
        expired = create_access_token(user_id=user.id, settings=expired_jwt)
        with pytest.raises(Unauthorized):
            resolver.resolve(access_token=expired, refresh_token=None)

    def test_mismatched_refresh_is_rejected(self, resolver, make_user, session, expired_jwt):
        user = make_user("alice")
        _store_refresh(session, user)
        # valide mais supplanté par un login plus récent
        stale = mint_token_pair(user_id=user.id, settings=jwt_settings)["refresh_token"]
        expired = create_access_token(user_id=user.id, settings=expired_jwt)
        with pytest.raises(Unauthorized):
            resolver.resolve(access_token=expired, refresh_token=stale)

    def test_expired_refresh_is_rejected(self, resolver, make_user, session):
        user = make_user("alice")
        short = JWTSettings(
            access_secret=jwt_settings.access_secret,
            refresh_secret=jwt_settings.refresh_secret,
            issuer=jwt_settings.issuer,
            algorithm=jwt_settings.algorithm,
            access_ttl=jwt_settings.access_ttl,
            refresh_ttl=timedelta(seconds=-10),
        )
        refresh = create_refresh_token(user_id=user.id, settings=short)
        user.refresh_token = refresh
        session.add(user)
        session.commit()
        with pytest.raises(Unauthorized):
            resolver.resolve(access_token=None, refresh_token=refresh)

    def test_lost_renewal_race_stays_authenticated_without_new_pair(self, auth, make_user, session, monkeypatch):
        user = make_user("alice")
        old = _store_refresh(session, user)
        monkeypatch.setattr(auth.user_repo, "swap_refresh_token", lambda *a, **kw: False)

        result = SessionResolver(auth).resolve(access_token=None, refresh_token=old["refresh_token"])

        assert result.user.id == user.id
        assert result.renewed is None


class TestSessionOverHttp:
    def test_expired_access_cookie_is_renewed_transparently(self, client, make_user, session, expired_jwt):
        user = make_user("alice")
        old = _store_refresh(session, user)
        expired = create_access_token(user_id=user.id, settings=expired_jwt)
        client.cookies.set("accessToken", expired)
        client.cookies.set("refreshToken", old["refresh_token"])

        res = client.get("/api/v1/users/current-user")

        assert res.status_code == 200
        assert res.json()["data"]["username"] == "alice"
        assert res.cookies.get("accessToken")
        assert res.cookies.get("refreshToken") not in (None, old["refresh_token"])
        set_cookie = ",".join(res.headers.get_list("set-cookie")).lower()
        assert "httponly" in set_cookie
        assert "samesite=none" in set_cookie
        assert "secure" in set_cookie

    def test_bearer_header_is_accepted(self, client, make_user, login):
        user = make_user("alice")
        res = client.get("/api/v1/users/current-user", headers=login(user))
        assert res.status_code == 200
        assert "hashedPassword" not in res.json()["data"]
        assert "refreshToken" not in res.json()["data"]

    def test_rejected_session_envelope(self, client):
        res = client.get("/api/v1/users/current-user")
        body = res.json()
        assert res.status_code == 401
        assert body["success"] is False
        assert body["statusCode"] == 401
        assert body["data"] is None

    def test_renewal_survives_an_error_response(self, client, make_user, session, expired_jwt):
        user = make_user("alice")
        old = _store_refresh(session, user)
        client.cookies.set("accessToken", create_access_token(user_id=user.id, settings=expired_jwt))
        client.cookies.set("refreshToken", old["refresh_token"])

        res = client.get("/api/v1/videos/999999")

        assert res.status_code == 404
        access, refresh = res.cookies.get("accessToken"), res.cookies.get("refreshToken")
        assert access
        assert refresh not in (None, old["refresh_token"])
        session.expire_all()
        assert UserRepository(session).get(user.id).refresh_token == refresh

        client.cookies.clear()
        client.cookies.set("accessToken", access)
        client.cookies.set("refreshToken", refresh)
        assert client.get("/api/v1/users/current-user").status_code == 200

    def test_guarded_route_error_still_emits_renewed_cookies(self, client, make_user, session, expired_jwt):
        user = make_user("alice")
        old = _store_refresh(session, user)
        client.cookies.set("accessToken", create_access_token(user_id=user.id, settings=expired_jwt))
        client.cookies.set("refreshToken", old["refresh_token"])

        res = client.post("/api/v1/watch-progress", json={"videoId": "999", "watchTime": 5})

        assert res.status_code == 404
        assert res.cookies.get("refreshToken") not in (None, old["refresh_token"])
        assert res.cookies.get("accessToken")
