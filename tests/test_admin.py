from app.db.models.users import Role
from app.db.repositories.users import UserRepository

ADMIN = "/api/v1/admin"


class TestGuard:
    def test_regular_user_is_forbidden(self, client, make_user, login):
        headers = login(make_user("alice"))
        assert client.get(f"{ADMIN}/analytics", headers=headers).status_code == 403
        assert client.get(f"{ADMIN}/users", headers=headers).status_code == 403

    def test_anonymous_is_unauthorized(self, client):
        assert client.get(f"{ADMIN}/analytics").status_code == 401


class TestModeration:
    def test_ban_toggle_revokes_session(self, client, make_user, login, session):
        admin = make_user("root", role=Role.ADMIN)
        alice = make_user("alice")
        login(alice)
        headers = login(admin)

        res = client.patch(f"{ADMIN}/users/{alice.id}/ban", headers=headers)
        assert res.status_code == 200
        assert res.json()["data"] == {"userId": alice.id, "isBanned": True}
        session.expire_all()
        assert UserRepository(session).get(alice.id).refresh_token is None

        res = client.patch(f"{ADMIN}/users/{alice.id}/ban", headers=headers)
        assert res.json()["data"]["isBanned"] is False

    def test_admin_cannot_be_banned(self, client, make_user, login):
        admin = make_user("root", role=Role.ADMIN)
        other = make_user("root2", role=Role.ADMIN)
        assert client.patch(f"{ADMIN}/users/{other.id}/ban", headers=login(admin)).status_code == 403

    def test_unknown_user(self, client, make_user, login):
        admin = make_user("root", role=Role.ADMIN)
        assert client.patch(f"{ADMIN}/users/999/ban", headers=login(admin)).status_code == 404

    def test_delete_any_video(self, client, make_user, make_video, login):
        admin = make_user("root", role=Role.ADMIN)
        video = make_video(make_user("alice"))
        assert client.delete(f"{ADMIN}/videos/{video.id}", headers=login(admin)).status_code == 200
        assert client.get(f"/api/v1/videos/{video.id}").status_code == 404


class TestReporting:
    def test_analytics(self, client, make_user, make_video, login):
        admin = make_user("root", role=Role.ADMIN)
        alice = make_user("alice", is_banned=True)
        make_video(alice, duration=30, views=7, likes=2)
        make_video(alice, duration=300, views=3)

        data = client.get(f"{ADMIN}/analytics", headers=login(admin)).json()["data"]
        assert data["users"] == {"totalUsers": 2, "bannedUsers": 1, "adminUsers": 1}
        assert data["videos"] == {"totalVideos": 2, "totalViews": 10, "totalLikes": 2, "shorts": 1}
        assert data["engagement"]["videosLast7Days"] == 2

    def test_list_users_filters(self, client, make_user, login):
        admin = make_user("root", role=Role.ADMIN)
        make_user("alice", is_banned=True)
        make_user("bob")
        headers = login(admin)

        banned = client.get(f"{ADMIN}/users", params={"banned": "true"}, headers=headers).json()["data"]
        assert [u["username"] for u in banned["items"]] == ["alice"]

        admins = client.get(f"{ADMIN}/users", params={"role": "admin"}, headers=headers).json()["data"]
        assert [u["username"] for u in admins["items"]] == ["root"]

        found = client.get(f"{ADMIN}/users", params={"search": "BO"}, headers=headers).json()["data"]
        assert found["total"] == 1
        assert found["limit"] == 20

    def test_user_search_treats_wildcards_literally(self, client, make_user, login):
        admin = make_user("root", role=Role.ADMIN)
        make_user("bob")
        make_user("jo_doe")
        headers = login(admin)

        found = client.get(f"{ADMIN}/users", params={"search": "_"}, headers=headers).json()["data"]
        assert [u["username"] for u in found["items"]] == ["jo_doe"]
        assert client.get(f"{ADMIN}/users", params={"search": "%"}, headers=headers).json()["data"]["total"] == 0
