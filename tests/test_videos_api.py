from sqlmodel import select

from app.db.models.users import Role
from app.db.models.videos import Video, VideoTag
from app.db.repositories.videos import VideoRepository

VIDEOS = "/api/v1/videos"


def _publish(client, headers, *, duration="45", files=None, **form):
    data = {"title": "My clip", "description": "desc", "duration": duration, "tags": "cats, funny"}
    data.update(form)
    if files is None:
        files = {"videoFile": ("clip.mp4", b"\x00\x00\x00\x18ftypmp42", "video/mp4")}
    return client.post(VIDEOS, data=data, files=files, headers=headers)


class TestPublish:
    def test_is_short_follows_duration(self, client, make_user, login):
        headers = login(make_user("alice"))
        short = _publish(client, headers, duration="45")
        long = _publish(client, headers, duration="90")
        assert short.status_code == long.status_code == 201
        assert short.json()["data"]["isShort"] is True
        assert long.json()["data"]["isShort"] is False
        assert short.json()["data"]["tags"] == ["cats", "funny"]
        assert short.json()["data"]["category"] == "other"

    def test_requires_video_file(self, client, make_user, login):
        res = _publish(client, login(make_user("alice")), files={})
        assert res.status_code == 400

    def test_requires_numeric_duration(self, client, make_user, login):
        res = _publish(client, login(make_user("alice")), duration="abc")
        assert res.status_code == 400

    def test_video_upload_failure_is_internal(self, client, make_user, login, blob_store, session):
        blob_store.fail.add("video")
        res = _publish(client, login(make_user("alice")))
        assert res.status_code == 500
        assert session.exec(select(Video)).all() == []

    def test_rejected_video_bytes(self, client, make_user, login, blob_store):
        blob_store.reject.add("video")
        assert _publish(client, login(make_user("alice"))).status_code == 400

    def test_thumbnail_failure_degrades_to_empty(self, client, make_user, login, blob_store):
        blob_store.fail.add("image")
        res = _publish(
            client,
            login(make_user("alice")),
            files={
                "videoFile": ("clip.mp4", b"\x00\x00\x00\x18ftypmp42", "video/mp4"),
                "thumbnail": ("t.png", b"\x89PNG fake", "image/png"),
            },
        )
        assert res.status_code == 201
        assert res.json()["data"]["thumbnail"] == ""

    def test_anonymous_cannot_publish(self, client):
        assert _publish(client, {}).status_code == 401


class TestDetail:
    def test_each_fetch_counts_a_view(self, client, make_user, make_video, session):
        video = make_video(make_user("alice"))
        for _ in range(3):
            res = client.get(f"{VIDEOS}/{video.id}")
            assert res.status_code == 200
        assert res.json()["data"]["views"] == 3
        assert res.json()["data"]["owner"]["fullName"] == "Alice"
        session.refresh(video)
        assert video.views == 3

    def test_malformed_and_unknown_ids(self, client):
        assert client.get(f"{VIDEOS}/not-an-id").status_code == 400
        assert client.get(f"{VIDEOS}/0").status_code == 400
        assert client.get(f"{VIDEOS}/%C2%B2").status_code == 400
        assert client.get(f"{VIDEOS}/99999999999999999999999").status_code == 400
        assert client.get(f"{VIDEOS}/999").status_code == 404

    def test_rejected_credentials_read_as_anonymous(self, client, make_user, make_video):
        video = make_video(make_user("alice"))
        res = client.get(f"{VIDEOS}/{video.id}", headers={"Authorization": "Bearer garbage"})
        assert res.status_code == 200
        assert res.json()["data"]["userReaction"] is None


class TestListing:
    def test_list_envelope_and_page(self, client, make_user, make_video):
        owner = make_user("alice")
        for i in range(3):
            make_video(owner, title=f"v{i}", duration=30 * (i + 1))
        res = client.get(VIDEOS, params={"limit": 2, "maxDuration": 60})
        body = res.json()
        assert res.status_code == 200
        assert body["success"] is True
        assert body["data"]["total"] == 2
        assert body["data"]["totalPages"] == 1
        assert body["data"]["items"][0]["owner"] == {"id": owner.id, "username": "alice", "avatar": ""}

    def test_invalid_sort_is_rejected(self, client):
        res = client.get(VIDEOS, params={"sort": "random"})
        assert res.status_code == 400

    def test_invalid_user_id(self, client):
        assert client.get(VIDEOS, params={"userId": "abc"}).status_code == 400


class TestOwnership:
    def test_only_owner_or_admin_may_delete(self, client, make_user, make_video, login, session):
        owner, other = make_user("alice"), make_user("bob")
        admin = make_user("root", role=Role.ADMIN)
        video = make_video(owner, tags=["x"])

        assert client.delete(f"{VIDEOS}/{video.id}", headers=login(other)).status_code == 403
        assert client.delete(f"{VIDEOS}/{video.id}", headers=login(admin)).status_code == 200
        session.expire_all()
        assert session.get(Video, video.id) is None
        assert session.exec(select(VideoTag)).all() == []

    def test_toggle_publish(self, client, make_user, make_video, login):
        owner = make_user("alice")
        video = make_video(owner)
        res = client.patch(f"{VIDEOS}/toggle/publish/{video.id}", headers=login(owner))
        assert res.status_code == 200
        assert res.json()["data"]["isPublished"] is False

    def test_update_keeps_thumbnail_when_upload_fails(self, client, make_user, make_video, login, blob_store, session):
        owner = make_user("alice")
        video = make_video(owner, thumbnail="https://cdn.test/old.png")
        blob_store.fail.add("image")
        res = client.patch(
            f"{VIDEOS}/{video.id}",
            data={"title": "Renamed", "tags": "a,b"},
            files={"thumbnail": ("t.png", b"\x89PNG fake", "image/png")},
            headers=login(owner),
        )
        assert res.status_code == 200
        assert res.json()["data"]["title"] == "Renamed"
        assert res.json()["data"]["thumbnail"] == "https://cdn.test/old.png"
        assert VideoRepository(session).tags_for([video.id])[video.id] == ["a", "b"]
