import pytest
from sqlmodel import select

from app.db.models.watch_history import WatchHistory
from app.db.repositories.watch_history import WatchHistoryRepository
from app.features.watch_progress.services import progress_percent

PROGRESS = "/api/v1/watch-progress"


@pytest.mark.parametrize(
    "watch_time, duration, expected",
    [(30, 120, 25.0), (0, 120, 0.0), (10, 0, 0.0)],
)
def test_progress_percent(watch_time, duration, expected):
    assert progress_percent(watch_time, duration) == expected


class TestSaveProgress:
    def test_upsert_keeps_one_row(self, client, make_user, make_video, login):
        user = make_user("alice")
        video = make_video(make_user("bob"))
        headers = login(user)

        first = client.post(PROGRESS, json={"videoId": str(video.id), "watchTime": 10}, headers=headers)
        second = client.post(PROGRESS, json={"videoId": str(video.id), "watchTime": 42.5}, headers=headers)
        assert first.status_code == second.status_code == 200

        res = client.get(f"{PROGRESS}/{video.id}", headers=headers)
        assert res.json()["data"]["watchTime"] == 42.5
        assert res.json()["data"]["completed"] is False

        history = client.get("/api/v1/users/history", headers=headers).json()["data"]
        assert [v["id"] for v in history] == [video.id]

    def test_unknown_video(self, client, make_user, login):
        res = client.post(PROGRESS, json={"videoId": "999", "watchTime": 10}, headers=login(make_user("alice")))
        assert res.status_code == 404

    def test_negative_watch_time(self, client, make_user, make_video, login):
        video = make_video(make_user("bob"))
        res = client.post(PROGRESS, json={"videoId": str(video.id), "watchTime": -1}, headers=login(make_user("alice")))
        assert res.status_code == 400

    def test_requires_session(self, client):
        assert client.post(PROGRESS, json={"videoId": "1", "watchTime": 1}).status_code == 401

    def test_first_report_race_updates_existing_row(self, session, make_user, make_video, monkeypatch):
        user = make_user("alice")
        video = make_video(make_user("bob"))
        repo = WatchHistoryRepository(session)
        # le premier rapport concurrent a déjà inséré la ligne
        repo.create(user_id=user.id, video_id=video.id, watch_time=5, completed=False)

        read_row = repo.get_for
        calls = []

        def missed_read(**kwargs):
            calls.append(kwargs)
            return None if len(calls) == 1 else read_row(**kwargs)

        monkeypatch.setattr(repo, "get_for", missed_read)
        row = repo.upsert(user_id=user.id, video_id=video.id, watch_time=30, completed=True)

        assert len(calls) == 2
        assert (row.watch_time, row.completed) == (30, True)
        rows = session.exec(select(WatchHistory).where(WatchHistory.user_id == user.id)).all()
        assert len(rows) == 1


class TestReadProgress:
    def test_defaults_without_history(self, client, make_user, make_video, login):
        video = make_video(make_user("bob"))
        res = client.get(f"{PROGRESS}/{video.id}", headers=login(make_user("alice")))
        assert res.status_code == 200
        assert res.json()["data"]["watchTime"] == 0
        assert res.json()["data"]["completed"] is False

    def test_continue_watching_skips_completed_and_unstarted(self, client, make_user, make_video, login):
        user, owner = make_user("alice"), make_user("bob")
        started = make_video(owner, title="started", duration=200)
        finished = make_video(owner, title="finished")
        untouched = make_video(owner, title="untouched")
        headers = login(user)

        client.post(PROGRESS, json={"videoId": str(started.id), "watchTime": 50}, headers=headers)
        client.post(PROGRESS, json={"videoId": str(finished.id), "watchTime": 120, "completed": True}, headers=headers)
        client.post(PROGRESS, json={"videoId": str(untouched.id), "watchTime": 0}, headers=headers)

        items = client.get(f"{PROGRESS}/continue-watching", headers=headers).json()["data"]
        assert len(items) == 1
        assert items[0]["progress"] == 25.0
        assert items[0]["video"]["title"] == "started"
        assert items[0]["video"]["owner"]["username"] == "bob"
