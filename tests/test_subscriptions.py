SUBSCRIBE = "/api/v1/subscriptions/c"


class TestSubscriptions:
    def test_toggle_and_counts(self, client, make_user, login):
        alice, bob = make_user("alice"), make_user("bob")
        headers = login(alice)

        res = client.post(f"{SUBSCRIBE}/{bob.id}", headers=headers)
        assert res.status_code == 200
        assert res.json()["data"] == {"channelId": bob.id, "subscribed": True, "subscriberCount": 1}

        channel = client.get("/api/v1/users/c/bob", headers=headers).json()["data"]
        assert channel["subscriberCount"] == 1
        assert channel["isSubscribed"] is True
        assert channel["channelsSubscribedToCount"] == 0

        res = client.post(f"{SUBSCRIBE}/{bob.id}", headers=headers)
        assert res.json()["data"]["subscribed"] is False
        assert res.json()["data"]["subscriberCount"] == 0

    def test_cannot_subscribe_to_self(self, client, make_user, login):
        alice = make_user("alice")
        assert client.post(f"{SUBSCRIBE}/{alice.id}", headers=login(alice)).status_code == 400

    def test_unknown_channel(self, client, make_user, login):
        assert client.post(f"{SUBSCRIBE}/999", headers=login(make_user("alice"))).status_code == 404


class TestChannelProfile:
    def test_anonymous_viewer_is_not_subscribed(self, client, make_user):
        make_user("bob")
        data = client.get("/api/v1/users/c/BOB").json()["data"]
        assert data["username"] == "bob"
        assert data["isSubscribed"] is False
        assert "email" not in data

    def test_unknown_channel(self, client):
        assert client.get("/api/v1/users/c/ghost").status_code == 404

    def test_user_profile_route(self, client, make_user, make_video):
        bob = make_user("bob")
        make_video(bob, views=4)
        data = client.get(f"/api/v1/users/{bob.id}/profile").json()["data"]
        assert data["user"]["username"] == "bob"
        assert data["stats"] == {"totalVideos": 1, "totalViews": 4, "totalLikes": 0}
