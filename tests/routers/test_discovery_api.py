from tests._feed_helpers import make_album

SEED = "https://music.example.com/seed.xml"
FRIEND = "https://music.example.com/friend.xml"


def test_discover_requires_url(client) -> None:
    response = client.post("/api/admin/discover-podroll", json={})

    assert response.status_code == 400
    assert response.json()["detail"] == "URL is required"


def test_discover_rejects_invalid_url(client) -> None:
    response = client.post("/api/admin/discover-podroll", json={"url": "not a url"})

    assert response.status_code == 400


def test_discover_rejects_out_of_range_depth(client) -> None:
    response = client.post("/api/admin/discover-podroll", json={"url": SEED, "depth": 11})

    assert response.status_code == 422


def test_discover_returns_records_and_stats(client, fake_parser, registry) -> None:
    fake_parser.results.update(
        {
            SEED: make_album("Seed", artist="Band", podroll=[FRIEND]),
            FRIEND: make_album("Friend", artist="Pals"),
        }
    )

    response = client.post(
        "/api/admin/discover-podroll",
        json={"url": SEED, "recursive": True, "depth": 1, "autoAdd": True},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["stats"] == {"total": 2, "new": 2, "existing": 0, "errors": 0, "added": 2}
    assert body["added"] == [SEED, FRIEND]
    friend = body["discovered"][1]
    assert friend["url"] == FRIEND
    assert friend["hasAlbum"] is True
    assert friend["alreadyExists"] is False
    assert friend["source"] == "podroll"
    assert friend["discoveredFrom"] == SEED
    assert registry.find_by_url(FRIEND).title == "Friend by Pals"


def test_discover_without_auto_add_leaves_registry_alone(client, fake_parser, registry) -> None:
    fake_parser.results[SEED] = make_album("Seed")

    response = client.post("/api/admin/discover-podroll", json={"url": SEED})

    assert response.status_code == 200
    assert response.json()["added"] == []
    assert registry.get_all() == []


def test_overview_lists_feeds_and_stats(client, registry) -> None:
    registry.add(SEED, title="Seed")

    response = client.get("/api/admin/discover-podroll")

    assert response.status_code == 200
    body = response.json()
    assert [feed["originalUrl"] for feed in body["feeds"]] == [SEED]
    assert body["feeds"][0]["type"] == "album"
    assert body["stats"]["total"] == 1
    assert body["stats"]["byType"] == {"album": 1, "publisher": 0}
