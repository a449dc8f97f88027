from tests._feed_helpers import make_album

ALBUM = "https://music.example.com/album.xml"
FRIEND = "https://music.example.com/friend.xml"


def test_add_feed_registers_and_crawls_podroll(client, fake_parser, registry) -> None:
    fake_parser.results.update(
        {
            ALBUM: make_album("Album", podroll=[FRIEND]),
            FRIEND: make_album("Friend", artist="Pals"),
        }
    )

    response = client.post("/api/admin/feeds", json={"url": ALBUM, "title": "My Album"})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["feed"]["title"] == "My Album"
    assert body["feed"]["priority"] == "core"
    assert body["feed"]["source"] == "manual"
    assert body["podrollDiscovery"]["added"] == 1
    assert "Discovered 1 additional podroll feeds" in body["message"]

    friend = registry.find_by_url(FRIEND)
    assert friend.priority.value == "extended"
    assert friend.source.value == "podroll"
    assert friend.discovered_from == ALBUM


def test_add_feed_survives_failed_crawl(client, fake_parser, registry) -> None:
    response = client.post("/api/admin/feeds", json={"url": ALBUM})

    assert response.status_code == 200
    assert response.json()["podrollDiscovery"]["errors"] == 1
    assert [f.original_url for f in registry.get_all()] == [ALBUM]


def test_add_publisher_skips_discovery(client, fake_parser) -> None:
    response = client.post("/api/admin/feeds", json={"url": ALBUM, "type": "publisher"})

    assert response.status_code == 200
    assert response.json()["podrollDiscovery"] is None
    assert fake_parser.calls == []


def test_add_feed_validation(client) -> None:
    assert client.post("/api/admin/feeds", json={}).status_code == 400
    assert client.post("/api/admin/feeds", json={"url": "nope"}).status_code == 400
    response = client.post("/api/admin/feeds", json={"url": ALBUM, "type": "podcast"})
    assert response.status_code == 400


def test_add_duplicate_feed(client, registry) -> None:
    registry.add(ALBUM)

    response = client.post(
        "/api/admin/feeds", json={"url": ALBUM + "/", "discoverPodroll": False}
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Feed already exists"


def test_list_update_and_delete(client, registry) -> None:
    feed = registry.add(ALBUM).feed

    listed = client.get("/api/admin/feeds").json()
    assert listed["count"] == 1
    assert listed["feeds"][0]["id"] == feed.id

    patched = client.patch(f"/api/admin/feeds/{feed.id}", json={"status": "inactive"})
    assert patched.status_code == 200
    assert patched.json()["feed"]["status"] == "inactive"
    assert patched.json()["feed"]["title"] == feed.title

    assert client.delete(f"/api/admin/feeds/{feed.id}").status_code == 204
    assert registry.get_all() == []


def test_update_and_delete_unknown_feed(client) -> None:
    assert client.patch("/api/admin/feeds/missing", json={"title": "x"}).status_code == 404
    assert client.delete("/api/admin/feeds/missing").status_code == 404


def test_update_rejects_unknown_priority(client, registry) -> None:
    feed = registry.add(ALBUM).feed

    response = client.patch(f"/api/admin/feeds/{feed.id}", json={"priority": "urgent"})

    assert response.status_code == 422
