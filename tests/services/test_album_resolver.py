import pytest

from feedverse.models.feed import FeedKind, FeedStatus, FeedUpdate
from feedverse.services.album_resolver import (
    MATCH_BASE_TITLE,
    MATCH_COMPAT,
    MATCH_ID,
    MATCH_SLUG,
    MATCH_TITLE,
    AlbumResolver,
    match_album_title,
)
from tests._feed_helpers import make_album

A = "https://music.example.com/a.xml"
B = "https://music.example.com/b.xml"


@pytest.mark.parametrize(
    ("title", "external_id", "expected"),
    [
        ("Stay Awhile", "stay awhile", MATCH_TITLE),
        ("Stay Awhile!", "stay-awhile", MATCH_SLUG),
        ("Stay Awhile!", "stay-awhile!", MATCH_COMPAT),
        ("Song - Live Version", "song", MATCH_BASE_TITLE),
        ("Song - Live Version", "other", None),
        ("", "anything", None),
    ],
)
def test_match_album_title(title, external_id, expected) -> None:
    assert match_album_title(title, external_id) == expected


@pytest.mark.asyncio
async def test_direct_id_match_skips_parsing(registry, fake_parser) -> None:
    feed = registry.add(A).feed
    resolver = AlbumResolver(registry, fake_parser)

    resolved = await resolver.resolve(feed.id)

    assert resolved.feed.id == feed.id
    assert resolved.match == MATCH_ID
    assert fake_parser.calls == []


@pytest.mark.asyncio
async def test_resolves_base_title(registry, fake_parser) -> None:
    registry.add(A)
    registry.add(B)
    fake_parser.results.update(
        {A: make_album("Something Else"), B: make_album("Song - Live Version")}
    )

    resolved = await AlbumResolver(registry, fake_parser).resolve("song")

    assert resolved.feed.original_url == B
    assert resolved.match == MATCH_BASE_TITLE
    assert resolved.album.title == "Song - Live Version"


@pytest.mark.asyncio
async def test_first_match_in_registry_order_wins(registry, fake_parser) -> None:
    registry.add(A)
    registry.add(B)
    fake_parser.results.update({A: make_album("Twin"), B: make_album("Twin")})

    resolved = await AlbumResolver(registry, fake_parser).resolve("twin")

    assert resolved.feed.original_url == A
    assert fake_parser.calls == [A]


@pytest.mark.asyncio
async def test_parse_failures_are_skipped(registry, fake_parser) -> None:
    registry.add(A)
    registry.add(B)
    fake_parser.results.update({A: RuntimeError("timeout"), B: make_album("Stay Awhile")})

    resolved = await AlbumResolver(registry, fake_parser).resolve("stay-awhile")

    assert resolved.feed.original_url == B
    assert resolved.match == MATCH_SLUG


@pytest.mark.asyncio
async def test_url_encoded_identifier_is_decoded(registry, fake_parser) -> None:
    registry.add(A)
    fake_parser.results[A] = make_album("Stay Awhile")

    resolved = await AlbumResolver(registry, fake_parser).resolve("Stay%20Awhile")

    assert resolved.match == MATCH_TITLE


@pytest.mark.asyncio
async def test_inactive_album_resolves_by_id_only(registry, fake_parser) -> None:
    album = registry.add(A).feed
    registry.update(album.id, FeedUpdate(status=FeedStatus.INACTIVE))
    fake_parser.results[A] = make_album("Stay Awhile")
    resolver = AlbumResolver(registry, fake_parser)

    resolved = await resolver.resolve(album.id)

    assert resolved.feed.id == album.id
    assert resolved.match == MATCH_ID
    assert await resolver.resolve("stay awhile") is None
    assert fake_parser.calls == []


@pytest.mark.asyncio
async def test_publisher_feeds_are_not_candidates(registry, fake_parser) -> None:
    publisher = registry.add(B, FeedKind.PUBLISHER).feed

    assert await AlbumResolver(registry, fake_parser).resolve(publisher.id) is None
    assert fake_parser.calls == []


@pytest.mark.asyncio
async def test_unmatched_identifier_returns_none(registry, fake_parser) -> None:
    registry.add(A)
    fake_parser.results[A] = make_album("Stay Awhile")

    assert await AlbumResolver(registry, fake_parser).resolve("nothing-like-it") is None
    assert await AlbumResolver(registry, fake_parser).resolve("   ") is None


@pytest.mark.asyncio
async def test_load_album_reuses_scanned_album(registry, fake_parser) -> None:
    feed = registry.add(A).feed
    fake_parser.results[A] = make_album("Stay Awhile")
    resolver = AlbumResolver(registry, fake_parser)

    by_title = await resolver.resolve("stay awhile")
    await resolver.load_album(by_title)
    assert fake_parser.calls == [A]

    by_id = await resolver.resolve(feed.id)
    album = await resolver.load_album(by_id)
    assert album.title == "Stay Awhile"
    assert fake_parser.calls == [A, A]
