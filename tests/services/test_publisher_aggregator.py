import pytest

from feedverse.services.publisher_aggregator import (
    aggregate_publishers,
    collect_registry_albums,
    find_publisher,
)
from tests._feed_helpers import make_album


def test_latest_album_is_last_seen() -> None:
    albums = [
        make_album("A", artist="Band", publisher_guid="guid-1", cover_art="a.jpg", release_date="2024"),
        make_album("B", artist="Band", publisher_guid="guid-1", cover_art="b.jpg", release_date="2020"),
    ]

    [publisher] = aggregate_publishers(albums)

    assert publisher.album_count == 2
    assert publisher.albums == ["A", "B"]
    assert publisher.first_album_cover == "a.jpg"
    assert publisher.latest_album.title == "B"
    assert publisher.latest_album.release_date == "2020"
    assert publisher.name == "Band"


def test_sorted_by_album_count_with_stable_ties() -> None:
    albums = [
        make_album("Solo", publisher_guid="one"),
        make_album("First", publisher_guid="two"),
        make_album("Loose"),
        make_album("Second", publisher_guid="two"),
        make_album("Other", publisher_guid="three"),
    ]

    publishers = aggregate_publishers(albums)

    assert [p.feed_guid for p in publishers] == ["two", "one", "three"]
    assert sum(p.album_count for p in publishers) == 4


def test_empty_input() -> None:
    assert aggregate_publishers([]) == []


def test_find_publisher_by_guid_or_name_slug() -> None:
    publishers = aggregate_publishers(
        [make_album("A", artist="The Doerfels", publisher_guid="ABC-123")]
    )

    assert find_publisher(publishers, "abc-123") is publishers[0]
    assert find_publisher(publishers, "the-doerfels") is publishers[0]
    assert find_publisher(publishers, "missing") is None


@pytest.mark.asyncio
async def test_collect_registry_albums_skips_failures(registry, fake_parser) -> None:
    registry.add("https://example.com/a.xml")
    registry.add("https://example.com/b.xml")
    registry.add("https://example.com/c.xml")
    fake_parser.results.update(
        {
            "https://example.com/a.xml": make_album("A", publisher_guid="g"),
            "https://example.com/b.xml": None,
        }
    )

    albums = await collect_registry_albums(registry, fake_parser)

    assert [album.title for album in albums] == ["A"]
    assert len(fake_parser.calls) == 3
