"""Tests for the Podcasting-2.0 album parser."""

from types import SimpleNamespace

import httpx
import pytest

from feedverse.services.feed_parser import FeedParseError, PodcastFeedParser, parse_album_xml
from feedverse.services.http import NonRetryableError, categorize_http_error

ALBUM_XML = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0"
     xmlns:itunes="http://www.itunes.com/dtds/podcast-1.0.dtd"
     xmlns:podcast="https://podcastindex.org/namespace/1.0">
  <channel>
    <title>Stay Awhile</title>
    <itunes:author>The Doerfels</itunes:author>
    <description>Family band album</description>
    <itunes:image href="https://cdn.example.com/cover.jpg"/>
    <pubDate>Tue, 01 Oct 2024 12:00:00 GMT</pubDate>
    <podcast:guid>6fe2a1c6-0000-4d1c-9bc3-000000000001</podcast:guid>
    <podcast:medium>music</podcast:medium>
    <podcast:funding url="https://support.example.com">Support the band</podcast:funding>
    <podcast:podroll>
      <podcast:remoteItem feedGuid="aaaaaaaa-1111" feedUrl="https://music.example.com/friend.xml"/>
      <podcast:remoteItem feedGuid="bbbbbbbb-2222"/>
    </podcast:podroll>
    <podcast:publisher>
      <podcast:remoteItem medium="publisher" feedGuid="pub-guid-1" feedUrl="https://music.example.com/publisher.xml"/>
    </podcast:publisher>
    <item>
      <title>Opening</title>
      <itunes:duration>3:45</itunes:duration>
      <itunes:episode>1</itunes:episode>
      <enclosure url="https://cdn.example.com/opening.mp3" type="audio/mpeg" length="1"/>
    </item>
    <item>
      <title>Closing</title>
      <enclosure url="https://cdn.example.com/closing.mp3" type="audio/mpeg" length="1"/>
    </item>
  </channel>
</rss>
"""


def test_parse_album_xml_reads_channel_and_tracks() -> None:
    album = parse_album_xml(ALBUM_XML, feed_url="https://music.example.com/album.xml")

    assert album.title == "Stay Awhile"
    assert album.artist == "The Doerfels"
    assert album.cover_art == "https://cdn.example.com/cover.jpg"
    assert album.feed_url == "https://music.example.com/album.xml"
    assert album.feed_guid == "6fe2a1c6-0000-4d1c-9bc3-000000000001"
    assert [t.title for t in album.tracks] == ["Opening", "Closing"]
    assert album.tracks[0].url == "https://cdn.example.com/opening.mp3"
    assert album.tracks[0].duration == "3:45"
    assert album.tracks[1].track_number == 2


def test_podroll_skips_remote_items_without_url() -> None:
    album = parse_album_xml(ALBUM_XML)

    assert len(album.podroll) == 1
    item = album.podroll[0]
    assert item.url == "https://music.example.com/friend.xml"
    assert item.feed_guid == "aaaaaaaa-1111"
    assert item.title == "Feed aaaaaaaa..."


def test_publisher_and_funding() -> None:
    album = parse_album_xml(ALBUM_XML)

    assert album.publisher.feed_guid == "pub-guid-1"
    assert album.publisher.feed_url == "https://music.example.com/publisher.xml"
    assert album.publisher.medium == "publisher"
    assert album.funding[0].url == "https://support.example.com"
    assert album.funding[0].message == "Support the band"


def test_feed_without_podcast_tags() -> None:
    xml = """<rss version="2.0"><channel><title>Plain</title>
    <item><title>Only</title></item></channel></rss>"""

    album = parse_album_xml(xml)

    assert album.title == "Plain"
    assert album.podroll == []
    assert album.publisher is None
    assert album.funding == []


def test_empty_channel_has_no_album() -> None:
    assert parse_album_xml('<rss version="2.0"><channel></channel></rss>') is None


def test_non_feed_document_raises() -> None:
    with pytest.raises(FeedParseError):
        parse_album_xml("this is not a feed at all")


@pytest.mark.asyncio
async def test_podcast_feed_parser_uses_http_service() -> None:
    fetched = []

    async def fetch_text(url):
        fetched.append(url)
        return ALBUM_XML

    parser = PodcastFeedParser(SimpleNamespace(fetch_text=fetch_text))

    album = await parser.parse_album_feed("https://music.example.com/album.xml")

    assert fetched == ["https://music.example.com/album.xml"]
    assert album.feed_url == "https://music.example.com/album.xml"


def _status_error(status_code: int) -> httpx.HTTPStatusError:
    request = httpx.Request("GET", "https://music.example.com/album.xml")
    response = httpx.Response(status_code, request=request)
    return httpx.HTTPStatusError("error", request=request, response=response)


def test_categorize_http_error() -> None:
    server_error = _status_error(503)
    assert categorize_http_error(server_error) is server_error
    assert isinstance(categorize_http_error(_status_error(404)), NonRetryableError)
