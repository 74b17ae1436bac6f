"""
RSS feed generation for the podcast document.

FeedGenerator renders the document into RSS 2.0 with iTunes and
Podcasting 2.0 extension elements and publishes the XML to disk for
serving. Rendering depends on nothing but the document.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

import feedparser
from lxml import etree

from .errors import RenderError
from .models import (
    DEFAULT_EPISODE_TYPE,
    Episode,
    PodcastDocument,
    PodcastInfo,
    sort_by_pub_date,
)
from .storage import Storage
from .utils import format_rfc2822

ATOM_NS = "http://www.w3.org/2005/Atom"
ITUNES_NS = "http://www.itunes.com/dtds/podcast-1.0.dtd"
PODCAST_NS = "https://podcastindex.org/namespace/1.0"
NSMAP = {"atom": ATOM_NS, "itunes": ITUNES_NS, "podcast": PODCAST_NS}

GENERATOR = "Podcast RSS Generator"
CHAPTERS_TYPE = "application/json+chapters"
DEFAULT_TRANSCRIPT_TYPE = "text/plain"

TextValue = Union[str, etree.CDATA]


def _text(value: Any) -> str:
    """XML text for a JSON scalar; booleans as "true"/"false"."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _cdata(value: Any) -> TextValue:
    """Wrap text in CDATA unless it is empty or cannot be wrapped."""
    text = _text(value)
    if not text or "]]>" in text:
        return text
    return etree.CDATA(text)


def _add(
    parent: etree._Element,
    tag: str,
    text: Optional[TextValue] = None,
    attrib: Optional[Dict[str, Any]] = None,
) -> etree._Element:
    element = etree.SubElement(
        parent,
        tag,
        {key: _text(value) for key, value in (attrib or {}).items()},
    )
    if text is not None:
        element.text = text
    return element


def _itunes(name: str) -> str:
    return f"{{{ITUNES_NS}}}{name}"


def _podcast(name: str) -> str:
    return f"{{{PODCAST_NS}}}{name}"


@dataclass
class FeedSummary:
    """What a published feed contains, as read back by feedparser."""

    title: str
    item_count: int
    guids: List[str] = field(default_factory=list)
    well_formed: bool = True
    error: str = ""


class FeedGenerator:
    """Render and publish the podcast feed artifact."""

    def __init__(self, storage: Storage, feed_file: str):
        """Initialize with storage instance and the artifact path."""
        self.logger = logging.getLogger(__name__)
        self.storage = storage
        self.feed_file = feed_file

    def render(self, document: PodcastDocument) -> bytes:
        """Render the document to indented RSS XML bytes."""
        rss = etree.Element("rss", nsmap=NSMAP, version="2.0")
        channel = etree.SubElement(rss, "channel")

        self._add_channel(channel, document.rss)
        for episode in sort_by_pub_date(document.episodes):
            self._add_item(channel, episode)

        return etree.tostring(
            rss, encoding="UTF-8", xml_declaration=True, pretty_print=True
        )

    def write(self, document: PodcastDocument) -> None:
        """Render and atomically replace the feed artifact.

        Raises:
            RenderError: If rendering or writing fails
        """
        try:
            xml = self.render(document)
            self.storage.write_bytes_atomic(self.feed_file, xml)
        except (OSError, ValueError, TypeError, OverflowError) as e:
            raise RenderError(
                f"Cannot generate feed {self.feed_file}: {e}"
            ) from e

        self.logger.info(
            "Generated feed %s with %d episodes",
            self.feed_file,
            len(document.episodes),
        )

    def publish(self, document: PodcastDocument) -> bool:
        """Write the artifact; return False instead of raising on failure."""
        try:
            self.write(document)
        except RenderError as e:
            self.logger.error("Error generating podcast RSS feed: %s", e)
            return False
        return True

    def _add_channel(
        self, channel: etree._Element, info: PodcastInfo
    ) -> None:
        _add(channel, "title", _text(info.title))
        _add(channel, "description", _cdata(info.description))
        _add(channel, "link", _text(info.link))
        _add(channel, "generator", GENERATOR)
        _add(channel, "lastBuildDate", _text(info.last_build_date))
        _add(
            channel,
            f"{{{ATOM_NS}}}link",
            attrib={
                "href": info.feed_url,
                "rel": "self",
                "type": "application/rss+xml",
            },
        )
        _add(channel, "copyright", _text(info.copyright))
        _add(channel, "language", _text(info.language))
        _add(channel, "pubDate", _text(info.last_build_date))

        _add(channel, _itunes("author"), _text(info.itunes_author))
        _add(channel, _itunes("explicit"), _text(info.itunes_explicit))
        owner = _add(channel, _itunes("owner"))
        _add(owner, _itunes("name"), _text(info.owner.name))
        _add(owner, _itunes("email"), _text(info.owner.email))
        _add(channel, _itunes("image"), attrib={"href": info.itunes_image})
        _add(
            channel,
            _itunes("category"),
            attrib={"text": info.categories.primary},
        )
        _add(channel, _itunes("type"), _text(info.itunes_type))
        _add(channel, _itunes("keywords"), _text(info.itunes_keywords))
        _add(
            channel,
            _podcast("funding"),
            _cdata(info.funding.text),
            attrib={"url": info.funding.url},
        )

    def _add_item(self, channel: etree._Element, episode: Episode) -> None:
        item = etree.SubElement(channel, "item")
        _add(item, "title", _text(episode.title))
        _add(item, "description", _cdata(episode.description))
        _add(item, "link", _text(episode.audio.url))
        _add(
            item,
            "guid",
            _text(episode.guid_value),
            attrib={
                "isPermaLink": "true" if episode.is_permalink else "false"
            },
        )
        _add(item, "pubDate", format_rfc2822(episode.pub_date))
        _add(
            item,
            "enclosure",
            attrib={
                "url": episode.audio.url,
                "length": episode.audio.length,
                "type": episode.audio.type,
            },
        )

        # Always present, possibly empty
        _add(item, _itunes("subtitle"), _text(episode.subtitle))
        _add(item, _itunes("keywords"), _text(episode.keywords))
        _add(item, _itunes("season"), _text(episode.season))
        _add(item, _itunes("episode"), _text(episode.episode_number))
        _add(
            item,
            _itunes("episodeType"),
            _text(episode.episode_type or DEFAULT_EPISODE_TYPE),
        )

        if episode.transcript.url:
            _add(
                item,
                _podcast("transcript"),
                attrib={
                    "url": episode.transcript.url,
                    "type": episode.transcript.type
                    or DEFAULT_TRANSCRIPT_TYPE,
                },
            )

        if episode.chapters_url:
            _add(
                item,
                _podcast("chapters"),
                attrib={"url": episode.chapters_url, "type": CHAPTERS_TYPE},
            )


def inspect_feed(
    feed_file: str, storage: Optional[Storage] = None
) -> FeedSummary:
    """Read a published feed back with feedparser.

    Raises:
        RenderError: If the artifact is missing or unreadable
    """
    storage = storage or Storage()
    if not storage.file_exists(feed_file):
        raise RenderError(f"RSS feed not found: {feed_file}")

    try:
        content = storage.read_bytes(feed_file)
    except OSError as e:
        raise RenderError(f"Cannot read feed {feed_file}: {e}") from e

    parsed = feedparser.parse(content)
    error = ""
    if parsed.bozo:
        error = str(parsed.get("bozo_exception", "malformed feed"))

    return FeedSummary(
        title=parsed.feed.get("title", ""),
        item_count=len(parsed.entries),
        guids=[entry.get("id", "") for entry in parsed.entries],
        well_formed=not parsed.bozo,
        error=error,
    )
