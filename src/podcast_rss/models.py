"""
Data models for the podcast document, its show info and its episodes.

Records read from JSON remember which keys they were read with and keep
any keys they do not model, so writing a document back reproduces what
was read apart from the values that were changed.
"""

from __future__ import annotations

import logging
from dataclasses import MISSING, Field, dataclass, field, fields
from typing import (
    Any,
    Dict,
    FrozenSet,
    List,
    Optional,
    Tuple,
    Type,
    TypeVar,
)

from .utils import now_iso, now_rfc2822, parse_pub_date

R = TypeVar("R", bound="Record")

DEFAULT_VERSION = "1.0.0"
DEFAULT_EPISODE_TYPE = "full"

logger = logging.getLogger(__name__)


def _split_fields(
    cls: type, data: Any
) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """Split data into the fields of cls and everything else."""
    if not isinstance(data, dict):
        return {}, {}
    names = {f.name for f in fields(cls)}
    known = {key: value for key, value in data.items() if key in names}
    extras = {key: value for key, value in data.items() if key not in names}
    return known, extras


def _known_fields(cls: type, data: Any) -> Dict[str, Any]:
    """Keep only the keys of data that are fields of cls."""
    known, extras = _split_fields(cls, data)
    if extras:
        logger.debug(
            "Ignoring unknown %s fields: %s", cls.__name__, sorted(extras)
        )
    return known


def _default_of(f: Field[Any]) -> Any:
    if f.default_factory is not MISSING:
        return f.default_factory()
    return f.default


class Record:
    """Record built from a JSON object."""

    _source_keys: Optional[FrozenSet[str]] = None
    _extras: Dict[str, Any] = {}

    @classmethod
    def from_dict(cls: Type[R], data: Any) -> R:
        """Create record from dictionary; non-dict input gives an empty one."""
        values, extras = _split_fields(cls, data)
        if extras:
            logger.debug(
                "Keeping unknown %s fields as-is: %s",
                cls.__name__,
                sorted(extras),
            )
        record = cls(**cls._convert(values))  # type: ignore[call-arg]
        record._source_keys = frozenset(values)
        record._extras = extras
        return record

    @classmethod
    def _convert(cls, values: Dict[str, Any]) -> Dict[str, Any]:
        return values

    def to_json(self) -> Dict[str, Any]:
        """Convert record to JSON-serializable dictionary.

        A field the source object did not have is written only once it
        holds something other than its default.
        """
        data: Dict[str, Any] = {}
        for f in fields(self):  # type: ignore[arg-type]
            value = getattr(self, f.name)
            if (
                self._source_keys is not None
                and f.name not in self._source_keys
                and value == _default_of(f)
            ):
                continue
            if isinstance(value, Record):
                value = value.to_json()
            data[f.name] = value
        data.update(self._extras)
        return data


@dataclass
class Owner(Record):
    """iTunes owner contact."""

    name: str = ""
    email: str = ""


@dataclass
class Categories(Record):
    """Primary and secondary iTunes category."""

    primary: str = ""
    secondary: str = ""


@dataclass
class Funding(Record):
    """Podcasting 2.0 funding link."""

    url: str = ""
    text: str = ""


@dataclass
class Audio(Record):
    """Audio enclosure of an episode."""

    url: str = ""
    type: str = ""
    length: str = ""


@dataclass
class Guid(Record):
    """Episode GUID; is_permalink is the string "true" or "false"."""

    value: str = ""
    is_permalink: str = "false"


@dataclass
class Transcript(Record):
    url: str = ""
    type: str = ""


@dataclass
class CallToAction(Record):
    text: str = ""
    url: str = ""


@dataclass
class UtmTags(Record):
    source: str = ""
    medium: str = ""
    campaign: str = ""


class NestedRecord(Record):
    """Record whose fields may themselves be records.

    Subclasses list those fields in ``NESTED``; a partial update replaces a
    nested record wholesale, never field by field.
    """

    NESTED: Dict[str, Type[Record]] = {}

    @classmethod
    def _convert(cls, values: Dict[str, Any]) -> Dict[str, Any]:
        for name, record_cls in cls.NESTED.items():
            if name in values:
                values[name] = record_cls.from_dict(values[name])
        return values

    def merged(self: R, partial: Dict[str, Any]) -> R:
        """Overwrite each known top-level field present in partial."""
        data = self.to_json()
        data.update(_known_fields(type(self), partial))
        return type(self).from_dict(data)


# pylint: disable=too-many-instance-attributes
@dataclass
class PodcastInfo(NestedRecord):
    """Channel-level metadata of the podcast.

    last_build_date is stamped by the repository on every mutation; a
    value supplied by a caller is always overwritten.
    """

    NESTED = {"owner": Owner, "categories": Categories, "funding": Funding}

    title: str = ""
    link: str = ""
    language: str = ""
    copyright: str = ""
    description: str = ""
    itunes_author: str = ""
    itunes_explicit: str = "false"
    owner: Owner = field(default_factory=Owner)
    itunes_image: str = ""
    categories: Categories = field(default_factory=Categories)
    last_build_date: str = ""
    itunes_type: str = "episodic"
    itunes_keywords: str = ""
    funding: Funding = field(default_factory=Funding)

    @property
    def feed_url(self) -> str:
        """Public URL of the generated feed."""
        return f"{self.link.rstrip('/')}/feed.xml"


@dataclass
class Episode(NestedRecord):  # pylint: disable=too-many-instance-attributes
    """Represents a single podcast episode, identified by guid.value."""

    NESTED = {
        "audio": Audio,
        "guid": Guid,
        "transcript": Transcript,
        "cta": CallToAction,
        "utm": UtmTags,
    }

    title: str = ""
    description: str = ""
    pub_date: str = ""
    audio: Audio = field(default_factory=Audio)
    guid: Guid = field(default_factory=Guid)
    season: str = ""
    episode_number: str = ""
    episode_type: str = DEFAULT_EPISODE_TYPE
    transcript: Transcript = field(default_factory=Transcript)
    subtitle: str = ""
    keywords: str = ""
    chapters_url: str = ""
    links_json: str = ""
    cta: CallToAction = field(default_factory=CallToAction)
    utm: UtmTags = field(default_factory=UtmTags)
    podcorn_ad: str = ""

    @property
    def guid_value(self) -> str:
        return self.guid.value

    @property
    def is_permalink(self) -> bool:
        """True only for the exact string "true"."""
        return self.guid.is_permalink == "true"


@dataclass
class DocumentMetadata:
    """Bookkeeping stamped by the store."""

    created: Optional[str] = None
    last_modified: str = ""
    version: str = DEFAULT_VERSION
    extras: Dict[str, Any] = field(
        default_factory=dict, repr=False, compare=False
    )

    @classmethod
    def from_dict(cls, data: Any) -> "DocumentMetadata":
        if not isinstance(data, dict):
            data = {}
        return cls(
            created=data.get("created"),
            last_modified=data.get("lastModified", ""),
            version=data.get("version", ""),
            extras={
                key: value
                for key, value in data.items()
                if key not in ("created", "lastModified", "version")
            },
        )

    def to_json(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if self.created is not None:
            data["created"] = self.created
        data["lastModified"] = self.last_modified
        data["version"] = self.version
        data.update(self.extras)
        return data


@dataclass
class PodcastDocument:
    """The single persisted aggregate: show info, episodes and metadata."""

    rss: PodcastInfo
    episodes: List[Episode] = field(default_factory=list)
    metadata: DocumentMetadata = field(default_factory=DocumentMetadata)
    extras: Dict[str, Any] = field(
        default_factory=dict, repr=False, compare=False
    )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PodcastDocument":
        """Create document from dictionary.

        Raises:
            ValueError: If the episodes collection is missing or not a list
        """
        episodes_data = data.get("episodes")
        if not isinstance(episodes_data, list):
            raise ValueError(
                "Invalid data structure: episodes array missing"
            )

        return cls(
            rss=PodcastInfo.from_dict(data.get("rss", {})),
            episodes=[Episode.from_dict(ep) for ep in episodes_data],
            metadata=DocumentMetadata.from_dict(data.get("metadata")),
            extras={
                key: value
                for key, value in data.items()
                if key not in ("rss", "episodes", "metadata")
            },
        )

    def to_json(self) -> Dict[str, Any]:
        """Convert document to JSON-serializable dictionary."""
        data: Dict[str, Any] = {
            "rss": self.rss.to_json(),
            "episodes": [episode.to_json() for episode in self.episodes],
            "metadata": self.metadata.to_json(),
        }
        data.update(self.extras)
        return data

    def find_episode_index(self, guid: str) -> int:
        """Index of the episode with this GUID value, or -1."""
        for index, episode in enumerate(self.episodes):
            if episode.guid_value == guid:
                return index
        return -1


def default_podcast_info() -> PodcastInfo:
    """Show info written on first run."""
    return PodcastInfo(
        title="My Podcast",
        link="https://example.com",
        language="en-us",
        copyright="© 2025 My Podcast",
        description="A great podcast about interesting topics",
        itunes_author="Podcast Author",
        itunes_explicit="false",
        owner=Owner(name="Podcast Owner", email="owner@example.com"),
        itunes_image="https://example.com/podcast-image.jpg",
        categories=Categories(primary="Technology", secondary="News"),
        last_build_date=now_rfc2822(),
        itunes_type="episodic",
        itunes_keywords="technology,news,podcast",
        funding=Funding(
            url="https://example.com/support", text="Support this podcast"
        ),
    )


def default_document() -> PodcastDocument:
    """Fresh document with default show info and no episodes."""
    stamp = now_iso()
    return PodcastDocument(
        rss=default_podcast_info(),
        episodes=[],
        metadata=DocumentMetadata(
            created=stamp, last_modified=stamp, version=DEFAULT_VERSION
        ),
    )


def sort_by_pub_date(episodes: List[Episode]) -> List[Episode]:
    """Episodes newest first; unparseable dates last, ties in stored order."""

    def sort_key(episode: Episode) -> tuple[int, float]:
        published = parse_pub_date(episode.pub_date)
        if published is None:
            return (1, 0.0)
        return (0, -published.timestamp())

    return sorted(episodes, key=sort_key)
