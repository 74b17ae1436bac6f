"""
Domain-specific repository for podcast show info and episodes.

Every operation reloads the document through the store; mutations save it
back and then regenerate the feed from the saved state.
"""

import logging
import threading
import uuid
from typing import Any, Dict, List

from .errors import (
    ConflictError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from .feed import FeedGenerator
from .models import (
    DEFAULT_EPISODE_TYPE,
    Audio,
    CallToAction,
    Episode,
    Guid,
    PodcastDocument,
    PodcastInfo,
    Transcript,
    UtmTags,
    sort_by_pub_date,
)
from .store import PodcastStore
from .utils import now_rfc2822, or_default

DEFAULT_AUDIO_TYPE = "audio/mpeg"
DEFAULT_AUDIO_LENGTH = "0"


class PodcastRepository:
    """Repository for podcast show info and episode operations.

    Mutations hold a process-local lock from load to publish, so two
    callers in the same process cannot interleave a read-modify-write.
    Writers in other processes are not coordinated: last writer wins.
    """

    def __init__(self, store: PodcastStore, generator: FeedGenerator):
        """Initialize with store and feed generator."""
        self.logger = logging.getLogger(__name__)
        self.store = store
        self.generator = generator
        self._write_lock = threading.RLock()

    def get_rss_info(self) -> PodcastInfo:
        """Current show info."""
        return self.store.load().rss

    def update_rss_info(self, partial: Dict[str, Any]) -> PodcastInfo:
        """Shallow-merge partial over the show info and persist it."""
        if not isinstance(partial, dict):
            raise ValidationError("RSS info update must be an object")

        with self._write_lock:
            document = self.store.load()
            document.rss = document.rss.merged(partial)
            self._commit(document, "update RSS feed info")

        self.logger.info("Updated RSS feed info")
        return document.rss

    def list_episodes(self) -> List[Episode]:
        """All episodes, most recently published first."""
        return sort_by_pub_date(self.store.load().episodes)

    def create_episode(self, data: Dict[str, Any]) -> Episode:
        """Validate, default-fill and store a new episode.

        Raises:
            ValidationError: If title, description or audio.url is missing
            ConflictError: If the supplied GUID value is already taken
            PersistenceError: If the document could not be saved
        """
        self._validate_new_episode(data)

        with self._write_lock:
            document = self.store.load()

            supplied_guid = data.get("guid")
            if isinstance(supplied_guid, dict) and supplied_guid.get("value"):
                guid_value = supplied_guid["value"]
                if document.find_episode_index(guid_value) != -1:
                    raise ConflictError(
                        "An episode with this GUID already exists: "
                        f"{guid_value}"
                    )

            episode = self._build_episode(data)
            document.episodes.insert(0, episode)
            self._commit(document, "save episode")

        self.logger.info(
            "Added episode '%s' (%s)", episode.title, episode.guid_value
        )
        return episode

    def get_episode(self, guid: str) -> Episode:
        """Episode with this GUID value.

        Raises:
            NotFoundError: If no episode has that GUID
        """
        document = self.store.load()
        index = self._require_index(document, guid)
        return document.episodes[index]

    def update_episode(self, guid: str, partial: Dict[str, Any]) -> Episode:
        """Shallow-merge partial over the stored episode.

        Top-level fields present in partial replace the stored ones;
        nested objects such as audio or guid are replaced as a whole.

        Raises:
            NotFoundError: If no episode has that GUID
            ConflictError: If partial moves the episode onto a taken GUID
            PersistenceError: If the document could not be saved
        """
        if not isinstance(partial, dict):
            raise ValidationError("Episode update must be an object")

        with self._write_lock:
            document = self.store.load()
            index = self._require_index(document, guid)

            updated = document.episodes[index].merged(partial)
            if (
                updated.guid_value != guid
                and document.find_episode_index(updated.guid_value) != -1
            ):
                raise ConflictError(
                    "An episode with this GUID already exists: "
                    f"{updated.guid_value}"
                )

            document.episodes[index] = updated
            self._commit(document, "update episode")

        self.logger.info("Updated episode %s", guid)
        return updated

    def delete_episode(self, guid: str) -> Episode:
        """Remove and return the episode with this GUID value.

        Raises:
            NotFoundError: If no episode has that GUID
            PersistenceError: If the document could not be saved
        """
        with self._write_lock:
            document = self.store.load()
            index = self._require_index(document, guid)
            removed = document.episodes.pop(index)
            self._commit(document, "delete episode")

        self.logger.info("Deleted episode %s", guid)
        return removed

    def _commit(self, document: PodcastDocument, action: str) -> None:
        """Stamp, save, then regenerate the feed if the save succeeded."""
        document.rss.last_build_date = now_rfc2822()

        if not self.store.save(document):
            raise PersistenceError(f"Failed to {action}")

        if not self.generator.publish(document):
            self.logger.warning(
                "Saved changes but the published feed is now stale"
            )

    def _require_index(self, document: PodcastDocument, guid: str) -> int:
        index = document.find_episode_index(guid)
        if index == -1:
            raise NotFoundError(f"Episode not found: {guid}")
        return index

    def _validate_new_episode(self, data: Any) -> None:
        if not isinstance(data, dict):
            raise ValidationError("Episode must be an object")

        audio = data.get("audio")
        if (
            not data.get("title")
            or not data.get("description")
            or not isinstance(audio, dict)
            or not audio.get("url")
        ):
            raise ValidationError(
                "Title, description, and audio URL are required"
            )

    def _build_episode(self, data: Dict[str, Any]) -> Episode:
        """New episode from validated input with every default applied."""
        audio = data["audio"]
        guid = data.get("guid")
        if not isinstance(guid, dict):
            guid = {}

        return Episode(
            title=data["title"],
            description=data["description"],
            pub_date=or_default(data.get("pub_date"), now_rfc2822()),
            audio=Audio(
                url=audio["url"],
                type=or_default(audio.get("type"), DEFAULT_AUDIO_TYPE),
                length=or_default(audio.get("length"), DEFAULT_AUDIO_LENGTH),
            ),
            guid=Guid(
                value=or_default(guid.get("value"), str(uuid.uuid4())),
                is_permalink=or_default(guid.get("is_permalink"), "false"),
            ),
            season=or_default(data.get("season"), ""),
            episode_number=or_default(data.get("episode_number"), ""),
            episode_type=or_default(
                data.get("episode_type"), DEFAULT_EPISODE_TYPE
            ),
            transcript=Transcript.from_dict(data.get("transcript")),
            subtitle=or_default(data.get("subtitle"), ""),
            keywords=or_default(data.get("keywords"), ""),
            chapters_url=or_default(data.get("chapters_url"), ""),
            links_json=or_default(data.get("links_json"), ""),
            cta=CallToAction.from_dict(data.get("cta")),
            utm=UtmTags.from_dict(data.get("utm")),
            podcorn_ad=or_default(data.get("podcorn_ad"), ""),
        )
