"""
Main orchestration class for the podcast feed service.
"""

import logging
import time
from typing import Any, Dict

from .config import PodcastConfig
from .feed import FeedGenerator
from .repository import PodcastRepository
from .store import PodcastStore
from .utils import now_iso


class PodcastManager:
    """
    Owns the startup routine and health reporting, and hands callers the
    repository for show-info and episode operations.
    """

    def __init__(
        self,
        config: PodcastConfig,
        store: PodcastStore,
        generator: FeedGenerator,
        repository: PodcastRepository,
    ):
        """Initialize with dependencies."""
        self.logger = logging.getLogger(__name__)
        self.config = config
        self.store = store
        self.generator = generator
        self.repository = repository
        self._started_at = time.monotonic()

    def start(self) -> bool:
        """Initialize the data file and render the feed once.

        Returns whether the feed was published.
        """
        self.store.initialize()
        published = self.generator.publish(self.store.load())
        self.logger.info(
            "Podcast feed ready: data=%s feed=%s",
            self.config.data_file,
            self.config.feed_file,
        )
        return published

    def render(self) -> bool:
        """Regenerate the feed from the stored document."""
        return self.generator.publish(self.store.load())

    def health(self) -> Dict[str, Any]:
        """Service status summary."""
        document = self.store.load()
        return {
            "status": "healthy",
            "timestamp": now_iso(),
            "dataFile": self.config.data_file,
            "episodeCount": len(document.episodes),
            "lastModified": document.metadata.last_modified,
            "uptime": round(time.monotonic() - self._started_at, 3),
            "feedFile": self.config.feed_file,
            "feedExists": self.store.storage.file_exists(
                self.config.feed_file
            ),
        }
