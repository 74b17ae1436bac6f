"""
Factory functions for creating PodcastManager instances.

This module provides simple factory functions that wire up dependencies
clearly.
"""

import logging
from typing import Optional

from .config import PodcastConfig
from .feed import FeedGenerator
from .manager import PodcastManager
from .repository import PodcastRepository
from .storage import Storage
from .store import PodcastStore


def _create_dependencies(
    config: PodcastConfig,
) -> tuple[PodcastStore, FeedGenerator, PodcastRepository]:
    """Create shared dependencies for PodcastManager."""
    storage = Storage(config.data_dir)
    store = PodcastStore(storage, config.data_file)
    generator = FeedGenerator(storage, config.feed_file)
    repository = PodcastRepository(store, generator)
    return store, generator, repository


def create_manager(config: Optional[PodcastConfig] = None) -> PodcastManager:
    """Create PodcastManager from config, or from the environment."""
    logger = logging.getLogger(__name__)
    if config is None:
        config = PodcastConfig.from_environment()
    else:
        config.validate()

    store, generator, repository = _create_dependencies(config)
    manager = PodcastManager(config, store, generator, repository)
    logger.debug(
        "Created PodcastManager for %s (feed %s)",
        config.data_file,
        config.feed_file,
    )
    return manager
