"""
Podcast feed package - keeps a single podcast's show info and episodes in
one JSON document and renders them into an RSS feed with iTunes and
Podcasting 2.0 extensions.

The store persists the document, the repository applies episode and show
info changes, and the feed generator publishes the XML after every change.
"""

from .config import PodcastConfig
from .errors import (
    ConflictError,
    NotFoundError,
    PersistenceError,
    PodcastRSSError,
    RenderError,
    ValidationError,
)
from .factory import create_manager
from .feed import FeedGenerator
from .manager import PodcastManager
from .models import Episode, PodcastDocument, PodcastInfo
from .repository import PodcastRepository
from .store import PodcastStore

__all__ = [
    "ConflictError",
    "create_manager",
    "Episode",
    "FeedGenerator",
    "NotFoundError",
    "PersistenceError",
    "PodcastConfig",
    "PodcastDocument",
    "PodcastInfo",
    "PodcastManager",
    "PodcastRepository",
    "PodcastRSSError",
    "PodcastStore",
    "RenderError",
    "ValidationError",
]
