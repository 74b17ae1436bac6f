"""Custom exceptions for podcast-rss."""


class PodcastRSSError(Exception):
    """Base exception for all podcast-rss errors."""

    pass


class ConfigError(PodcastRSSError):
    """Configuration-related errors."""

    pass


class ValidationError(PodcastRSSError):
    """Required episode fields missing or malformed."""

    pass


class ConflictError(PodcastRSSError):
    """An episode with the same GUID already exists."""

    pass


class NotFoundError(PodcastRSSError):
    """No episode with the requested GUID."""

    pass


class PersistenceError(PodcastRSSError):
    """The podcast document could not be read or written."""

    pass


class RenderError(PodcastRSSError):
    """The feed artifact could not be rendered or written."""

    pass
