"""
Path configuration for the podcast store and the published feed.
"""

import os
from dataclasses import dataclass
from typing import Optional

from .errors import ConfigError


@dataclass
class PodcastConfig:
    """Where the podcast document lives and where the feed is published."""

    DATA_FILE_NAME = "podcast-data.json"
    FEED_FILE_NAME = "feed.xml"

    data_dir: str = "./data"
    data_file: str = ""
    public_dir: str = "./public"
    feed_file: str = ""

    def __post_init__(self) -> None:
        if not self.data_file and self.data_dir:
            self.data_file = os.path.join(self.data_dir, self.DATA_FILE_NAME)
        if not self.feed_file and self.public_dir:
            self.feed_file = os.path.join(self.public_dir, self.FEED_FILE_NAME)

    def validate(self) -> None:
        """
        Validate required configuration fields.

        Raises:
            ConfigError: If a required path is empty
        """
        if not self.data_dir:
            raise ConfigError("data_dir is required")

        if not self.data_file:
            raise ConfigError("data_file is required")

        if not self.public_dir:
            raise ConfigError("public_dir is required")

        if not self.feed_file:
            raise ConfigError("feed_file is required")

    @classmethod
    def from_environment(
        cls, base_dir: Optional[str] = None
    ) -> "PodcastConfig":
        """Load configuration from environment variables.

        Relative defaults are resolved against ``base_dir`` when given.
        """
        root = base_dir or "."
        config = cls(
            data_dir=os.getenv(
                "PODCAST_DATA_DIRECTORY", os.path.join(root, "data")
            ),
            data_file=os.getenv("PODCAST_DATA_FILE", ""),
            public_dir=os.getenv(
                "PODCAST_PUBLIC_DIRECTORY", os.path.join(root, "public")
            ),
        )
        config.validate()
        return config
