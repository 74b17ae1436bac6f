"""
Test data helpers.
"""

from typing import Any, Dict


def create_test_episode(**overrides: Any) -> Dict[str, Any]:
    """Minimal valid episode input, with any field overridden."""
    data: Dict[str, Any] = {
        "title": "Test Episode",
        "description": "A test episode",
        "audio": {"url": "http://test.com/test.mp3"},
    }
    data.update(overrides)
    return data
