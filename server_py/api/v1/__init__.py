"""API v1 routers."""

from . import story_tests
from . import webhook

__all__ = [
    "story_tests",
    "webhook",
]
