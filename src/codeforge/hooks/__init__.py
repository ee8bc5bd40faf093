"""Post-run hooks."""

from .base import NullHook, PublishHook
from .git import GitPublishHook

__all__ = ["GitPublishHook", "NullHook", "PublishHook"]
