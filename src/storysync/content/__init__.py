"""Content source access for storysync."""

from .client import ContentSource, StoryblokClient, StoryId
from .models import ContentItem, ContentPage

__all__ = ["ContentSource", "StoryblokClient", "StoryId", "ContentItem", "ContentPage"]
