"""Configuration models describing storysync settings."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class SyncBaseModel(BaseModel):
    """Shared configuration for storysync Pydantic models."""

    model_config = ConfigDict(extra="forbid")


class StoryblokSettings(SyncBaseModel):
    """Content Delivery API options for the Storyblok space.

    Attributes:
        access_token: Delivery API token for the space.
        base_url: Root URL of the Content Delivery API.
        version: Story version to request (``published`` or ``draft``).
        per_page: Number of stories requested per page during a reindex.
        starts_with: Optional full-slug prefix restricting which stories are indexed.
        components: Root component names to include; empty means every component.
    """

    access_token: Optional[str] = None
    base_url: str = "https://api.storyblok.com/v2"
    version: str = "published"
    per_page: int = Field(default=100, ge=1, le=100)
    starts_with: str = ""
    components: List[str] = Field(default_factory=lambda: ["article", "page"])


class SolrSettings(SyncBaseModel):
    """Connection options for the Solr core receiving documents.

    Attributes:
        host: Hostname of the Solr server.
        port: Port of the Solr server; 443 selects HTTPS.
        path: Path segment in front of the core name.
        core: Name of the Solr core.
        user: Basic-auth username.
        password: Basic-auth password.
    """

    host: Optional[str] = None
    port: int = 8983
    path: str = "solr"
    core: Optional[str] = None
    user: str = ""
    password: str = ""


class HTTPSettings(SyncBaseModel):
    """Options shared by outgoing HTTP requests.

    Attributes:
        timeout_seconds: Timeout applied to every request.
    """

    timeout_seconds: float = Field(default=30.0, gt=0)


class LoggingSettings(SyncBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
    """

    level: str = "WARNING"


class SyncConfig(SyncBaseModel):
    """Top-level configuration struct for storysync.

    Attributes:
        storyblok: Content source settings.
        solr: Search engine settings.
        http: HTTP client settings.
        logging: Logging configuration.
    """

    storyblok: StoryblokSettings = Field(default_factory=StoryblokSettings)
    solr: SolrSettings = Field(default_factory=SolrSettings)
    http: HTTPSettings = Field(default_factory=HTTPSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


__all__ = [
    "SyncBaseModel",
    "StoryblokSettings",
    "SolrSettings",
    "HTTPSettings",
    "LoggingSettings",
    "SyncConfig",
]
