from dotenv import load_dotenv
from typing import Any, Dict, Optional
import os

from pydantic import BaseModel, Field

from healthcrawler.constants import (
    DEFAULT_MAX_DEPTH,
    DEFAULT_MAX_PAGES,
    DEFAULT_TIMEOUT_MS,
    DEFAULT_USER_AGENT,
    MAX_RESOURCES_PER_CATEGORY,
    ROBOTS_TXT_TIMEOUT_SECONDS,
)

load_dotenv()  # Loads variables from .env file


class Settings:
    """
    Manages application settings loaded from environment variables.
    """
    USER_AGENT = os.getenv("HEALTHCRAWLER_USER_AGENT", DEFAULT_USER_AGENT)
    OUTPUT_DIR = os.getenv("HEALTHCRAWLER_OUTPUT_DIR", "data/crawls")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    HEADLESS = os.getenv("HEADLESS", "true").lower() != "false"


settings = Settings()


# API field names accepted by CrawlConfig.from_options
_OPTION_ALIASES = {
    "maxDepth": "max_depth",
    "maxPages": "max_pages",
    "timeoutMs": "timeout_ms",
    "timeout": "timeout_ms",
    "respectRobotsTxt": "respect_robots_txt",
    "respectRobots": "respect_robots_txt",
    "screenshotEnabled": "screenshot_enabled",
    "userAgent": "user_agent",
}


class CrawlConfig(BaseModel):
    """
    Configuration for a single crawl job.

    Instances are frozen: once a crawl starts its configuration cannot change.
    """

    max_depth: int = Field(
        default=DEFAULT_MAX_DEPTH,
        description="Maximum link depth from the seed URL (seed is depth 0)",
        ge=0
    )

    max_pages: int = Field(
        default=DEFAULT_MAX_PAGES,
        description="Maximum number of pages to visit",
        ge=1
    )

    timeout_ms: int = Field(
        default=DEFAULT_TIMEOUT_MS,
        description="Page navigation timeout in milliseconds",
        ge=1000,
        le=300000
    )

    respect_robots_txt: bool = Field(
        default=True,
        description="Skip URLs disallowed by the seed domain's robots.txt"
    )

    user_agent: str = Field(
        default_factory=lambda: settings.USER_AGENT,
        description="User agent sent by the browser and the robots.txt fetch"
    )

    screenshot_enabled: bool = Field(
        default=True,
        description="Capture a viewport screenshot of each crawled page"
    )

    headless: bool = Field(
        default_factory=lambda: settings.HEADLESS,
        description="Run browser in headless mode (no visible UI)"
    )

    viewport_width: int = Field(default=1920, ge=320)
    viewport_height: int = Field(default=1080, ge=240)

    robots_timeout: float = Field(
        default=ROBOTS_TXT_TIMEOUT_SECONDS,
        description="Timeout in seconds for the robots.txt fetch",
        gt=0
    )

    max_resources: int = Field(
        default=MAX_RESOURCES_PER_CATEGORY,
        description="Cap on stylesheets, scripts and images kept per page",
        ge=1
    )

    class Config:
        """Pydantic model configuration."""
        frozen = True

    @classmethod
    def from_options(cls, options: Optional[Dict[str, Any]] = None) -> "CrawlConfig":
        """Build a config from API-style options.

        Accepts both the camelCase names used by the API layer
        (``maxDepth``, ``respectRobotsTxt``, ...) and the field names.
        Options set to None fall back to the defaults.

        Args:
            options: Mapping of option names to values

        Returns:
            Validated CrawlConfig
        """
        values = {}
        for key, value in (options or {}).items():
            if value is None:
                continue
            name = _OPTION_ALIASES.get(key, key)
            if name in cls.model_fields:
                values[name] = value
        return cls(**values)

    def snapshot(self) -> Dict[str, Any]:
        """Config fields echoed back in the crawl report."""
        return {
            "maxDepth": self.max_depth,
            "maxPages": self.max_pages,
            "respectRobotsTxt": self.respect_robots_txt,
            "timeoutMs": self.timeout_ms,
            "screenshotEnabled": self.screenshot_enabled,
        }
