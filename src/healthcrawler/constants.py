# src/healthcrawler/constants.py
"""Centralized constants for the crawler.

User-configurable values live on CrawlConfig in config.py; the numbers
here are their defaults and the fixed values the crawler never exposes.
"""

# =============================================================================
# Crawl Budget Defaults
# =============================================================================

DEFAULT_MAX_DEPTH = 5

DEFAULT_MAX_PAGES = 100

# Per-page navigation timeout (milliseconds)
DEFAULT_TIMEOUT_MS = 30000

DEFAULT_USER_AGENT = "HealthChecker-Bot/1.0 (https://healthchecker.app)"


# =============================================================================
# Robots.txt
# =============================================================================

ROBOTS_TXT_TIMEOUT_SECONDS = 5.0


# =============================================================================
# Browser
# =============================================================================

# Navigation is complete once the network has been idle for 500ms
NAVIGATION_WAIT_UNTIL = "networkidle"

BROWSER_LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
]

SCREENSHOT_JPEG_QUALITY = 60

# Characters of base64 payload kept in the screenshot reference
SCREENSHOT_REF_PREFIX_LENGTH = 100


# =============================================================================
# Extraction
# =============================================================================

MAX_RESOURCES_PER_CATEGORY = 50

HEADING_LEVELS = ("h1", "h2", "h3", "h4", "h5", "h6")

# Link schemes that never point at a crawlable page
NON_NAVIGABLE_SCHEMES = ("mailto:", "tel:", "javascript:", "data:", "ftp:")
