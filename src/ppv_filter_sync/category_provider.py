"""
Category provider module.

This module downloads the provider's category feed and selects the
pay-per-view categories that get automated filters.
"""

import json
import re
import logging
from datetime import date
from typing import Iterable, List, Optional, Sequence
from urllib.request import urlopen
from urllib.error import URLError
from http.client import HTTPException

from .config import Config
from .utils import SanitizedLogger


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = SanitizedLogger(logging.getLogger(__name__))


class ProviderError(Exception):
    """Raised when the category feed cannot be fetched or understood."""


class CategoryProvider:
    """
    Source of the category names that get automated filters.

    Implementations return the names in any order, possibly with duplicates,
    and raise ProviderError when the source is unavailable.
    """

    def fetch_categories(self) -> Sequence[str]:
        raise NotImplementedError


def today_date_label(today: Optional[date] = None) -> str:
    """
    Return today's date formatted as mm/dd, the way PPV event categories are dated.

    Args:
        today (date): Date to format, defaults to the current date

    Returns:
        str: Date such as '03/07'
    """
    today = today or date.today()
    return today.strftime('%m/%d')


def select_ppv_categories(categories: Iterable[str], keywords: List[str],
                          today_only: bool = False, today: Optional[date] = None) -> List[str]:
    """
    Select the categories that qualify as PPV.

    Args:
        categories: Category names from the feed
        keywords (list): A category qualifies if it contains any keyword (case-insensitive);
            an empty list lets every category through
        today_only (bool): Keep only categories carrying today's mm/dd date
        today (date): Date used for the today-only check, defaults to the current date

    Returns:
        List[str]: Qualifying category names in feed order
    """
    keywords_lower = [keyword.lower() for keyword in keywords]
    date_label = today_date_label(today)

    selected = []
    for category in categories:
        category_lower = category.lower()
        if keywords_lower and not any(keyword in category_lower for keyword in keywords_lower):
            continue
        if today_only and date_label not in category:
            logger.debug(f"Skipping PPV category not dated {date_label}: {category}")
            continue
        selected.append(category)

    return selected


def parse_category_feed(content: str) -> List[str]:
    """
    Extract category names from the feed content.

    Supports a JSON array of names, a JSON array of objects carrying
    ``category_name`` (Xtream ``get_live_categories``) or ``name``, and an
    M3U playlist, whose ``group-title`` values are used.

    Args:
        content (str): Feed content

    Returns:
        List[str]: Category names in feed order

    Raises:
        ProviderError: If the content is in none of the supported formats
    """
    stripped = content.lstrip('\ufeff').strip()

    if stripped.startswith('#EXTM3U'):
        categories = []
        for line in stripped.split('\n'):
            if not line.strip().startswith('#EXTINF:'):
                continue
            group_title_match = re.search(r'group-title="([^"]*)"', line, re.IGNORECASE)
            if group_title_match and group_title_match.group(1):
                categories.append(group_title_match.group(1))
        return categories

    try:
        data = json.loads(stripped)
    except ValueError as e:
        raise ProviderError(f"Category feed is neither JSON nor M3U: {e}") from e

    if not isinstance(data, list):
        raise ProviderError(f"Category feed must be a JSON array, got {type(data).__name__}")

    categories = []
    for item in data:
        if isinstance(item, str):
            categories.append(item)
        elif isinstance(item, dict) and isinstance(item.get('category_name', item.get('name')), str):
            categories.append(item.get('category_name', item.get('name')))
        else:
            raise ProviderError(f"Unsupported category feed item: {item!r}")
    return categories


def download_category_feed(url: str, timeout: int = 30) -> str:
    """
    Download the category feed with a size limit

    Args:
        url (str): URL of the category feed
        timeout (int): Request timeout in seconds

    Returns:
        str: Feed content

    Raises:
        ProviderError: If the download fails, is too large or cannot be decoded
    """
    logger.info(f"Downloading category feed from: {url}")

    try:
        with urlopen(url, timeout=timeout) as response:
            content_chunks = []
            total_size = 0

            while True:
                chunk = response.read(8192)
                if not chunk:
                    break

                total_size += len(chunk)

                # Security: Check if feed size exceeds maximum allowed size
                if total_size > Config.MAX_FEED_SIZE:
                    raise ProviderError(f"Category feed exceeds maximum allowed size of {Config.MAX_FEED_SIZE} bytes")

                content_chunks.append(chunk)

        content = b''.join(content_chunks).decode('utf-8')
        logger.info(f"Category feed downloaded successfully, size: {len(content)} characters")
        return content
    except URLError as e:
        logger.error(f"Error downloading category feed: {e}")
        raise ProviderError(f"Error downloading category feed: {e}") from e
    except UnicodeDecodeError as e:
        logger.error(f"Error decoding category feed: {e}")
        raise ProviderError(f"Error decoding category feed: {e}") from e
    except (OSError, HTTPException) as e:
        # Timeouts, resets and truncated bodies
        logger.error(f"Connection error downloading category feed: {e!r}")
        raise ProviderError(f"Connection error downloading category feed: {e!r}") from e
    except ValueError as e:
        # Malformed URLs, e.g. a non-numeric port
        logger.error(f"Invalid category feed request: {e}")
        raise ProviderError(f"Invalid category feed request: {e}") from e


class HttpCategoryProvider(CategoryProvider):
    """
    Category provider backed by the provider's HTTP category feed.
    """

    def __init__(self, url: str, keywords: Optional[List[str]] = None,
                 today_only: bool = False, timeout: int = 30):
        self.url = url
        self.keywords = Config.DEFAULT_PPV_CATEGORY_KEYWORDS.copy() if keywords is None else keywords
        self.today_only = today_only
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: Config) -> 'HttpCategoryProvider':
        return cls(
            config.CATEGORY_FEED_URL,
            keywords=config.PPV_CATEGORY_KEYWORDS,
            today_only=config.PPV_TODAY_ONLY,
            timeout=config.FEED_TIMEOUT_SECONDS,
        )

    def fetch_categories(self) -> List[str]:
        content = download_category_feed(self.url, self.timeout)
        categories = parse_category_feed(content)
        selected = select_ppv_categories(categories, self.keywords, self.today_only)
        logger.info(f"Category feed lists {len(categories)} categories, {len(selected)} PPV")
        return selected
