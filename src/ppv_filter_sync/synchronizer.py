"""
Filter synchronization module.

This module regenerates the automated PPV filters from the category feed
while leaving the user's own filters alone.
"""

import logging
from typing import Optional, Tuple

from .category_provider import CategoryProvider, ProviderError
from .filters import FilterCollection, build_automated_filter, remove_automated_filters
from .utils import SanitizedLogger


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = SanitizedLogger(logging.getLogger(__name__))


def add_ppv_filters(collection: FilterCollection, provider: CategoryProvider,
                    case_sensitive: bool = False) -> Tuple[FilterCollection, Optional[ProviderError]]:
    """
    Replace the automated filters in the collection with one per current PPV category.

    Automated filters are removed first, whatever happens next, so a feed
    outage never leaves stale automated filters behind. Manual filters and
    entries that cannot be decoded are never touched, even when a manual
    filter matches the same category as a new automated one.

    Args:
        collection (FilterCollection): User's filters, modified in place
        provider (CategoryProvider): Source of PPV category names
        case_sensitive (bool): Case sensitivity of the generated filters

    Returns:
        Tuple[FilterCollection, Optional[ProviderError]]: The cleaned collection
        and, when the provider failed, the error (no filters are added then)
    """
    logger.info("Starting PPV filter sync")
    remove_automated_filters(collection)

    try:
        categories = provider.fetch_categories()
    except ProviderError as e:
        logger.warning(f"Could not fetch PPV categories, no automated filters added: {e}")
        return collection, e

    valid_categories = []
    for category in categories:
        if isinstance(category, str):
            valid_categories.append(category)
        else:
            logger.warning(f"Skipping category that is not a string: {category!r}")

    # dict.fromkeys keeps first-seen order
    unique_categories = list(dict.fromkeys(valid_categories))
    for category in unique_categories:
        key = collection.add(build_automated_filter(category, case_sensitive))
        logger.debug(f"Added automated filter {key}: {category}")

    logger.info(f"PPV filter sync complete: {len(unique_categories)} automated filters added")
    return collection, None
