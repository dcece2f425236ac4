#!/usr/bin/env python3
"""
Main application module for PPV Filter Sync.

This script loads the user's settings, replaces the automated PPV filters
with one filter per PPV category currently listed by the provider, and
saves the settings back to local or S3-compatible storage.
"""

import os
import sys
import logging

from botocore.exceptions import BotoCoreError, ClientError

from .config import Config
from .category_provider import HttpCategoryProvider
from .settings_store import (
    SettingsError,
    collection_from_settings,
    collection_to_settings,
    load_settings,
    load_settings_from_s3,
    save_settings,
    save_settings_to_s3,
)
from .synchronizer import add_ppv_filters
from .utils import SanitizedLogger


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = SanitizedLogger(logging.getLogger(__name__))


def main() -> int:
    """
    Main function to orchestrate the PPV filter sync.
    """
    config = Config()

    validation_errors = config.validate_config()
    if validation_errors:
        for error in validation_errors:
            logger.error(f"Configuration error: {error}")
        return 1

    dry_run = os.environ.get('DRY_RUN', '').lower() in ('true', '1', 'yes', 'on')

    try:
        # Step 1: Load settings
        if config.USE_S3_SETTINGS:
            settings = load_settings_from_s3(config.SETTINGS_S3_BUCKET, config.SETTINGS_S3_KEY, config)
        else:
            settings = load_settings(config.SETTINGS_PATH)
        collection = collection_from_settings(settings)

        # Step 2: Regenerate automated filters
        provider = HttpCategoryProvider.from_config(config)
        collection, provider_error = add_ppv_filters(
            collection, provider, case_sensitive=config.AUTOMATED_FILTER_CASE_SENSITIVE
        )
        if provider_error is not None:
            logger.warning("Category feed unavailable, saving settings with stale automated filters removed")

        settings = collection_to_settings(settings, collection)

        # Step 3: Persist
        if dry_run:
            logger.info(f"Dry-run mode: {len(collection)} filters computed, skipping save")
            return 0

        if config.USE_S3_SETTINGS:
            save_settings_to_s3(settings, config.SETTINGS_S3_BUCKET, config.SETTINGS_S3_KEY, config)
        else:
            save_settings(settings, config.SETTINGS_PATH)

        logger.info("Process completed successfully")
        return 0

    except SettingsError as e:
        logger.error(f"Settings error: {e}")
        return 1
    except (ClientError, BotoCoreError, ValueError, OSError) as e:
        logger.error(f"Process failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
