"""
Configuration module for the PPV filter sync script.

This module contains all the configuration settings for synchronizing
automated PPV filters.
"""

import os
from typing import List


def _env_flag(name: str, default: str = 'false') -> bool:
    return os.getenv(name, default).lower() in ('true', '1', 'yes', 'on')


class Config:
    """
    Configuration class for PPV filter sync
    """

    # Security: Maximum allowed sizes for downloaded documents (10MB each)
    MAX_FEED_SIZE: int = 10 * 1024 * 1024
    MAX_SETTINGS_SIZE: int = 10 * 1024 * 1024

    # Keywords marking a category as pay-per-view
    DEFAULT_PPV_CATEGORY_KEYWORDS: List[str] = [
        "PPV"
    ]

    def __init__(self):
        """Initialize configuration from environment variables"""
        self._category_feed_url = os.getenv(
            'CATEGORY_FEED_URL',
            'https://your-provider.com/player_api.php?action=get_live_categories'
        )
        self._settings_path = os.getenv('SETTINGS_PATH', 'settings.json')
        self._settings_s3_bucket = os.getenv('SETTINGS_S3_BUCKET', '')
        self._settings_s3_key = os.getenv('SETTINGS_S3_KEY', 'settings.json')
        self._s3_endpoint_url = os.getenv('S3_ENDPOINT_URL', 'https://s3.amazonaws.com')
        self._s3_region = os.getenv('S3_REGION', 'us-east-1')

        # Parse numeric and boolean values
        self._feed_timeout_seconds = int(os.getenv('FEED_TIMEOUT_SECONDS', '30'))
        self._ppv_today_only = _env_flag('PPV_TODAY_ONLY')
        self._automated_filter_case_sensitive = _env_flag('AUTOMATED_FILTER_CASE_SENSITIVE')

        keywords = os.getenv('PPV_CATEGORY_KEYWORDS')
        if keywords is None:
            self._ppv_category_keywords = self.DEFAULT_PPV_CATEGORY_KEYWORDS.copy()
        else:
            self._ppv_category_keywords = [k.strip() for k in keywords.split(',') if k.strip()]

    @property
    def CATEGORY_FEED_URL(self) -> str:
        """Category feed URL from environment variable or default"""
        return self._category_feed_url

    @property
    def FEED_TIMEOUT_SECONDS(self) -> int:
        """Timeout in seconds for the category feed request"""
        return self._feed_timeout_seconds

    @property
    def PPV_CATEGORY_KEYWORDS(self) -> List[str]:
        """Keywords a category name must contain to be treated as PPV"""
        return self._ppv_category_keywords

    @property
    def PPV_TODAY_ONLY(self) -> bool:
        """Keep only PPV categories carrying today's mm/dd date"""
        return self._ppv_today_only

    @property
    def AUTOMATED_FILTER_CASE_SENSITIVE(self) -> bool:
        """Case sensitivity of generated filters"""
        return self._automated_filter_case_sensitive

    @property
    def SETTINGS_PATH(self) -> str:
        """Local path of the settings document"""
        return self._settings_path

    @property
    def SETTINGS_S3_BUCKET(self) -> str:
        """Bucket holding the settings document, empty for local storage"""
        return self._settings_s3_bucket

    @property
    def SETTINGS_S3_KEY(self) -> str:
        """Object key of the settings document in S3"""
        return self._settings_s3_key

    @property
    def USE_S3_SETTINGS(self) -> bool:
        return bool(self._settings_s3_bucket)

    @property
    def S3_ENDPOINT_URL(self) -> str:
        """S3 endpoint URL from environment variable or default"""
        return self._s3_endpoint_url

    @property
    def S3_REGION(self) -> str:
        """S3 region from environment variable or default"""
        return self._s3_region

    @property
    def S3_COMPATIBLE_CONFIG(self) -> dict:
        """S3-compatible storage configuration from properties"""
        return {
            "endpoint_url": self.S3_ENDPOINT_URL,
            "region": self.S3_REGION
        }

    def validate_config(self) -> List[str]:
        """
        Validate configuration settings and return list of validation errors.

        Returns:
            List[str]: List of validation errors, empty if all validations pass
        """
        errors = []

        if not self.CATEGORY_FEED_URL or not self.CATEGORY_FEED_URL.startswith(('http://', 'https://')):
            errors.append("CATEGORY_FEED_URL must be a valid HTTP/HTTPS URL")

        if self.FEED_TIMEOUT_SECONDS <= 0:
            errors.append("FEED_TIMEOUT_SECONDS must be a positive number")

        if self.USE_S3_SETTINGS:
            if len(self.SETTINGS_S3_BUCKET) < 3 or len(self.SETTINGS_S3_BUCKET) > 63:
                errors.append("SETTINGS_S3_BUCKET must be between 3 and 63 characters")

            if not self.SETTINGS_S3_KEY or '..' in self.SETTINGS_S3_KEY or self.SETTINGS_S3_KEY.startswith('/'):
                errors.append("SETTINGS_S3_KEY must not contain '..' or start with '/'")

            if not self.S3_ENDPOINT_URL or not self.S3_ENDPOINT_URL.startswith(('http://', 'https://')):
                errors.append("S3_ENDPOINT_URL must be a valid HTTP/HTTPS URL")

            if not self.S3_REGION:
                errors.append("S3_REGION must be specified")
        elif not self.SETTINGS_PATH:
            errors.append("SETTINGS_PATH must be specified")

        return errors
