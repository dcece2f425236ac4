"""
PPV Filter Sync Package

This package keeps the automated pay-per-view filters in a media playlist
application's settings in line with the provider's category feed, without
touching the filters the user created.
"""

from .config import Config
from .filters import (
    AUTOMATED_FILTER_NAME,
    DecodeError,
    FilterCollection,
    FilterEntity,
    decode_filter,
    encode_filter,
    remove_automated_filters,
)
from .category_provider import CategoryProvider, HttpCategoryProvider, ProviderError
from .synchronizer import add_ppv_filters

__version__ = "1.0.0"
