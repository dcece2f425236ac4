#!/usr/bin/env python3
"""
Entry point for PPV Filter Sync.

This script provides an entry point to run the filter sync, e.g. from cron.
"""

import sys
import os

# Add the src directory to the Python path to enable relative imports
current_dir = os.path.dirname(__file__)
sys.path.insert(0, current_dir)

from ppv_filter_sync.main import main


if __name__ == "__main__":
    sys.exit(main())
