"""
Pytest configuration file for PPV filter sync tests.
"""

import sys
import os

# Add the src directory to the Python path to enable imports
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(__file__)), 'src'))
