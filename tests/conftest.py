"""Pytest configuration to make the project root importable.

The application ships as flat top-level modules, so tests run from a checkout
need the repository root on ``sys.path``.
"""

import os
import sys

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)
