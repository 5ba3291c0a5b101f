"""Test package for backend-ai-rules.

This file enables relative imports within the ``tests`` package.
"""

from __future__ import annotations

import sys
from pathlib import Path

# Make the repository importable without installing the package first.
_TESTS_DIR = Path(__file__).resolve().parent
_REPO_ROOT = _TESTS_DIR.parent
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))
