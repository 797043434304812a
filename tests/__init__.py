"""Test package for rqm.

This file enables relative imports within the ``tests`` package.
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is importable without installing the package.
_REPO_ROOT = Path(__file__).resolve().parent.parent
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))
