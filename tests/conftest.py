"""Make the checked-out ``jqrepl`` importable without installing it.

Tests also run the entrypoint as ``python -m jqrepl`` from the repository
root, so the root (not an installed copy) must come first on ``sys.path``.
"""

from __future__ import annotations

import sys
from pathlib import Path


REPO_ROOT = str(Path(__file__).resolve().parent.parent)

if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)
