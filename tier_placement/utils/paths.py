"""
paths.py – single source of truth for project folders.
           Import these constants everywhere.
"""

import os
from pathlib import Path

# Try to get root from environment variable first
ROOT = os.environ.get('TIER_PLACEMENT_ROOT')
if ROOT:
    ROOT = Path(ROOT).resolve()
else:
    # Fallback: look for a marker file in parent directories, else the cwd
    # (an installed package has no project tree above it)
    current = Path(__file__).resolve()
    while current.parent != current:
        if any((current / marker).exists() for marker in ['.git', 'pyproject.toml']):
            ROOT = current
            break
        current = current.parent
    else:
        ROOT = Path.cwd()

CONFIG_DIR  = ROOT / "config"
DATA_DIR    = ROOT / "data"
LOG_DIR     = ROOT / "logs"

DEFAULT_CONFIG_FILE = CONFIG_DIR / "placement.yaml"
DEFAULT_RANKINGS_FILE = DATA_DIR / "rankings.json"
