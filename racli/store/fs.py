"""
Filesystem helpers enforcing owner-only permissions.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

DIR_MODE = 0o700
FILE_MODE = 0o600


def ensure_directory(path: Path) -> None:
    """Create the directory if needed and chmod it 0700 on every call."""
    path.mkdir(parents=True, exist_ok=True)
    path.chmod(DIR_MODE)


def write_private_json(path: Path, data: Any) -> None:
    """Write JSON to path, readable and writable by the owner only."""
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, FILE_MODE)
    with os.fdopen(fd, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
    # O_CREAT mode does not apply to files that already existed
    path.chmod(FILE_MODE)


def read_json(path: Path) -> Any:
    """Read and decode a JSON file."""
    with path.open(encoding="utf-8") as f:
        return json.load(f)
