"""Location of the per-user application data directory."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Optional


def _ensure_dir(path: Path) -> Optional[Path]:
    try:
        path.mkdir(mode=0o777, exist_ok=True)
    except OSError:
        return None
    return Path(os.path.normpath(path))


def local_app_data_dir() -> Optional[Path]:
    """Return the application's data directory, creating it; None if unavailable."""
    if sys.platform == "win32":
        base = os.environ.get("LOCALAPPDATA")
        if not base:
            return None
        return _ensure_dir(Path(base) / "Geno")

    if sys.platform.startswith("linux"):
        data_home = os.environ.get("XDG_DATA_HOME")
        if data_home is not None:
            base = data_home
        else:
            data_dirs = os.environ.get("XDG_DATA_DIRS")
            if data_dirs is None:
                return None
            base = data_dirs.partition(":")[0]
        return _ensure_dir(Path(base) / "geno")

    return None