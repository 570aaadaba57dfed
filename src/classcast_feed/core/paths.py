"""Location of the runtime data directory (default config lives there)."""

from __future__ import annotations

import os
from pathlib import Path

DATA_DIR_ENV = "CLASSCAST_FEED_DATA_DIR"
_DEFAULT_DIRNAME = ".classcast_feed"


def get_data_dir() -> Path:
    """Return the runtime data directory.

    ``CLASSCAST_FEED_DATA_DIR`` wins when set to a non-blank value; relative
    values are taken from the current working directory. Otherwise
    ``~/.classcast_feed`` is used. The directory is not created here.
    """
    override = (os.getenv(DATA_DIR_ENV) or "").strip()
    if override:
        return Path(override).expanduser().resolve()
    return (Path.home() / _DEFAULT_DIRNAME).resolve()


__all__ = ["DATA_DIR_ENV", "get_data_dir"]
