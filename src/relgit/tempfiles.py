"""Temporary files handed to git by path (e.g. ``git commit -F``)."""

from __future__ import annotations

import logging
import shutil
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)

_TEMP_PREFIX = "relgit-"


def write_temp_file(content: str, suggested_name: str) -> Path:
    """Write *content* to ``<fresh temp dir>/<suggested_name>`` and return the path.

    Each call gets its own private directory, so concurrent callers using the
    same suggested name never collide. The file is closed before returning.
    """
    directory = Path(tempfile.mkdtemp(prefix=_TEMP_PREFIX))
    path = directory / Path(suggested_name).name
    path.write_text(content, encoding="utf-8")
    return path


def remove_temp_file(path: Path) -> None:
    """Remove a file created by :func:`write_temp_file` together with its directory.

    Best-effort: a missing file is not an error.
    """
    if path.parent.name.startswith(_TEMP_PREFIX):
        shutil.rmtree(path.parent, ignore_errors=True)
    else:
        path.unlink(missing_ok=True)
    logger.debug("Removed temp file %s", path)
