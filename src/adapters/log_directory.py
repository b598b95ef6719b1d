"""Log directory listing adapter."""

from __future__ import annotations

import os
from typing import List


def list_log_files(directory: str, extension: str = ".log") -> List[str]:
    """Return every file under directory whose name ends with extension.

    The order is whatever the filesystem gives us; the indexer imposes its
    own newest-first ordering.
    """

    if not os.path.isdir(directory):
        raise FileNotFoundError(f"Log directory not found: {directory}")

    paths: List[str] = []
    for root, _dirs, files in os.walk(directory):
        for name in files:
            if name.endswith(extension):
                paths.append(os.path.join(root, name))
    return paths
