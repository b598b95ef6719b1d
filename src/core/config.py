"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so the app layer can build it safely.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class IndexingConfig:
    """Post-indexing settings for the core pipeline."""

    optimize: bool = True
    optimize_max_segments: int = 5
