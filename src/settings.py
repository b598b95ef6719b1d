"""Static configuration for irclog-indexer.

All user-editable settings (log directory, index backend, logging) live in a
single JSON file; secrets such as Solr credentials come from the environment
(or a .env file) so they stay out of the repo.
"""

import json
import os

from dotenv import load_dotenv

load_dotenv()

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

# The config file can be swapped per deployment without touching the code.
CONFIG_PATH = os.getenv("IRCLOG_INDEXER_CONFIG", os.path.join(PROJECT_ROOT, "config.json"))


def _load_json_config() -> dict:
    """Load config.json with a flat, user-friendly schema."""

    if not os.path.exists(CONFIG_PATH):
        raise FileNotFoundError(f"Config file not found: {CONFIG_PATH}")

    with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
        return json.load(handle)


def _resolve_path(path: str) -> str:
    if os.path.isabs(path):
        return path
    return os.path.join(PROJECT_ROOT, path)


_CONFIG = _load_json_config()

# Expose the raw config for modules that need structured access.
CONFIG = _CONFIG

# Where the IRC logger writes its files, and which files count as logs.
LOG_DIRECTORY = _resolve_path(_CONFIG.get("log_directory", "logs/irc"))
LOG_EXTENSION = _CONFIG.get("log_extension", ".log")

# Index backend switches adapters without changing core logic.
# - INDEX_BACKEND: "sqlite" or "solr"
# - INDEX_BUFFER_SIZE: documents queued before a write
# - INDEX_OPTIMIZE / INDEX_OPTIMIZE_MAX_SEGMENTS: post-run optimize pass
_index = _CONFIG.get("index", {})
INDEX_BACKEND = _index.get("backend", "sqlite")
SQLITE_PATH = _resolve_path(_index.get("sqlite_path", "irclogs.db"))
# SOLR_URL in the environment wins so deployments can point at their own core.
SOLR_URL = os.getenv("SOLR_URL") or _index.get("solr_url", "http://localhost:8983/solr/irclogs")
SOLR_USERNAME = os.getenv("SOLR_USERNAME")
SOLR_PASSWORD = os.getenv("SOLR_PASSWORD")
INDEX_BUFFER_SIZE = int(_index.get("buffer_size", 100))
INDEX_OPTIMIZE = bool(_index.get("optimize", True))
INDEX_OPTIMIZE_MAX_SEGMENTS = int(_index.get("optimize_max_segments", 5))
INDEX_TIMEOUT_SECONDS = float(_index.get("timeout_seconds", 30))

# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {})
