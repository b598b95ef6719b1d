"""Adapters connecting the core indexer to files, search indexes and the console."""
