"""Core domain package for irclog-indexer.

Core contains parsing, resume/dedup and line sequencing logic without any
search-index or filesystem-specific code, keeping the indexing algorithm
portable across index backends.
"""
