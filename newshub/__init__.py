"""Content scoring and cross-source relevance engine for the AI news hub."""

__version__ = "0.1.0"
