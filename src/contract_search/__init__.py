"""In-memory full-text search and ranking for business contracts."""

__version__ = "0.1.0"
