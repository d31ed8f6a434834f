"""Dashboard API: scope lookups and bearer token authentication."""

__version__ = "0.1.0"
