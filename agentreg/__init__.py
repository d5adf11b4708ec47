"""agentreg — unified agent record store and query/cache engine."""

__version__ = "0.1.0"
