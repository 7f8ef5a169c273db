"""GitHub star counts for repository links."""

__version__ = "0.1.0"
