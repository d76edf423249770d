"""Web search front-end API."""

__version__ = "1.0.0"
