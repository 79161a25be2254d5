"""Multi-user task list API."""

__version__ = "1.0.0"
