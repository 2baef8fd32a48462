# turnpath/core/errors.py
#!/usr/bin/env python3


class PathfindingError(Exception):
    """Base class for every error raised by the search core."""


class ConfigError(PathfindingError, ValueError):
    """A search could not be configured: bad endpoints, constants or map data."""


class InvalidState(PathfindingError, RuntimeError):
    """An engine operation was called in a state that does not allow it."""
