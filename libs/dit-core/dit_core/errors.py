"""Exception types raised by dit."""


class DitError(Exception):
    """Base class for dit errors."""


class RootError(DitError):
    """A read or write root is unusable (missing, not a directory, '/', overlapping)."""


class ConfigError(DitError):
    """The configuration file could not be read or failed validation."""


class EnumerationError(DitError):
    """A directory under a read root could not be listed. Fatal for the run."""

    def __init__(self, message: str, relpath: str = ""):
        super().__init__(message)
        self.relpath = relpath


class HashError(DitError):
    """A file disappeared or became unreadable while computing its digest."""


class CopyError(DitError):
    """A file could not be copied to its destination."""
