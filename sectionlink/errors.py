"""Exceptions raised by the section link field."""


class SectionLinkError(Exception):
    """Base class for errors raised by this package."""


class DataSourceUnavailable(SectionLinkError):
    """The catalog could not be read (database down, bad schema, ...)."""


class CacheBackendError(SectionLinkError):
    """A cache backend could not be read from or written to."""
