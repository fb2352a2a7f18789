"""Errors raised by infrastructure collaborators."""


class DataSourceError(RuntimeError):
    """A catalog, menu or detection store could not be reached or queried."""


class DetectorError(RuntimeError):
    """The detection service failed or returned an unusable response."""
