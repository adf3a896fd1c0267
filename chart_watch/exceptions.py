"""
Exceptions raised by chart_watch
"""


class ChartWatchError(Exception):
    """Base class for chart_watch errors"""


class IndexFetchError(ChartWatchError):
    """The repository index could not be downloaded"""


class IndexParseError(ChartWatchError):
    """The repository index is not a valid chart index document"""


class InvalidConstraint(ChartWatchError, ValueError):
    """A version constraint could not be parsed"""
