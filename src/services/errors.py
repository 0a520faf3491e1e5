"""Exceptions raised by the watcher services."""


class WatcherError(Exception):
    """Base class for watcher errors."""


class ChannelValidationError(WatcherError):
    """A channel could not be created from the given name or URL."""


class ChannelStoreError(WatcherError):
    """A channel record could not be read, written or parsed."""


class ChannelLookupError(WatcherError):
    """A channel could not be resolved against the data source."""


class VideoLookupError(WatcherError):
    """The data source failed or returned something unparseable."""
