class TrackerError(Exception):
    """Base class for workout tracker errors."""


class StorageUnavailable(TrackerError):
    """The backing store could not be read or written."""


class MalformedRecord(TrackerError):
    """A raw workout record could not be turned into a WorkoutRecord."""
