"""Exception hierarchy for photo sorting."""


class PhotoSorterError(Exception):
    """Base error for the project."""


class ConfigurationError(PhotoSorterError):
    """Required options are missing or invalid. Fatal for the whole run."""


class DiscoveryError(PhotoSorterError):
    """Source location does not exist, is unreadable or is a corrupt archive.

    Raised before any relocation starts and aborts the run.
    """


class PathError(PhotoSorterError):
    """Destination path is malformed. Fatal for a single item only."""


class DirectoryCreateError(PhotoSorterError):
    """Destination parent directory could not be created."""


class RelocationError(PhotoSorterError):
    """Copy or move of a single file failed."""

    def __init__(self, message: str, source=None, destination=None):
        super().__init__(message)
        self.source = source
        self.destination = destination
