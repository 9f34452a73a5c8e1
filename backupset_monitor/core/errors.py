"""Exceptions raised by the backup-set checks."""


class PathNotFound(FileNotFoundError):
    """Raised when a configured backup path does not exist."""

    def __init__(self, path: str):
        super().__init__(f"Path does not exist: {path}")
        self.path = path


class EmptyInput(ValueError):
    """Raised when a statistic is requested for an empty sequence."""


class NotifierFailure(RuntimeError):
    """Raised when a report notification could not be delivered."""
