"""Error taxonomy shared across the application."""


class TaskPulseError(Exception):
    """Base class for application errors."""


class StorageError(TaskPulseError):
    """Persistence failed: backend unavailable, constraint violation or corruption.

    Always propagated to the caller; a failed write means possible data loss.
    """


class NotFoundError(TaskPulseError, LookupError):
    """A record addressed by id does not exist."""


class RemoteServiceError(TaskPulseError):
    """The remote language-model call failed.

    Raised by the model client and caught at the generator boundary.
    """
