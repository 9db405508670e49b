"""Error taxonomy shared by the repository, service and routes."""


class EventValidationError(ValueError):
    """The payload cannot become an event. Maps to HTTP 400; nothing is written."""


class StorageUnavailable(RuntimeError):
    """Connecting to or querying the events table failed. Maps to HTTP 503."""
