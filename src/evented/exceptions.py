"""Custom exceptions raised by evented."""


class EventsError(RuntimeError):
    """Base error for all evented exceptions."""


class ConfigurationError(EventsError):
    """Raised when configuration values are invalid or missing."""


class EventNameError(EventsError, TypeError):
    """Raised when an event name has a shape the operation does not accept."""
