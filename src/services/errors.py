"""Error kinds raised by the data services."""


class GraphAppError(Exception):
    """Base class for service-level errors."""


class ValidationError(GraphAppError):
    """Input was rejected: blank required field, duplicate value or dangling reference."""


class NotFoundError(GraphAppError):
    """The entity addressed by an update or lookup does not exist."""
