"""
Exceptions raised by the championship scheduler.
"""


class SchedulingError(Exception):
    """Base exception for all scheduler errors."""
    pass


class ValidationError(SchedulingError):
    """Raised when a request is rejected before any computation runs."""
    pass


class InvalidTransitionError(SchedulingError):
    """Raised when a phase or match status change is not allowed."""

    def __init__(self, kind, current, requested, reason=None):
        self.kind = kind
        self.current = current
        self.requested = requested
        self.reason = reason
        message = f"Cannot move {kind} from '{current}' to '{requested}'"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class NotFoundError(SchedulingError):
    """Raised when a record does not exist in the store."""

    def __init__(self, kind, record_id):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} '{record_id}' not found")


class PersistenceError(SchedulingError):
    """Raised when the data store fails.

    ``inserted`` holds the records written before the failure. Inserts are
    independent, so those records stay in the store.
    """

    def __init__(self, message, inserted=None):
        self.inserted = list(inserted or [])
        super().__init__(message)
