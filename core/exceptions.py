"""
Typed exceptions for scheduling failures.

Every user-facing failure carries an enum `kind`; the response catalog maps
each kind to exactly one message, so kinds must stay stable.
"""

from enum import Enum


class ParseErrorKind(str, Enum):
    MISSING_RECIPIENT = "MISSING_RECIPIENT"
    MISSING_DATETIME = "MISSING_DATETIME"
    MISSING_MESSAGE = "MISSING_MESSAGE"
    INVALID_FORMAT = "INVALID_FORMAT"


class RecipientErrorKind(str, Enum):
    INVALID_PHONE = "INVALID_PHONE"
    CONTACT_NOT_FOUND = "CONTACT_NOT_FOUND"


class DateTimeErrorKind(str, Enum):
    INVALID_FORMAT = "INVALID_FORMAT"
    INVALID_HOUR = "INVALID_HOUR"
    PAST_DATE = "PAST_DATE"


class SchedulerError(Exception):
    """Base class for scheduling errors."""


class CommandParseError(SchedulerError):
    """Command text does not match the schedule grammar."""

    def __init__(self, kind: ParseErrorKind, detail: str = ""):
        self.kind = kind
        super().__init__(detail or kind.value)


class RecipientError(SchedulerError):
    """Recipient token is not a usable phone number."""

    def __init__(self, kind: RecipientErrorKind, token: str):
        self.kind = kind
        self.token = token
        super().__init__(f"{kind.value}: {token!r}")


class DateTimeError(SchedulerError):
    """Date/time phrase could not be resolved to a future instant."""

    def __init__(self, kind: DateTimeErrorKind, phrase: str):
        self.kind = kind
        self.phrase = phrase
        super().__init__(f"{kind.value}: {phrase!r}")


class InvalidContentError(SchedulerError):
    """Message body is empty, blank, or too long."""


class PendingLimitError(SchedulerError):
    """Owner already holds the maximum number of PENDING jobs."""

    def __init__(self, current_count: int, max_allowed: int):
        self.current_count = current_count
        self.max_allowed = max_allowed
        super().__init__(
            f"Pending limit reached ({current_count}/{max_allowed})"
        )


class JobNotFoundError(SchedulerError):
    """Job no longer exists."""

    def __init__(self, job_id):
        self.job_id = job_id
        super().__init__(f"Job {job_id} not found")


class InvalidStatusTransitionError(SchedulerError):
    """Only PENDING jobs may move to a terminal status."""

    def __init__(self, job_id, current, requested):
        self.job_id = job_id
        self.current = current
        self.requested = requested
        super().__init__(
            f"Job {job_id} cannot move from {current.value} to {requested.value}"
        )


class JobNotEditableError(SchedulerError):
    """Only PENDING jobs can be edited."""

    def __init__(self, job_id, status):
        self.job_id = job_id
        self.status = status
        super().__init__(f"Job {job_id} is {status.value} and can no longer be edited")


class DispatchError(SchedulerError):
    """Fetching due jobs failed; the tick ended without dispatching."""


class TransportError(Exception):
    """Delivery through the transport failed. `reason` is safe to persist."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)