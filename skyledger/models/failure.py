"""
Failure classification for tracker runs.

Every run-level failure is one of four kinds:
- TransientIOError: a network or store call failed and may succeed later
- MalformedProfileError: the profile API answered with an unexpected shape
- ConfigurationError: required settings are missing, fatal at startup
- UnhandledError: anything else (programming errors, unexpected exceptions)

Only transient errors are retried, and only inside the collaborator that
raised them. Everything else propagates immediately.
"""

from enum import Enum


class FailureKind(str, Enum):
    """Classification of failure types."""

    TRANSIENT_IO = "transient_io"
    MALFORMED_PROFILE = "malformed_profile"
    CONFIGURATION = "configuration"
    UNHANDLED = "unhandled"


class TrackerError(Exception):
    """
    Base class for classified tracker failures.

    Subclass this for errors where the system knows what went wrong.
    """

    kind: FailureKind = FailureKind.UNHANDLED

    def __init__(self, message: str, detail: str | None = None):
        self.message = message
        self.detail = detail
        super().__init__(message)


class TransientIOError(TrackerError):
    """A network or document store call failed after exhausting its retries."""

    kind = FailureKind.TRANSIENT_IO


class MalformedProfileError(TrackerError):
    """The profile document does not have the expected nested structure."""

    kind = FailureKind.MALFORMED_PROFILE


class ConfigurationError(TrackerError):
    """Required configuration is missing or invalid."""

    kind = FailureKind.CONFIGURATION


class UnhandledError(TrackerError):
    """Catch-all for unexpected exceptions, tagged with the stage that raised them."""

    kind = FailureKind.UNHANDLED

    def __init__(self, stage: str, cause: BaseException):
        self.stage = stage
        super().__init__(
            f"Unexpected {type(cause).__name__} during {stage}: {cause}",
            detail=type(cause).__name__,
        )
