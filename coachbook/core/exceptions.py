class SchedulingError(Exception):
    """Base class for errors raised by the scheduling engine and its collaborators."""

    status_code = 400

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class NotFound(SchedulingError):
    """Coach slug or target record does not exist. Never fall back to a default."""

    status_code = 404


class Unauthorized(SchedulingError):
    """Mutation attempted without the session of the coach owning the record."""

    status_code = 403


class InvalidInterval(SchedulingError):
    """End is not after start, or an edit the slot cannot take."""

    status_code = 422


class AuthFailed(SchedulingError):
    """Sign-in rejected, or the account does not own the coach being accessed."""

    status_code = 401


class RefreshFailed(SchedulingError):
    """Storage could not be read; the schedule is unknown, not empty."""

    status_code = 503


class MutationFailed(SchedulingError):
    """Storage rejected a write. Nothing held in memory was changed.

    ``written`` counts records already stored by a multi-record write before
    the failure; 0 means storage was left untouched.
    """

    status_code = 502

    def __init__(self, detail: str, written: int = 0) -> None:
        super().__init__(detail)
        self.written = written
