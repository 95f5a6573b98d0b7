"""Shared error types for the runtime admission layer."""


class RuntimeAdmissionError(Exception):
    """Base error for admission-control failures."""


class AdmissionDeniedError(RuntimeAdmissionError):
    """A client exceeded its request budget for the current window."""

    def __init__(self, key: str, retry_after: int, detail: str = "") -> None:
        self.key = key
        self.retry_after = retry_after
        self.detail = detail
        msg = "Rate limit exceeded"
        if detail:
            msg += f". {detail}"
        super().__init__(msg)
