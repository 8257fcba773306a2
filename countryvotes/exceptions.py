"""
Domain exceptions for the vote pipeline.

Each boundary-facing exception carries a stable ``code`` and the HTTP
``status_code`` the error handlers map it to. Underlying storage or
network causes are chained with ``raise ... from exc`` so they show up
in logs but never in response bodies.
"""

from __future__ import annotations

from countryvotes.constants import DUPLICATE_EMAIL_MESSAGE, ERROR_CODES


class CountryVotesError(Exception):
    """Base class for all errors raised by the vote pipeline."""

    code: str = ERROR_CODES["INTERNAL_ERROR"]
    status_code: int = 500

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.__class__.__doc__ or self.code)
        self.message = message or str(self.args[0])


class DuplicateEmailError(CountryVotesError):
    """This email has already been used to vote."""

    code = ERROR_CODES["DUPLICATE_ENTRY"]
    status_code = 409

    def __init__(self, email: str | None = None) -> None:
        super().__init__(DUPLICATE_EMAIL_MESSAGE)
        self.email = email


class StorageFailureError(CountryVotesError):
    """A persistence operation failed."""


class CreateVoteFailedError(StorageFailureError):
    """Failed to create vote."""


class AggregationFailedError(StorageFailureError):
    """Failed to get vote counts."""


class UpstreamUnavailableError(CountryVotesError):
    """Country metadata lookup failed."""

    code = ERROR_CODES["EXTERNAL_API_ERROR"]
    status_code = 502

    def __init__(self, country_code: str, reason: str) -> None:
        super().__init__(f"Metadata lookup for {country_code!r} failed: {reason}")
        self.country_code = country_code
        self.reason = reason


class UniqueViolationError(Exception):
    """Storage-level unique constraint conflict.

    Raised by ``VoteStore.insert``; the vote service translates it into
    ``DuplicateEmailError``. Never reaches the HTTP boundary.
    """

    def __init__(self, column: str, value: str) -> None:
        super().__init__(f"Unique constraint violated on {column}={value!r}")
        self.column = column
        self.value = value
