"""
Error taxonomy for provider calls and orchestration.

Configuration and transport problems surface as ProviderUnavailable (hard
failure for analysis) or NotConfigured (soft skip for the secondary course
search). Payload problems are MalformedResponse / SchemaParseError.
"""
from typing import Any, Optional


class CareerLiftError(Exception):
    """Base class for all application errors."""

    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.message = message
        self.details = details


class InvalidRequest(CareerLiftError):
    """Required input missing; no provider is called."""


class ProviderUnavailable(CareerLiftError):
    """Provider has no credentials, failed at transport level, or its circuit is open."""


class MalformedResponse(CareerLiftError):
    """Provider answered without a text payload."""


class SchemaParseError(CareerLiftError):
    """Provider text was not valid JSON or did not match the response schema."""


class EmptyExtraction(CareerLiftError):
    """File extraction returned no text."""


class NotConfigured(CareerLiftError):
    """Optional provider is missing its configuration."""


class AnalysisFailed(CareerLiftError):
    """The analysis pipeline failed; the provider error is attached as __cause__."""


class AnalysisExhausted(CareerLiftError):
    """Client-side retries ran out."""

    def __init__(self, attempts: int, last_error: Optional[str]):
        super().__init__(
            f"Failed to analyze resume after {attempts} attempts: {last_error}",
            details=last_error,
        )
        self.attempts = attempts
        self.last_error = last_error


def describe(exc: BaseException) -> Any:
    """Diagnostic payload for an error response body."""
    if isinstance(exc, CareerLiftError) and exc.details is not None:
        return exc.details
    cause = exc.__cause__
    if cause is not None:
        return f"{exc}: {cause}"
    return str(exc)
