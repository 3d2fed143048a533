"""Error taxonomy surfaced to callers of the generation pipeline."""


class CramfastError(Exception):
    """Base error with a stable machine-readable code."""

    code = "FLASHCARD_ERROR"
    status_code = 500

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.code)
        self.message = message or self.code


class Unauthenticated(CramfastError):
    """Caller identity is missing or invalid."""

    code = "UNAUTHENTICATED"
    status_code = 401


class NotFound(CramfastError):
    """Session is absent or not owned by the caller."""

    code = "SESSION_NOT_FOUND"
    status_code = 404


class NoImages(CramfastError):
    """Generation was requested for a session without images."""

    code = "NO_IMAGES"
    status_code = 400


class ImageLimitExceeded(CramfastError):
    """Appending images would exceed the per-session limit."""

    code = "IMAGE_LIMIT_EXCEEDED"
    status_code = 400


class InvalidImages(CramfastError):
    """Image references are blank or not fetchable URLs."""

    code = "INVALID_IMAGES"
    status_code = 400


class OcrFailed(CramfastError):
    """No page produced meaningful text."""

    code = "OCR_FAILED"
    status_code = 422


class GenerationFailed(CramfastError):
    """No strategy produced a usable flashcard."""

    code = "GENERATION_FAILED"
    status_code = 422


class RateLimited(CramfastError):
    """Model provider signaled throttling."""

    code = "RATE_LIMITED"
    status_code = 429


class QuotaExceeded(CramfastError):
    """Model provider signaled account or billing exhaustion."""

    code = "QUOTA_EXCEEDED"
    status_code = 402


class ProviderError(CramfastError):
    """Any other provider-side failure."""

    code = "PROVIDER_ERROR"
    status_code = 502


def classify_provider_error(exc: Exception) -> CramfastError:
    """Map a provider exception onto the error taxonomy."""
    if isinstance(exc, CramfastError):
        return exc
    if _error_code_from_exception(exc) == "insufficient_quota":
        return QuotaExceeded(str(exc))
    if _status_code_from_exception(exc) == 429:  # noqa: PLR2004
        return RateLimited(str(exc))
    return ProviderError(str(exc) or exc.__class__.__name__)


def is_fatal_provider_error(error: CramfastError) -> bool:
    """Return whether retrying another page or attempt is pointless."""
    return isinstance(error, RateLimited | QuotaExceeded)


def _status_code_from_exception(exc: Exception) -> int | None:
    """Extract an HTTP status code from an exception, if available."""
    status_code = getattr(exc, "status_code", None)
    if isinstance(status_code, int):
        return status_code
    response = getattr(exc, "response", None)
    status_code = getattr(response, "status_code", None)
    if isinstance(status_code, int):
        return status_code
    return None


def _error_code_from_exception(exc: Exception) -> str | None:
    """Extract a provider error code such as ``insufficient_quota``."""
    code = getattr(exc, "code", None)
    if isinstance(code, str):
        return code
    body = getattr(exc, "body", None)
    if isinstance(body, dict):
        nested = body.get("error", body)
        if isinstance(nested, dict) and isinstance(nested.get("code"), str):
            return nested["code"]
    return None
