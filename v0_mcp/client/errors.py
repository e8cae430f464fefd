"""Error taxonomy for the v0 API client.

Every message is a complete sentence naming the likely cause and what to do
next; the caller is usually an automated agent that only sees the message text.
"""

import httpx


class V0Error(Exception):
    """Base class for every failure surfaced by the client."""

    retryable = True


class ValidationError(V0Error):
    """Caller-supplied data violates a precondition."""

    retryable = False


class AuthError(V0Error):
    retryable = False


class RateLimitError(V0Error):
    pass


class ServerError(V0Error):
    pass


class GenerationTimeoutError(V0Error):
    pass


class NetworkError(V0Error):
    pass


class MalformedResponseError(V0Error):
    """The provider answered, but without usable content."""

    retryable = False


class HTTPStatusFailure(Exception):
    """A non-2xx answer from the provider, captured where the HTTP call returns."""

    def __init__(self, status_code: int, detail: str):
        super().__init__(f"HTTP {status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail


def failure_detail(response_text: str, payload: object) -> str:
    """Pick the human-readable part of an error body (JSON ``error``/``message`` or raw text)."""
    if isinstance(payload, dict):
        detail = payload.get("error") or payload.get("message")
        if isinstance(detail, dict):
            detail = detail.get("message")
        if detail:
            return str(detail)
    return response_text


def _mentions_timeout(text: str) -> bool:
    lowered = text.lower()
    return "timeout" in lowered or "timed out" in lowered


def classify_failure(exc: Exception, *, multimodal: bool = False) -> V0Error:
    """Map a transport failure to the error taxonomy.

    Status codes drive the classification; substring checks are reserved for
    provider signals that carry no status of their own.
    """
    if isinstance(exc, V0Error):
        return exc

    label = "V0 multimodal component generation" if multimodal else "V0 component generation"

    if isinstance(exc, HTTPStatusFailure):
        status = exc.status_code
        detail = exc.detail.lower()
        if status == 401:
            if multimodal:
                return AuthError(
                    "V0 API authentication failed for multimodal request. "
                    "Please verify your V0_API_KEY is valid and supports vision capabilities."
                )
            return AuthError(
                "V0 API authentication failed. Please verify your V0_API_KEY is valid and has not expired."
            )
        if status == 429:
            return RateLimitError(
                "V0 API rate limit exceeded. Please wait a moment before making another request "
                "or check your usage limits."
            )
        if multimodal and (status == 413 or "payload too large" in detail):
            return ValidationError(
                "Image file size too large. Please compress images or use smaller images "
                "for component generation."
            )
        if multimodal and (status == 415 or "unsupported media type" in detail):
            return ValidationError(
                "Image format not supported. Please use JPEG, PNG, or WebP images "
                "for component generation."
            )
        if status >= 500:
            return ServerError(
                "V0 API server error. The service may be temporarily unavailable. "
                "Please try again in a few minutes."
            )
        if _mentions_timeout(detail):
            return GenerationTimeoutError(
                "V0 API request timed out. The component generation may be taking longer than expected. "
                "Please try again."
            )
        return V0Error(f"{label} failed: {exc}")

    if isinstance(exc, httpx.TimeoutException):
        return GenerationTimeoutError(
            "V0 API request timed out. The component generation may be taking longer than expected. "
            "Please try again."
        )
    if isinstance(exc, httpx.HTTPError):
        return NetworkError(
            f"Could not reach the V0 API ({type(exc).__name__}). "
            "Please check your network connection and try again."
        )
    return V0Error(f"{label} failed: {exc}")
