import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any, TypeVar

import httpx

from v0_mcp.client.content import build_component_response
from v0_mcp.client.errors import (
    HTTPStatusFailure,
    MalformedResponseError,
    V0Error,
    ValidationError,
    classify_failure,
    failure_detail,
)
from v0_mcp.client.streaming import StreamDecoder
from v0_mcp.config import GenerationDefaults, Settings
from v0_mcp.models.request import IMAGE_KINDS, GenerationRequest, ImageInput
from v0_mcp.models.response import ComponentResponse, StreamingResponse

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_BASE_URL = "https://api.v0.dev/v1"
CHAT_COMPLETIONS_PATH = "/chat/completions"

# Leading base64 characters of common image signatures.
_IMAGE_SIGNATURES = (
    ("iVBORw0KGgo", "image/png"),
    ("/9j/", "image/jpeg"),
    ("R0lGOD", "image/gif"),
    ("UklGR", "image/webp"),
)


def image_data_uri(image: ImageInput) -> str:
    mime = next((m for prefix, m in _IMAGE_SIGNATURES if image.data.startswith(prefix)), "image/jpeg")
    return f"data:{mime};base64,{image.data}"


def build_messages(request: GenerationRequest) -> list[dict[str, Any]]:
    return [{"role": "user", "content": request.prompt}]


def build_multimodal_messages(request: GenerationRequest) -> list[dict[str, Any]]:
    """One user message: the prompt, one part per image, then the optional analysis instructions."""
    content: list[dict[str, Any]] = [{"type": "text", "text": request.prompt}]
    for image in request.images:
        content.append(
            {
                "type": "image_url",
                "image_url": {
                    "url": image_data_uri(image),
                    "detail": "high" if image.kind == "wireframe" else "auto",
                },
            }
        )
    if request.image_analysis_prompt:
        content.append(
            {
                "type": "text",
                "text": f"\n\nImage Analysis Instructions: {request.image_analysis_prompt}",
            }
        )
    return [{"role": "user", "content": content}]


def _first_choice_content(body: dict[str, Any]) -> str:
    choice = body["choices"][0]
    message = choice.get("message") if isinstance(choice, dict) else None
    if not isinstance(message, dict):
        raise MalformedResponseError(
            "Invalid response from v0 API: the first choice carries no message. "
            "The service may be experiencing issues; please try again later."
        )
    content = message.get("content")
    if not isinstance(content, str) or not content.strip():
        raise MalformedResponseError(
            "V0 API returned empty content. This may indicate the request was too complex "
            "or the service is experiencing issues. Please try simplifying your request."
        )
    return content


def _response_detail(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = None
    return failure_detail(response.text, payload)


class V0Client:
    """Async client for the v0.dev chat-completion API.

    Request defaults (model, temperature, stream flag, retry policy) come from
    the ``GenerationDefaults`` given at construction. The API key is only ever
    sent in the Authorization header.
    """

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        defaults: GenerationDefaults | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.defaults = defaults or GenerationDefaults()
        self._http = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers={"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: Settings, api_key: str | None = None) -> "V0Client":
        """Build a client from application settings, optionally overriding the API key."""
        return cls(
            api_key if api_key is not None else settings.v0_api_key,
            base_url=settings.v0_base_url,
            defaults=GenerationDefaults.from_settings(settings),
            timeout=settings.request_timeout,
        )

    async def __aenter__(self) -> "V0Client":
        return self

    async def __aexit__(self, *_) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # ── Validation ─────────────────────────────────────────────────────────

    @staticmethod
    def _validate_prompt(request: GenerationRequest, *, multimodal: bool = False) -> None:
        if not request.prompt or not request.prompt.strip():
            if multimodal:
                raise ValidationError(
                    "Multimodal component generation requires a non-empty prompt describing "
                    "what to create from the image(s)."
                )
            raise ValidationError(
                "Component generation requires a non-empty prompt describing the component to create."
            )
        if request.temperature is not None and not 0 <= request.temperature <= 2:
            raise ValidationError(
                f"Temperature {request.temperature} is out of range. "
                "Please use a temperature between 0 and 2 for component generation."
            )

    @staticmethod
    def _validate_images(request: GenerationRequest) -> None:
        if not request.images:
            raise ValidationError(
                "Multimodal generation requires at least one image (wireframe, design, or screenshot). "
                "Please attach an image and try again."
            )
        for index, image in enumerate(request.images, start=1):
            if not image.data or not image.data.strip():
                raise ValidationError(f"Image {index} has no data. Please provide valid base64 encoded image data.")
            if image.kind not in IMAGE_KINDS:
                raise ValidationError(
                    f'Image {index} has invalid type "{image.kind}". '
                    "Must be one of: wireframe, design, screenshot, reference."
                )

    # ── Transport ──────────────────────────────────────────────────────────

    def _payload(self, messages: list[dict[str, Any]], request: GenerationRequest, *, stream: bool) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": self.defaults.model,
            "messages": messages,
            "temperature": request.temperature if request.temperature is not None else self.defaults.temperature,
            "stream": stream,
        }
        if request.max_tokens is not None:
            payload["max_tokens"] = request.max_tokens
        return payload

    async def _post(self, payload: dict[str, Any]) -> dict[str, Any]:
        response = await self._http.post(CHAT_COMPLETIONS_PATH, json=payload)
        if response.is_error:
            raise HTTPStatusFailure(response.status_code, _response_detail(response))

        try:
            body = response.json()
        except ValueError as exc:
            raise MalformedResponseError(
                "V0 API returned a body that is not valid JSON. "
                "The service may be experiencing issues; please try again later."
            ) from exc

        choices = body.get("choices") if isinstance(body, dict) else None
        if not isinstance(choices, list) or not choices:
            raise MalformedResponseError(
                "Invalid response from v0 API: missing or empty choices array. "
                "The API may be experiencing issues; please try again later."
            )
        return body

    async def _request_content(self, payload: dict[str, Any], *, multimodal: bool) -> str:
        try:
            body = await self._post(payload)
        except (HTTPStatusFailure, httpx.HTTPError) as exc:
            error = classify_failure(exc, multimodal=multimodal)
            logger.warning("v0 request failed: %s", error)
            raise error from exc
        return _first_choice_content(body)

    # ── Generation ─────────────────────────────────────────────────────────

    async def complete(self, request: GenerationRequest) -> str:
        """Send a text prompt and return the model's raw answer."""
        self._validate_prompt(request)
        stream = request.stream if request.stream is not None else self.defaults.stream
        payload = self._payload(build_messages(request), request, stream=stream)
        return await self._request_content(payload, multimodal=False)

    async def generate(self, request: GenerationRequest) -> ComponentResponse:
        content = await self.complete(request)
        return build_component_response(content)

    async def generate_multimodal(self, request: GenerationRequest) -> ComponentResponse:
        self._validate_prompt(request, multimodal=True)
        self._validate_images(request)
        stream = request.stream if request.stream is not None else self.defaults.stream
        payload = self._payload(build_multimodal_messages(request), request, stream=stream)
        logger.info("Sending multimodal request with %d image(s)", len(request.images))
        content = await self._request_content(payload, multimodal=True)
        return build_component_response(content)

    async def _with_retry(self, operation: Callable[[], Awaitable[T]], max_attempts: int | None) -> T:
        attempts = max_attempts if max_attempts is not None else self.defaults.max_attempts
        if attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {attempts}")

        attempt = 1
        while True:
            try:
                return await operation()
            except V0Error as exc:
                if not exc.retryable or attempt >= attempts:
                    raise
                delay = attempt * self.defaults.backoff_seconds
                logger.warning(
                    "Attempt %d/%d failed (%s); retrying in %.1fs", attempt, attempts, type(exc).__name__, delay
                )
            await asyncio.sleep(delay)
            attempt += 1

    async def generate_with_retry(self, request: GenerationRequest, max_attempts: int | None = None) -> ComponentResponse:
        return await self._with_retry(lambda: self.generate(request), max_attempts)

    async def generate_multimodal_with_retry(
        self, request: GenerationRequest, max_attempts: int | None = None
    ) -> ComponentResponse:
        return await self._with_retry(lambda: self.generate_multimodal(request), max_attempts)

    async def complete_with_retry(self, request: GenerationRequest, max_attempts: int | None = None) -> str:
        return await self._with_retry(lambda: self.complete(request), max_attempts)

    async def test_connection(self) -> bool:
        """Probe the API with a one-token request. Any failure is reported as False."""
        payload = {
            "model": self.defaults.model,
            "messages": [{"role": "user", "content": "test"}],
            "max_tokens": 1,
        }
        try:
            await self._post(payload)
        except (V0Error, HTTPStatusFailure, httpx.HTTPError) as exc:
            logger.debug("Connection probe failed: %s", classify_failure(exc))
            return False
        return True

    # ── Streaming ──────────────────────────────────────────────────────────

    async def stream_generate(self, request: GenerationRequest) -> AsyncIterator[StreamingResponse]:
        """Yield content chunks as the provider streams them.

        The byte stream is released on every exit path, including a consumer
        that stops iterating early.
        """
        self._validate_prompt(request)
        payload = self._payload(build_messages(request), request, stream=True)
        decoder = StreamDecoder()

        try:
            async with self._http.stream("POST", CHAT_COMPLETIONS_PATH, json=payload) as response:
                if response.is_error:
                    await response.aread()
                    raise HTTPStatusFailure(response.status_code, _response_detail(response))
                async for data in response.aiter_bytes():
                    for event in decoder.feed(data):
                        yield event
                    if decoder.complete:
                        return
                for event in decoder.finish():
                    yield event
        except (HTTPStatusFailure, httpx.HTTPError) as exc:
            error = classify_failure(exc)
            logger.warning("v0 streaming request failed: %s", error)
            raise error from exc

        if not decoder.complete:
            raise MalformedResponseError(
                "V0 streaming response ended before the completion marker. "
                "The connection may have been interrupted; please retry the request."
            )
