"""
HTTP invocation engine.

Builds the outbound call for a (model, request) pair and executes it over a
shared ``httpx.AsyncClient`` with bounded retry and exponential backoff.

Retry policy:
    - Network errors and timeouts, HTTP 429 and 5xx are retried.
    - Any other non-2xx status fails immediately.
    - A model with ``max_retry_attempts = k`` makes at most k + 1 attempts, waiting
      ``retry_delay * 2 ** (n - 1)`` seconds after failed attempt n.
    - Cancellation propagates out of both the request and the backoff wait and
      never triggers another attempt.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

import httpx
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from . import __version__
from .base import ImageModel, ImageRequest, Operation
from .exceptions import AzureImageError, ConfigurationError, RemoteServiceError, TransportError
from .parsing import parse_error_body
from .utils import guess_mime_type

logger = logging.getLogger(__name__)

USER_AGENT = f"azure-image-python/{__version__}"

SleepFunc = Callable[[float], Awaitable[None]]
FileField = Tuple[str, bytes, str]


@dataclass(frozen=True)
class PreparedCall:
    """Everything needed to send one logical request, possibly several times."""
    operation: Operation
    url: str
    params: Dict[str, str]
    headers: Dict[str, str]
    json: Optional[Dict[str, Any]] = None
    content: Optional[bytes] = None
    data: Optional[Dict[str, str]] = None
    files: Optional[Dict[str, FileField]] = field(default=None, repr=False)


def _form_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_call(model: ImageModel, request: ImageRequest) -> PreparedCall:
    """Assemble URL, query string, headers and body for ``request``."""
    operation = request.operation
    url = model.url_for(operation)
    params = {"api-version": model.api_version}
    params.update(request.query_params())
    headers = {"User-Agent": USER_AGENT}
    headers.update(model.auth_headers())

    if operation is Operation.GENERATE:
        return PreparedCall(operation, url, params, headers, json=request.to_payload(model))

    if operation is Operation.EDIT:
        fields = request.to_payload(model)
        files = {"image": (request.image_filename, request.image, guess_mime_type(request.image_filename))}
        if request.mask:
            files["mask"] = (request.mask_filename, request.mask, guess_mime_type(request.mask_filename))
        data = {key: _form_value(value) for key, value in fields.items()}
        return PreparedCall(operation, url, params, headers, data=data, files=files)

    if operation in (Operation.CAPTION, Operation.DENSE_CAPTION):
        if request.image is not None:
            headers["Content-Type"] = "application/octet-stream"
            return PreparedCall(operation, url, params, headers, content=request.image)
        return PreparedCall(operation, url, params, headers, json=request.to_payload(model))

    raise ConfigurationError(f"Unsupported operation: {operation}", model_name=model.model_name)


def _is_retryable(exc: BaseException) -> bool:
    return isinstance(exc, AzureImageError) and exc.retryable


class ModelHttpClient:
    """
    Stateless executor for prepared calls.

    The transport is the only shared resource. When one is passed in, the caller
    owns it and must close it; otherwise this object creates and closes its own.
    """

    def __init__(
        self,
        http_client: Optional[httpx.AsyncClient] = None,
        sleep: Optional[SleepFunc] = None,
        download_timeout: float = 60.0,
    ):
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient()
        self._sleep = sleep or asyncio.sleep
        self.download_timeout = download_timeout

    async def __aenter__(self) -> "ModelHttpClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _send_once(self, model: ImageModel, call: PreparedCall, attempt: int) -> httpx.Response:
        request = self._client.build_request(
            "POST",
            call.url,
            params=call.params,
            headers=call.headers,
            json=call.json,
            content=call.content,
            data=call.data,
            files=call.files,
            timeout=model.timeout,
        )
        logger.debug(f"Sending {call.operation.value} request to {call.url} (attempt {attempt})")

        try:
            response = await self._client.send(request)
        except httpx.TimeoutException as e:
            raise TransportError(
                f"Request timed out after {model.timeout}s", model_name=model.model_name
            ) from e
        except httpx.TransportError as e:
            raise TransportError(f"Network error: {e}", model_name=model.model_name) from e

        if response.is_success:
            logger.debug(f"Request to {model.model_name} succeeded with status {response.status_code}")
            return response

        body = response.text
        error = parse_error_body(body)
        logger.warning(f"Request to {model.model_name} failed with status {response.status_code}")
        raise RemoteServiceError(
            f"Request failed with status {response.status_code}"
            + (f": {error.message}" if error and error.message else ""),
            status_code=response.status_code,
            error_code=error.code if error else None,
            content_filtered=error.content_filtered if error else False,
            response_body=body,
            model_name=model.model_name,
        )

    async def send(self, model: ImageModel, call: PreparedCall) -> httpx.Response:
        """Execute ``call`` with the model's retry policy and return the 2xx response."""
        retrying = AsyncRetrying(
            stop=stop_after_attempt(model.max_retry_attempts + 1),
            wait=wait_exponential(multiplier=model.retry_delay, exp_base=2, min=0),
            retry=retry_if_exception(_is_retryable),
            sleep=self._sleep,
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )

        attempt_number = 0
        try:
            async for attempt in retrying:
                with attempt:
                    attempt_number = attempt.retry_state.attempt_number
                    response = await self._send_once(model, call, attempt_number)
        except AzureImageError as e:
            e.attempts = attempt_number
            raise
        return response

    async def execute(self, model: ImageModel, request: ImageRequest) -> httpx.Response:
        return await self.send(model, build_call(model, request))

    async def download(self, url: str) -> bytes:
        """Single GET of a result URL through the shared transport."""
        try:
            response = await self._client.get(
                url, headers={"User-Agent": USER_AGENT}, timeout=self.download_timeout
            )
        except httpx.TransportError as e:
            raise TransportError(f"Failed to download image from {url}: {e}") from e

        if not response.is_success:
            raise RemoteServiceError(
                f"Failed to download image from {url}",
                status_code=response.status_code,
                response_body=response.text,
            )
        return response.content
