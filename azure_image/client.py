"""
Client facade: the single entry point for running a request against a model.

Each call validates the request, sends it through the HTTP engine and parses
the response. Classified failures are returned as the ``error`` branch of a
ClientResult instead of being raised; cancellation propagates unchanged.
"""

import logging
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

import httpx

from .base import ImageModel, ImageRequest, Operation
from .exceptions import AzureImageError, ConfigurationError
from .http import ModelHttpClient, SleepFunc
from .parsing import CaptionResult, DenseCaptionResult, ImageEditingResponse, parse_response
from .validation import validate_request

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class ClientResult(Generic[T]):
    """Either a parsed response or the classified error that prevented it."""
    value: Optional[T] = None
    error: Optional[AzureImageError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the value, re-raising the error if the call failed."""
        if self.error is not None:
            raise self.error
        return self.value

    @classmethod
    def success(cls, value: T) -> "ClientResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: AzureImageError) -> "ClientResult[T]":
        return cls(error=error)


class AzureImageClient:
    """
    Runs generation, editing and captioning requests.

    The client holds no per-call state; one instance can serve concurrent
    calls for any number of models.
    """

    def __init__(
        self,
        http_client: Optional[httpx.AsyncClient] = None,
        sleep: Optional[SleepFunc] = None,
    ):
        self._http = ModelHttpClient(http_client=http_client, sleep=sleep)

    async def __aenter__(self) -> "AzureImageClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _run(self, model: ImageModel, request: ImageRequest):
        operation = request.operation
        if not model.supports(operation.capability):
            raise ConfigurationError(
                f"{model.model_name} does not support {operation.value} requests",
                model_name=model.model_name,
            )
        if request.model_class is not None and not isinstance(model, request.model_class):
            raise ConfigurationError(
                f"{type(request).__name__} must be sent to a {request.model_class.__name__}, "
                f"not {type(model).__name__}",
                model_name=model.model_name,
            )

        validate_request(request, model.constraints)
        response = await self._http.execute(model, request)
        parsed = parse_response(response.content, request.response_class, model.model_name)
        return request.finalize(parsed)

    async def execute(self, model: ImageModel, request: ImageRequest) -> ClientResult:
        """Validate, send and parse ``request`` for ``model``."""
        operation = request.operation.value
        logger.info(f"Running {operation} request on {model.model_name}")

        try:
            result = await self._run(model, request)
        except AzureImageError as e:
            if e.model_name is None:
                e.model_name = model.model_name
            logger.error(f"{operation} request on {model.model_name} failed: {e}")
            return ClientResult.failure(e)

        if getattr(result, "has_error", False):
            logger.warning(f"{model.model_name} returned an error object: {result.error.message}")
        else:
            logger.info(f"{operation} request on {model.model_name} completed")
        return ClientResult.success(result)

    def _require(self, model: ImageModel, request: ImageRequest, operation: Operation) -> Optional[ClientResult]:
        if request.operation is not operation:
            error = ConfigurationError(
                f"Expected a {operation.value} request, got {type(request).__name__} ({request.operation.value})",
                model_name=model.model_name,
            )
        elif not model.supports(operation.capability):
            error = ConfigurationError(
                f"{model.model_name} does not support {operation.capability.name.lower()}",
                model_name=model.model_name,
            )
        else:
            return None
        logger.error(f"Rejected request for {model.model_name}: {error.message}")
        return ClientResult.failure(error)

    async def generate_image(self, model: ImageModel, request: ImageRequest) -> ClientResult:
        return self._require(model, request, Operation.GENERATE) or await self.execute(model, request)

    async def edit_image(self, model: ImageModel, request: ImageRequest) -> "ClientResult[ImageEditingResponse]":
        return self._require(model, request, Operation.EDIT) or await self.execute(model, request)

    async def caption_image(self, model: ImageModel, request: ImageRequest) -> "ClientResult[CaptionResult]":
        return self._require(model, request, Operation.CAPTION) or await self.execute(model, request)

    async def dense_caption_image(
        self, model: ImageModel, request: ImageRequest
    ) -> "ClientResult[DenseCaptionResult]":
        return self._require(model, request, Operation.DENSE_CAPTION) or await self.execute(model, request)

    async def download(self, url: str) -> bytes:
        """Fetch a result URL through the shared transport."""
        return await self._http.download(url)
