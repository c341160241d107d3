"""
Response parsing into typed results.

Response bodies are deserialized with pydantic models whose optional fields
stay ``None`` when absent, so "field missing" is never confused with a zero
default. A top-level ``error`` object short-circuits parsing of the success
fields; only the partial metadata a response type allows is kept beside it.
"""

import base64
import binascii
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, ClassVar, Dict, List, Optional, Tuple, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ParseError

logger = logging.getLogger(__name__)

CONTENT_FILTER_CODES = ("contentfilter", "content_policy_violation")


class ErrorInfo(BaseModel):
    """Structured error object returned by the service."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    code: Optional[str] = Field(None, description="Service error code")
    message: Optional[str] = Field(None, description="Human readable error message")

    @property
    def content_filtered(self) -> bool:
        return bool(self.code) and self.code.lower() in CONTENT_FILTER_CODES


class ServiceResponse(BaseModel):
    """Base class for parsed response bodies."""
    model_config = ConfigDict(
        frozen=True, extra="ignore", populate_by_name=True, protected_namespaces=()
    )

    # Wire keys kept alongside a top-level error object.
    partial_fields: ClassVar[Tuple[str, ...]] = ()
    # Attributes that must be present when there is no error.
    required_on_success: ClassVar[Tuple[str, ...]] = ()

    error: Optional[ErrorInfo] = Field(None, description="Error reported in the body")

    @model_validator(mode="after")
    def _require_success_fields(self) -> "ServiceResponse":
        if self.error is not None:
            return self
        for name in self.required_on_success:
            if getattr(self, name) is None:
                field = type(self).model_fields[name]
                raise ValueError(f"Missing required field '{field.alias or name}'")
        return self

    @property
    def has_error(self) -> bool:
        return self.error is not None


def _decode_base64(data: str) -> bytes:
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ParseError("Invalid base64 image data", payload=data[:200]) from e


def _write_file(file_path: Union[str, Path], data: bytes) -> Path:
    path = Path(file_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    logger.info(f"Saved {len(data)} bytes to {path}")
    return path


class GeneratedImage(BaseModel):
    """One entry of a generation/editing response: inline data or a download URL."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    url: Optional[str] = Field(None, description="Time-limited download URL")
    b64_json: Optional[str] = Field(None, description="Inline base64 image data")
    revised_prompt: Optional[str] = Field(None, description="Prompt actually used")

    @model_validator(mode="after")
    def _require_payload(self) -> "GeneratedImage":
        if not self.url and not self.b64_json:
            raise ValueError("Image entry has neither 'url' nor 'b64_json'")
        return self

    @property
    def has_url(self) -> bool:
        return bool(self.url)

    @property
    def has_base64_data(self) -> bool:
        return bool(self.b64_json)

    def get_image_bytes(self) -> bytes:
        """Decode the inline payload."""
        if not self.has_base64_data:
            raise ValueError("No base64 image data available; use fetch_bytes() for URL results")
        return _decode_base64(self.b64_json)

    async def fetch_bytes(self, downloader=None) -> bytes:
        """
        Image bytes regardless of how the service returned them.

        Inline data is decoded; otherwise the URL is downloaded through
        ``downloader`` (anything with an async ``download(url)`` method, such as
        ModelHttpClient or AzureImageClient).
        """
        if self.has_base64_data:
            return self.get_image_bytes()
        if downloader is None:
            raise ValueError("A downloader is required for URL-based images")
        return await downloader.download(self.url)

    async def save(self, file_path: Union[str, Path], downloader=None) -> Path:
        data = await self.fetch_bytes(downloader)
        return _write_file(file_path, data)


class ImageGenerationResponse(ServiceResponse):
    """``{created, data[]}`` body of the generation and editing endpoints."""
    partial_fields: ClassVar[Tuple[str, ...]] = ("created",)
    required_on_success: ClassVar[Tuple[str, ...]] = ("created", "data")

    created: Optional[int] = Field(None, description="Unix timestamp of creation")
    data: Optional[List[GeneratedImage]] = Field(None, description="Generated images")

    @property
    def images(self) -> List[GeneratedImage]:
        return list(self.data or [])

    @property
    def created_at(self) -> Optional[datetime]:
        if self.created is None:
            return None
        return datetime.fromtimestamp(self.created, tz=timezone.utc)


class ImageEditingResponse(ImageGenerationResponse):
    """The editing endpoint answers with the generation response shape."""


class StableImageMetadata(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", protected_namespaces=())

    width: Optional[int] = None
    height: Optional[int] = None
    format: Optional[str] = None
    seed: Optional[int] = None
    model: Optional[str] = None


class StableImageResponse(ServiceResponse):
    """Inline ``{image, metadata?}`` body returned by the Stable Image models."""
    partial_fields: ClassVar[Tuple[str, ...]] = ("metadata",)
    required_on_success: ClassVar[Tuple[str, ...]] = ("image",)

    image: Optional[str] = Field(None, description="Base64 encoded image")
    metadata: Optional[StableImageMetadata] = None

    def get_image_bytes(self) -> bytes:
        if not self.image:
            raise ValueError("No image data available")
        return _decode_base64(self.image)

    async def fetch_bytes(self, downloader=None) -> bytes:
        return self.get_image_bytes()

    async def save(self, file_path: Union[str, Path], downloader=None) -> Path:
        return _write_file(file_path, self.get_image_bytes())


class ImageMetadata(BaseModel):
    """Dimensions of the analyzed image; either side may be unknown."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    width: Optional[int] = Field(None, ge=0)
    height: Optional[int] = Field(None, ge=0)


class Caption(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    text: str
    confidence: float = Field(..., ge=0.0, le=1.0)


class BoundingBox(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    x: int = Field(..., ge=0)
    y: int = Field(..., ge=0)
    width: int = Field(..., gt=0, alias="w")
    height: int = Field(..., gt=0, alias="h")

    def as_tuple(self) -> Tuple[int, int, int, int]:
        return self.x, self.y, self.width, self.height

    def __str__(self) -> str:
        return f"X={self.x}, Y={self.y}, Width={self.width}, Height={self.height}"


class DenseCaption(Caption):
    """Caption scoped to one region; the region stays None when not reported."""
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    bounding_box: Optional[BoundingBox] = Field(None, alias="boundingBox")


class CaptionResult(ServiceResponse):
    partial_fields: ClassVar[Tuple[str, ...]] = ("modelVersion", "metadata")
    required_on_success: ClassVar[Tuple[str, ...]] = ("model_version", "caption")

    model_version: Optional[str] = Field(None, alias="modelVersion")
    metadata: Optional[ImageMetadata] = None
    caption: Optional[Caption] = Field(None, alias="captionResult")


class DenseCaptionList(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    values: List[DenseCaption]


class DenseCaptionResult(ServiceResponse):
    partial_fields: ClassVar[Tuple[str, ...]] = ("modelVersion", "metadata")
    required_on_success: ClassVar[Tuple[str, ...]] = ("model_version", "dense_captions")

    model_version: Optional[str] = Field(None, alias="modelVersion")
    metadata: Optional[ImageMetadata] = None
    dense_captions: Optional[DenseCaptionList] = Field(None, alias="denseCaptionsResult")

    @property
    def captions(self) -> List[DenseCaption]:
        if self.dense_captions is None:
            return []
        return list(self.dense_captions.values)


ResponseT = TypeVar("ResponseT", bound=ServiceResponse)


def _as_text(body: Union[bytes, str, None]) -> str:
    if body is None:
        return ""
    if isinstance(body, bytes):
        return body.decode("utf-8", errors="replace")
    return body


def _first_error(exc: PydanticValidationError) -> str:
    error = exc.errors()[0]
    location = ".".join(str(part) for part in error.get("loc", ()))
    message = error.get("msg", "invalid value")
    if message.startswith("Value error, "):
        message = message[len("Value error, "):]
    return f"{location}: {message}" if location else message


def load_json_object(body: Union[bytes, str, None], model_name: Optional[str] = None) -> Dict[str, Any]:
    text = _as_text(body)
    if not text.strip():
        raise ParseError("Empty response received from server", payload=text, model_name=model_name)

    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseError(
            f"Response body is not valid JSON: {e.msg}", payload=text, model_name=model_name
        ) from e

    if not isinstance(payload, dict):
        raise ParseError("Response body must be a JSON object", payload=text, model_name=model_name)
    return payload


def parse_response(
    body: Union[bytes, str, None],
    response_type: Type[ResponseT],
    model_name: Optional[str] = None,
) -> ResponseT:
    """Deserialize ``body`` into ``response_type`` or raise ParseError."""
    payload = load_json_object(body, model_name)

    if payload.get("error") is not None:
        payload = {
            key: value for key, value in payload.items()
            if key == "error" or key in response_type.partial_fields
        }
        logger.debug(f"Response from {model_name} carries an error object")

    try:
        return response_type.model_validate(payload)
    except PydanticValidationError as e:
        raise ParseError(
            f"Response did not match {response_type.__name__}: {_first_error(e)}",
            payload=_as_text(body),
            model_name=model_name,
        ) from e


def parse_error_body(body: Union[bytes, str, None]) -> Optional[ErrorInfo]:
    """Best-effort extraction of ``{"error": {...}}`` from a failed response."""
    try:
        payload = json.loads(_as_text(body))
    except (json.JSONDecodeError, TypeError):
        return None

    if not isinstance(payload, dict) or not isinstance(payload.get("error"), dict):
        return None
    try:
        return ErrorInfo.model_validate(payload["error"])
    except PydanticValidationError:
        return None
