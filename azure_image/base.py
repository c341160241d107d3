"""
Model descriptors and capability contracts shared by every model variant.

A model variant is an immutable, validated pydantic model describing one remote
deployment (endpoint, credential, API version, defaults, timeout and retry
policy). Variants declare the operations they support through a capability
bitset and by deriving from the matching contract classes.
"""

import enum
import logging
import logging.config
from abc import abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Any, ClassVar, Dict, Optional, Tuple
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ConfigurationError
from .utils import parse_size


class Capability(enum.Flag):
    """Classes of operation a model variant may support."""
    NONE = 0
    GENERATION = enum.auto()
    EDITING = enum.auto()
    CAPTIONING = enum.auto()


class Operation(str, enum.Enum):
    """Tag carried by every request, used to dispatch the outbound call."""
    GENERATE = "generate"
    EDIT = "edit"
    CAPTION = "caption"
    DENSE_CAPTION = "denseCaptions"

    @property
    def capability(self) -> Capability:
        if self is Operation.GENERATE:
            return Capability.GENERATION
        if self is Operation.EDIT:
            return Capability.EDITING
        return Capability.CAPTIONING


class RequestConstraints(BaseModel):
    """Legal request values for one model variant."""
    model_config = ConfigDict(frozen=True)

    # None means any positive WIDTHxHEIGHT token is accepted.
    sizes: Optional[Tuple[str, ...]] = Field(None, description="Allowed size tokens")
    qualities: Tuple[str, ...] = Field((), description="Allowed quality tiers")
    styles: Tuple[str, ...] = Field((), description="Allowed style tokens")
    output_formats: Tuple[str, ...] = Field((), description="Allowed output formats")
    response_formats: Tuple[str, ...] = Field((), description="Allowed response formats")
    min_count: int = Field(1, description="Minimum number of images per request")
    max_count: int = Field(1, description="Maximum number of images per request")
    max_dense_captions: int = Field(10, description="Upper bound for dense captions")

    TABLES: ClassVar[Dict[str, str]] = {
        "size": "sizes",
        "quality": "qualities",
        "style": "styles",
        "output_format": "output_formats",
        "response_format": "response_formats",
    }

    def allowed(self, kind: str) -> Optional[Tuple[str, ...]]:
        return getattr(self, self.TABLES[kind])

    def canonical(self, kind: str, value: Optional[str]) -> Optional[str]:
        """Canonical spelling of ``value`` for the ``kind`` table, or None if illegal."""
        if value is None:
            return None

        if kind == "size" and self.sizes is None:
            parsed = parse_size(value)
            if parsed is None:
                return None
            return f"{parsed[0]}x{parsed[1]}"

        for candidate in self.allowed(kind):
            if candidate.lower() == value.lower():
                return candidate
        return None


def _describe_first_error(exc: PydanticValidationError) -> str:
    error = exc.errors()[0]
    location = ".".join(str(part) for part in error.get("loc", ())) or "value"
    message = error.get("msg", "invalid value")
    if message.startswith("Value error, "):
        message = message[len("Value error, "):]
    return f"{location}: {message}"


class ImageModel(BaseModel):
    """
    Immutable descriptor for one remote image model deployment.

    Construction validates every descriptor-level field and raises
    ConfigurationError on the first violation. Instances cannot be mutated.
    """
    model_config = ConfigDict(frozen=True, extra="forbid", protected_namespaces=())

    capabilities: ClassVar[Capability] = Capability.NONE
    constraints: ClassVar[RequestConstraints] = RequestConstraints()
    auth_header: ClassVar[str] = "Authorization"
    auth_scheme: ClassVar[Optional[str]] = "Bearer"

    model_name: str = Field(..., description="Model name sent to and reported by the service")
    endpoint: str = Field(..., description="Absolute HTTP(S) base URL of the resource")
    api_key: str = Field(..., repr=False, description="Static API key or subscription key")
    api_version: str = Field(..., description="Value of the api-version query parameter")
    deployment_name: Optional[str] = Field(None, description="Deployment identifier")
    timeout: float = Field(300.0, gt=0, description="Per-attempt request timeout in seconds")
    max_retry_attempts: int = Field(3, ge=0, description="Retries after the initial attempt")
    retry_delay: float = Field(1.0, ge=0, description="Base backoff delay in seconds")

    def __init__(self, **data: Any):
        try:
            super().__init__(**data)
        except PydanticValidationError as e:
            raise ConfigurationError(
                f"Invalid {type(self).__name__} configuration: {_describe_first_error(e)}",
                model_name=data.get("model_name"),
            ) from e

    @classmethod
    def create(cls, endpoint: str, api_key: str, **overrides: Any) -> "ImageModel":
        """Build a descriptor from caller values merged over the variant defaults."""
        return cls(endpoint=endpoint, api_key=api_key, **overrides)

    @field_validator("endpoint")
    @classmethod
    def _check_endpoint(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("Endpoint is required")
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc or " " in value:
            raise ValueError("Endpoint must be a valid absolute HTTP or HTTPS URL")
        return value

    @field_validator("api_key", "model_name", "api_version")
    @classmethod
    def _check_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("Value must not be empty")
        return value

    @model_validator(mode="after")
    def _check_defaults(self) -> "ImageModel":
        for kind in ("size", "quality", "style", "output_format", "response_format"):
            value = getattr(self, f"default_{kind}", None)
            if value is None:
                continue
            if self.constraints.canonical(kind, value) is None:
                allowed = self.constraints.allowed(kind)
                choices = ", ".join(allowed) if allowed else "WIDTHxHEIGHT"
                raise ValueError(f"default_{kind} must be one of: {choices}")
        return self

    def supports(self, capability: Capability) -> bool:
        return bool(self.capabilities & capability)

    def endpoint_path(self, operation: Operation) -> str:
        """Capability-specific path for ``operation``."""
        if not self.supports(operation.capability):
            raise ConfigurationError(
                f"{self.model_name} does not support {operation.value}",
                model_name=self.model_name,
            )
        if operation is Operation.GENERATE:
            return self.image_generation_path
        if operation is Operation.EDIT:
            return self.image_editing_path
        return self.image_analysis_path

    def url_for(self, operation: Operation) -> str:
        return f"{self.endpoint.rstrip('/')}/{self.endpoint_path(operation).lstrip('/')}"

    def auth_headers(self) -> Dict[str, str]:
        if self.auth_scheme:
            return {self.auth_header: f"{self.auth_scheme} {self.api_key}"}
        return {self.auth_header: self.api_key}


class ImageRequest(BaseModel):
    """
    Base class for per-call request models.

    Requests are plain data: validation happens separately against the owning
    model's constraints, and serialization fills unset fields from the model
    defaults.
    """
    model_config = ConfigDict(protected_namespaces=())

    operation: ClassVar[Operation] = Operation.GENERATE
    # Parsed response type; set by each concrete request class.
    response_class: ClassVar[Optional[type]] = None
    # Descriptor class this request can be sent to.
    model_class: ClassVar[Optional[type]] = None

    def query_params(self) -> Dict[str, str]:
        """Extra query parameters for this request, besides api-version."""
        return {}

    def to_payload(self, model: ImageModel) -> Dict[str, Any]:
        """JSON body for this request."""
        raise NotImplementedError

    def finalize(self, response: Any) -> Any:
        """Hook applied to the parsed response before it is returned."""
        return response


class GenerationModel(ImageModel):
    """Contract for models that turn a prompt into images."""
    capabilities: ClassVar[Capability] = Capability.GENERATION

    @property
    @abstractmethod
    def image_generation_path(self) -> str:
        """Path of the generation endpoint, relative to the base endpoint."""


class EditingModel(ImageModel):
    """Contract for models that edit an uploaded image."""
    capabilities: ClassVar[Capability] = Capability.EDITING

    @property
    @abstractmethod
    def image_editing_path(self) -> str:
        """Path of the editing endpoint, relative to the base endpoint."""


class CaptioningModel(ImageModel):
    """Contract for models that describe an image in text."""
    capabilities: ClassVar[Capability] = Capability.CAPTIONING

    @property
    @abstractmethod
    def image_analysis_path(self) -> str:
        """Path of the analysis endpoint, relative to the base endpoint."""


def setup_logging(level: str = "INFO", log_dir: Optional[str] = None) -> None:
    """Configure console logging and, when ``log_dir`` is set, a dated log file."""
    handlers: Dict[str, Dict[str, Any]] = {
        "default": {
            "level": level,
            "formatter": "standard",
            "class": "logging.StreamHandler",
        },
    }

    if log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        date_str = datetime.now().strftime("%Y-%m-%d")
        handlers["file"] = {
            "level": level,
            "formatter": "standard",
            "class": "logging.FileHandler",
            "filename": str(log_path / f"{date_str}_azure_image.log"),
            "mode": "a",
        }

    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
            },
        },
        "handlers": handlers,
        "loggers": {
            "": {
                "handlers": list(handlers),
                "level": level,
                "propagate": False,
            }
        },
    }

    logging.config.dictConfig(logging_config)
