"""
Async client for Azure-hosted image generation, editing and captioning models.
"""

__version__ = "1.0.0"

from .base import Capability, ImageModel, ImageRequest, Operation, setup_logging
from .client import AzureImageClient, ClientResult
from .config import ClientConfig, load_config
from .dalle3 import DALLE3Model
from .exceptions import (
    AzureImageError,
    ConfigurationError,
    ParseError,
    RemoteServiceError,
    TransportError,
    ValidationError,
)
from .gpt_image1 import GPTImage1Model, ImageEditingRequest
from .parsing import (
    BoundingBox,
    Caption,
    CaptionResult,
    DenseCaption,
    DenseCaptionResult,
    GeneratedImage,
    ImageEditingResponse,
    ImageGenerationResponse,
    StableImageResponse,
)
from .stable_image import StableImageCoreModel, StableImageRequest, StableImageUltraModel
from .validation import validate_request
from .vision_captioning import AzureVisionCaptioningModel, DenseCaptionRequest, ImageCaptionRequest

__all__ = [
    "AzureImageClient",
    "AzureImageError",
    "AzureVisionCaptioningModel",
    "BoundingBox",
    "Capability",
    "Caption",
    "CaptionResult",
    "ClientConfig",
    "ClientResult",
    "ConfigurationError",
    "DALLE3Model",
    "DenseCaption",
    "DenseCaptionRequest",
    "DenseCaptionResult",
    "GPTImage1Model",
    "GeneratedImage",
    "ImageCaptionRequest",
    "ImageEditingRequest",
    "ImageEditingResponse",
    "ImageGenerationResponse",
    "ImageModel",
    "ImageRequest",
    "Operation",
    "ParseError",
    "RemoteServiceError",
    "StableImageCoreModel",
    "StableImageRequest",
    "StableImageResponse",
    "StableImageUltraModel",
    "TransportError",
    "ValidationError",
    "__version__",
    "load_config",
    "setup_logging",
]
