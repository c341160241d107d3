"""
Request model for DALL-E 3 image generation.
"""

from typing import Any, ClassVar, Dict, Optional, Type

from pydantic import Field

from ..base import ImageModel, ImageRequest, Operation
from ..parsing import ImageGenerationResponse
from ..validation import canonical_or_default
from .config import DALLE3Model


class ImageGenerationRequest(ImageRequest):
    """Text-to-image request. Unset tokens fall back to the model defaults."""
    operation: ClassVar[Operation] = Operation.GENERATE
    response_class: ClassVar[Type[ImageGenerationResponse]] = ImageGenerationResponse
    model_class: ClassVar[type] = DALLE3Model

    prompt: str = Field("", description="Text prompt for image generation")
    size: Optional[str] = Field(None, description="1024x1024, 1792x1024 or 1024x1792")
    n: int = Field(1, description="Number of images; DALL-E 3 only supports 1")
    quality: Optional[str] = Field(None, description="standard or hd")
    style: Optional[str] = Field(None, description="natural or vivid")
    response_format: Optional[str] = Field(None, description="url or b64_json")

    def to_payload(self, model: ImageModel) -> Dict[str, Any]:
        constraints = model.constraints
        return {
            "prompt": self.prompt,
            "size": canonical_or_default(constraints, "size", self.size, model.default_size),
            "n": self.n,
            "quality": canonical_or_default(constraints, "quality", self.quality, model.default_quality),
            "style": canonical_or_default(constraints, "style", self.style, model.default_style),
            "response_format": canonical_or_default(
                constraints, "response_format", self.response_format, model.default_response_format
            ),
        }
