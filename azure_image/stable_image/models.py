"""
Request model for Stable Image generation.
"""

from typing import Any, ClassVar, Dict, Optional, Type

from pydantic import Field

from ..base import ImageModel, ImageRequest, Operation
from ..parsing import StableImageResponse
from ..validation import canonical_or_default
from .config import StableImageModel


class StableImageRequest(ImageRequest):
    """Text-to-image request; the service answers with one inline image."""
    operation: ClassVar[Operation] = Operation.GENERATE
    response_class: ClassVar[Type[StableImageResponse]] = StableImageResponse
    model_class: ClassVar[type] = StableImageModel

    prompt: str = Field("", description="Text prompt for image generation")
    negative_prompt: Optional[str] = Field(None, description="What the image should not contain")
    size: Optional[str] = Field(None, description="WIDTHxHEIGHT, e.g. 1024x1024")
    output_format: Optional[str] = Field(None, description="png, jpg, jpeg or webp")
    seed: Optional[int] = Field(None, description="Seed for reproducible results")

    def to_payload(self, model: ImageModel) -> Dict[str, Any]:
        constraints = model.constraints
        payload = {
            "prompt": self.prompt,
            "negative_prompt": self.negative_prompt or None,
            "size": canonical_or_default(constraints, "size", self.size, model.default_size),
            "output_format": canonical_or_default(
                constraints, "output_format", self.output_format, model.default_output_format
            ),
            "seed": self.seed,
            "model": model.model_name,
        }
        return {key: value for key, value in payload.items() if value is not None}
