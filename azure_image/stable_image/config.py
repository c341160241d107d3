"""
Model descriptors for the Stable Image family.

Core and Ultra share one request shape and endpoint; they differ only in the
model name sent to the service.
"""

from typing import ClassVar

from pydantic import Field

from ..base import Capability, GenerationModel, RequestConstraints

STABLE_IMAGE_CONSTRAINTS = RequestConstraints(
    sizes=None,
    output_formats=("png", "jpg", "jpeg", "webp"),
    min_count=1,
    max_count=1,
)


class StableImageModel(GenerationModel):
    """Common descriptor for Stable Image serverless deployments."""
    capabilities: ClassVar[Capability] = Capability.GENERATION
    constraints: ClassVar[RequestConstraints] = STABLE_IMAGE_CONSTRAINTS

    api_version: str = Field("2024-05-01-preview", description="Inference API version")
    default_size: str = Field("1024x1024", description="WIDTHxHEIGHT used when a request sets none")
    default_output_format: str = Field("png", description="png, jpg, jpeg or webp")

    @property
    def image_generation_path(self) -> str:
        return "images/generations"


class StableImageCoreModel(StableImageModel):
    model_name: str = Field("Stable-Image-Core", description="Model name")


class StableImageUltraModel(StableImageModel):
    model_name: str = Field("Stable-Image-Ultra", description="Model name")
