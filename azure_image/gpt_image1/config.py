"""
Model descriptor for GPT-Image-1.
"""

from typing import Any, ClassVar

from pydantic import Field, field_validator

from ..base import Capability, EditingModel, GenerationModel, RequestConstraints

GPT_IMAGE1_CONSTRAINTS = RequestConstraints(
    sizes=("1024x1024", "1024x1536", "1536x1024"),
    qualities=("low", "medium", "high"),
    output_formats=("PNG", "JPEG"),
    min_count=1,
    max_count=10,
)


class GPTImage1Model(GenerationModel, EditingModel):
    """GPT-Image-1 deployment supporting both generation and editing."""
    capabilities: ClassVar[Capability] = Capability.GENERATION | Capability.EDITING
    constraints: ClassVar[RequestConstraints] = GPT_IMAGE1_CONSTRAINTS

    model_name: str = Field("gpt-image-1", description="Model name")
    api_version: str = Field("2025-04-01-preview", description="Azure OpenAI API version")
    deployment_name: str = Field(..., description="Azure OpenAI deployment name")
    default_size: str = Field("1024x1024", description="Size used when a request sets none")
    default_quality: str = Field("high", description="low, medium or high")
    default_output_format: str = Field("PNG", description="PNG or JPEG")
    default_compression: int = Field(100, ge=0, le=100, description="Output compression (0-100)")

    @field_validator("deployment_name")
    @classmethod
    def _check_deployment(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("Deployment name is required")
        return value

    @classmethod
    def create(cls, endpoint: str, api_key: str, deployment_name: str = "", **overrides: Any) -> "GPTImage1Model":
        return cls(endpoint=endpoint, api_key=api_key, deployment_name=deployment_name, **overrides)

    @property
    def image_generation_path(self) -> str:
        return f"openai/deployments/{self.deployment_name}/images/generations"

    @property
    def image_editing_path(self) -> str:
        return f"openai/deployments/{self.deployment_name}/images/edits"
