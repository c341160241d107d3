"""
Model descriptor for DALL-E 3.
"""

from typing import Any, ClassVar

from pydantic import Field, field_validator

from ..base import Capability, GenerationModel, RequestConstraints

DALLE3_CONSTRAINTS = RequestConstraints(
    sizes=("1024x1024", "1792x1024", "1024x1792"),
    qualities=("standard", "hd"),
    styles=("natural", "vivid"),
    response_formats=("url", "b64_json"),
    min_count=1,
    max_count=1,
)


class DALLE3Model(GenerationModel):
    """DALL-E 3 deployment. Generates exactly one image per request."""
    capabilities: ClassVar[Capability] = Capability.GENERATION
    constraints: ClassVar[RequestConstraints] = DALLE3_CONSTRAINTS

    model_name: str = Field("dall-e-3", description="Model name")
    api_version: str = Field("2024-02-01", description="Azure OpenAI API version")
    deployment_name: str = Field(..., description="Azure OpenAI deployment name")
    default_size: str = Field("1024x1024", description="Size used when a request sets none")
    default_quality: str = Field("standard", description="Quality used when a request sets none")
    default_style: str = Field("vivid", description="Style used when a request sets none")
    default_response_format: str = Field("url", description="url or b64_json")

    @field_validator("deployment_name")
    @classmethod
    def _check_deployment(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("Deployment name is required")
        return value

    @classmethod
    def create(cls, endpoint: str, api_key: str, deployment_name: str = "", **overrides: Any) -> "DALLE3Model":
        return cls(endpoint=endpoint, api_key=api_key, deployment_name=deployment_name, **overrides)

    @property
    def image_generation_path(self) -> str:
        return f"openai/deployments/{self.deployment_name}/images/generations"
