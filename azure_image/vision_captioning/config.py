"""
Model descriptor for Azure AI Vision captioning.
"""

from typing import ClassVar, Optional

from pydantic import Field

from ..base import Capability, CaptioningModel, RequestConstraints

VISION_CAPTIONING_CONSTRAINTS = RequestConstraints(max_dense_captions=10)


class AzureVisionCaptioningModel(CaptioningModel):
    """Computer Vision resource authenticated with a subscription key."""
    capabilities: ClassVar[Capability] = Capability.CAPTIONING
    constraints: ClassVar[RequestConstraints] = VISION_CAPTIONING_CONSTRAINTS
    auth_header: ClassVar[str] = "Ocp-Apim-Subscription-Key"
    auth_scheme: ClassVar[Optional[str]] = None

    model_name: str = Field("azure-vision-captioning", description="Model name")
    api_version: str = Field("2024-02-01", description="Image Analysis API version")
    timeout: float = Field(30.0, gt=0, description="Per-attempt request timeout in seconds")

    @property
    def image_analysis_path(self) -> str:
        return "computervision/imageanalysis:analyze"
