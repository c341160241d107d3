"""
Request models for image captioning.

The image is supplied either as raw bytes (sent as an octet stream) or as a
publicly reachable URL (sent as ``{"url": ...}``), never both.
"""

from pathlib import Path
from typing import Any, ClassVar, Dict, Optional, Type, Union

from pydantic import Field

from ..base import ImageModel, ImageRequest, Operation
from ..parsing import CaptionResult, DenseCaptionList, DenseCaptionResult
from .config import AzureVisionCaptioningModel


class CaptionRequest(ImageRequest):
    """Fields shared by single and dense caption requests."""
    model_class: ClassVar[type] = AzureVisionCaptioningModel

    image: Optional[bytes] = Field(None, repr=False, description="Raw image bytes")
    image_url: Optional[str] = Field(None, description="URL of the image to analyze")
    language: str = Field("en", description="Language of the returned captions")
    gender_neutral_caption: bool = Field(False, description="Use gender-neutral wording")
    max_dense_captions: int = Field(10, description="Maximum number of dense captions kept (1-10)")

    def query_params(self) -> Dict[str, str]:
        params = {"features": self.operation.value, "language": self.language}
        if self.gender_neutral_caption:
            params["gender-neutral-caption"] = "true"
        return params

    def to_payload(self, model: ImageModel) -> Dict[str, Any]:
        return {"url": self.image_url}

    @classmethod
    def from_file(cls, image_path: Union[str, Path], **fields: Any) -> "CaptionRequest":
        path = Path(image_path)
        if not path.exists():
            raise FileNotFoundError(f"Image file not found: {path}")
        return cls(image=path.read_bytes(), **fields)


class ImageCaptionRequest(CaptionRequest):
    """One caption describing the whole image."""
    operation: ClassVar[Operation] = Operation.CAPTION
    response_class: ClassVar[Type[CaptionResult]] = CaptionResult


class DenseCaptionRequest(CaptionRequest):
    """Region captions with bounding boxes."""
    operation: ClassVar[Operation] = Operation.DENSE_CAPTION
    response_class: ClassVar[Type[DenseCaptionResult]] = DenseCaptionResult

    def finalize(self, response: DenseCaptionResult) -> DenseCaptionResult:
        captions = response.captions
        if len(captions) <= self.max_dense_captions:
            return response
        trimmed = DenseCaptionList(values=captions[: self.max_dense_captions])
        return response.model_copy(update={"dense_captions": trimmed})
