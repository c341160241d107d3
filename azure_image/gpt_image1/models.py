"""
Request models for GPT-Image-1 generation and editing.

Editing requests are sent as multipart/form-data: the image and optional mask
travel as file parts and every other field as a form field.
"""

from pathlib import Path
from typing import Any, ClassVar, Dict, Optional, Type, Union

from pydantic import Field

from ..base import ImageModel, ImageRequest, Operation
from ..exceptions import ValidationError
from ..parsing import ImageEditingResponse, ImageGenerationResponse
from ..validation import canonical_or_default
from .config import GPTImage1Model


class ImageGenerationRequest(ImageRequest):
    """Text-to-image request for GPT-Image-1."""
    operation: ClassVar[Operation] = Operation.GENERATE
    response_class: ClassVar[Type[ImageGenerationResponse]] = ImageGenerationResponse
    model_class: ClassVar[type] = GPTImage1Model

    prompt: str = Field("", description="Text prompt for image generation")
    size: Optional[str] = Field(None, description="1024x1024, 1024x1536 or 1536x1024")
    n: Optional[int] = Field(1, description="Number of images to generate (1-10)")
    quality: Optional[str] = Field(None, description="low, medium or high")
    output_format: Optional[str] = Field(None, description="PNG or JPEG")
    output_compression: Optional[int] = Field(None, description="Compression level (0-100)")
    user: Optional[str] = Field(None, description="End-user identifier for abuse monitoring")

    def to_payload(self, model: ImageModel) -> Dict[str, Any]:
        constraints = model.constraints
        payload = {
            "model": model.model_name,
            "prompt": self.prompt,
            "size": canonical_or_default(constraints, "size", self.size, model.default_size),
            "n": self.n,
            "quality": canonical_or_default(constraints, "quality", self.quality, model.default_quality),
            "output_format": canonical_or_default(
                constraints, "output_format", self.output_format, model.default_output_format
            ),
            "output_compression": (
                self.output_compression if self.output_compression is not None else model.default_compression
            ),
            "user": self.user,
        }
        return {key: value for key, value in payload.items() if value is not None}


class ImageEditingRequest(ImageGenerationRequest):
    """Edit an uploaded image, optionally restricted to the transparent area of a mask."""
    operation: ClassVar[Operation] = Operation.EDIT
    response_class: ClassVar[Type[ImageEditingResponse]] = ImageEditingResponse

    image: bytes = Field(b"", repr=False, description="Image to edit")
    image_filename: str = Field("image.png", description="Filename of the image part")
    mask: Optional[bytes] = Field(None, repr=False, description="Optional mask image")
    mask_filename: Optional[str] = Field(None, description="Filename of the mask part")

    @classmethod
    def from_bytes(
        cls,
        image: bytes,
        prompt: str,
        image_filename: str = "image.png",
        mask: Optional[bytes] = None,
        mask_filename: Optional[str] = "mask.png",
        **fields: Any,
    ) -> "ImageEditingRequest":
        if not image:
            raise ValidationError("Image bytes cannot be empty", field="image")
        return cls(
            image=image,
            image_filename=image_filename,
            prompt=prompt,
            mask=mask,
            mask_filename=mask_filename if mask is not None else None,
            **fields,
        )

    @classmethod
    def from_file(
        cls,
        image_path: Union[str, Path],
        prompt: str,
        mask_path: Optional[Union[str, Path]] = None,
        **fields: Any,
    ) -> "ImageEditingRequest":
        image_file = Path(image_path)
        if not image_file.exists():
            raise FileNotFoundError(f"Image file not found: {image_file}")

        mask = None
        mask_filename = None
        if mask_path:
            mask_file = Path(mask_path)
            if not mask_file.exists():
                raise FileNotFoundError(f"Mask file not found: {mask_file}")
            mask = mask_file.read_bytes()
            mask_filename = mask_file.name

        return cls(
            image=image_file.read_bytes(),
            image_filename=image_file.name,
            prompt=prompt,
            mask=mask,
            mask_filename=mask_filename,
            **fields,
        )
