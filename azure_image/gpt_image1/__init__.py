"""
GPT-Image-1 deployments on Azure OpenAI (generation and editing).
"""

from .config import GPTImage1Model
from .models import ImageEditingRequest, ImageGenerationRequest

__all__ = ["GPTImage1Model", "ImageEditingRequest", "ImageGenerationRequest"]
