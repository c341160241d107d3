"""
DALL-E 3 deployments on Azure OpenAI (generation only).
"""

from .config import DALLE3Model
from .models import ImageGenerationRequest

__all__ = ["DALLE3Model", "ImageGenerationRequest"]
