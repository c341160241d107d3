"""
Stable Image Core and Ultra deployments (generation only).
"""

from .config import StableImageCoreModel, StableImageModel, StableImageUltraModel
from .models import StableImageRequest

__all__ = ["StableImageCoreModel", "StableImageModel", "StableImageRequest", "StableImageUltraModel"]
