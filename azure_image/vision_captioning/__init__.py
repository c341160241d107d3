"""
Azure AI Vision image analysis (captioning and dense captioning).
"""

from .config import AzureVisionCaptioningModel
from .models import CaptionRequest, DenseCaptionRequest, ImageCaptionRequest

__all__ = ["AzureVisionCaptioningModel", "CaptionRequest", "DenseCaptionRequest", "ImageCaptionRequest"]
