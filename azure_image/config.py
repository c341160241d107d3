"""
YAML configuration for model descriptors.
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional, Type, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from .base import ImageModel
from .dalle3 import DALLE3Model
from .exceptions import ConfigurationError
from .gpt_image1 import GPTImage1Model
from .stable_image import StableImageCoreModel, StableImageUltraModel
from .vision_captioning import AzureVisionCaptioningModel

MODEL_TYPES: Dict[str, Type[ImageModel]] = {
    "dalle3": DALLE3Model,
    "gpt-image-1": GPTImage1Model,
    "stable-image-core": StableImageCoreModel,
    "stable-image-ultra": StableImageUltraModel,
    "vision-captioning": AzureVisionCaptioningModel,
}


class LoggingConfig(BaseModel):
    """Logging settings applied by the command-line entry point."""
    level: str = Field("INFO", description="Log level")
    log_dir: Optional[str] = Field(None, description="Directory for dated log files")


class ModelEntry(BaseModel):
    """One named model in the configuration file."""
    model_config = ConfigDict(extra="allow")

    type: str = Field(..., description="Model type, one of MODEL_TYPES")
    endpoint: str = Field(..., description="Base URL of the resource")
    api_key: Optional[str] = Field(None, repr=False, description="Inline API key")
    api_key_env: Optional[str] = Field(None, description="Environment variable holding the API key")

    def resolve_api_key(self) -> str:
        if self.api_key:
            return self.api_key
        if self.api_key_env:
            value = os.environ.get(self.api_key_env)
            if not value:
                raise ConfigurationError(f"Environment variable {self.api_key_env} is not set")
            return value
        raise ConfigurationError("Either api_key or api_key_env must be set")

    def options(self) -> Dict[str, Any]:
        """Descriptor fields beyond the connection settings."""
        return dict(self.model_extra or {})


class ClientConfig(BaseModel):
    """Main configuration: logging plus a table of named models."""
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    models: Dict[str, ModelEntry] = Field(default_factory=dict)

    def build_model(self, name: str, **overrides: Any) -> ImageModel:
        """Construct the descriptor registered under ``name``."""
        entry = self.models.get(name)
        if entry is None:
            available = ", ".join(sorted(self.models)) or "none"
            raise ConfigurationError(f"Unknown model '{name}'. Available: {available}")

        model_class = MODEL_TYPES.get(entry.type.lower())
        if model_class is None:
            raise ConfigurationError(
                f"Unknown model type '{entry.type}'. Must be one of: {', '.join(MODEL_TYPES)}"
            )

        fields = entry.options()
        fields.update(overrides)
        return model_class.create(entry.endpoint, entry.resolve_api_key(), **fields)


def load_config(config_path: Union[str, Path]) -> ClientConfig:
    """Load configuration from a YAML file."""
    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, 'r') as f:
        config_data = yaml.safe_load(f) or {}

    if not isinstance(config_data, dict):
        raise ConfigurationError(f"Config file must contain a mapping: {config_path}")

    try:
        return ClientConfig(**config_data)
    except PydanticValidationError as e:
        raise ConfigurationError(f"Invalid configuration in {config_path}: {e}") from e
