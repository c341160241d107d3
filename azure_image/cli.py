"""
Command-line entry point.

    azure-image --config config.yaml generate --model dalle3 --prompt "..." --output out/
    azure-image --config config.yaml edit --model gpt --prompt "..." --image in.png --output out/
    azure-image --config config.yaml caption --model vision --image photo.jpg --dense
"""

import argparse
import asyncio
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional

from .base import ImageModel, ImageRequest, setup_logging
from .client import AzureImageClient
from .config import ClientConfig, load_config
from .dalle3 import DALLE3Model
from .dalle3 import ImageGenerationRequest as DALLE3Request
from .exceptions import AzureImageError, ConfigurationError
from .gpt_image1 import GPTImage1Model, ImageEditingRequest
from .gpt_image1 import ImageGenerationRequest as GPTImage1Request
from .parsing import CaptionResult, DenseCaptionResult, StableImageResponse
from .stable_image import StableImageModel, StableImageRequest
from .utils import get_file_extension, get_mime_type
from .vision_captioning import DenseCaptionRequest, ImageCaptionRequest

logger = logging.getLogger(__name__)


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the argument parser with one sub-command per operation."""
    parser = argparse.ArgumentParser(
        prog="azure-image",
        description="Generate, edit and caption images with Azure-hosted models"
    )
    parser.add_argument(
        "--config",
        type=str,
        required=True,
        help="Path to configuration YAML file"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging"
    )
    commands = parser.add_subparsers(dest="command", required=True)

    generate = commands.add_parser("generate", help="Generate images from a prompt")
    generate.add_argument("--model", required=True, help="Model name from the config file")
    generate.add_argument("--prompt", required=True, help="Text prompt")
    generate.add_argument("--size", help="Image size, e.g. 1024x1024")
    generate.add_argument("--quality", help="Quality tier")
    generate.add_argument("--count", type=int, help="Number of images")
    generate.add_argument("--negative-prompt", help="Negative prompt (Stable Image only)")
    generate.add_argument("--seed", type=int, help="Seed (Stable Image only)")
    generate.add_argument("--output", default="out", help="Directory for generated images")

    edit = commands.add_parser("edit", help="Edit an image with a prompt")
    edit.add_argument("--model", required=True, help="Model name from the config file")
    edit.add_argument("--prompt", required=True, help="Text prompt")
    edit.add_argument("--image", required=True, help="Image to edit")
    edit.add_argument("--mask", help="Optional mask image")
    edit.add_argument("--size", help="Image size, e.g. 1024x1024")
    edit.add_argument("--output", default="out", help="Directory for edited images")

    caption = commands.add_parser("caption", help="Describe an image")
    caption.add_argument("--model", required=True, help="Model name from the config file")
    source = caption.add_mutually_exclusive_group(required=True)
    source.add_argument("--image", help="Local image file")
    source.add_argument("--url", help="Publicly reachable image URL")
    caption.add_argument("--dense", action="store_true", help="Return region captions")
    caption.add_argument("--language", default="en", help="Caption language")
    caption.add_argument("--gender-neutral", action="store_true", help="Gender-neutral captions")
    return parser


def build_generation_request(model: ImageModel, args: argparse.Namespace) -> ImageRequest:
    """Pick the request type matching the configured model."""
    if isinstance(model, DALLE3Model):
        return DALLE3Request(prompt=args.prompt, size=args.size, quality=args.quality, n=args.count or 1)
    if isinstance(model, GPTImage1Model):
        return GPTImage1Request(prompt=args.prompt, size=args.size, quality=args.quality, n=args.count or 1)
    if isinstance(model, StableImageModel):
        return StableImageRequest(
            prompt=args.prompt,
            size=args.size,
            negative_prompt=args.negative_prompt,
            seed=args.seed,
        )
    raise ConfigurationError(f"{model.model_name} does not support generation", model_name=model.model_name)


def _file_suffix(image_format: Optional[str], model: ImageModel) -> str:
    for candidate in (image_format, getattr(model, "default_output_format", None), "png"):
        if not candidate:
            continue
        try:
            return get_file_extension(get_mime_type(candidate))
        except ValueError:
            logger.warning(f"Unknown image format '{candidate}', falling back to the model default")
    return ".png"


def _output_path(output_dir: str, model: ImageModel, index: int, image_format: Optional[str]) -> Path:
    timestamp = time.strftime("%Y%m%d_%H%M%S")
    suffix = _file_suffix(image_format, model)
    return Path(output_dir) / f"{model.model_name}_{timestamp}_{index}{suffix}"


async def _save_images(client: AzureImageClient, model: ImageModel, response, output_dir: str) -> int:
    if response.has_error:
        logger.error(f"Service reported an error: {response.error.code} {response.error.message}")
        return 1

    if isinstance(response, StableImageResponse):
        fmt = response.metadata.format if response.metadata else None
        path = await response.save(_output_path(output_dir, model, 0, fmt))
        print(path)
        return 0

    for index, image in enumerate(response.images):
        path = await image.save(_output_path(output_dir, model, index, None), client)
        if image.revised_prompt:
            logger.info(f"Revised prompt: {image.revised_prompt}")
        print(path)
    return 0


def _print_captions(response) -> int:
    if response.has_error:
        logger.error(f"Service reported an error: {response.error.code} {response.error.message}")
        return 1

    if isinstance(response, CaptionResult):
        print(f"{response.caption.text} (confidence {response.caption.confidence:.2f})")
    elif isinstance(response, DenseCaptionResult):
        for caption in response.captions:
            region = caption.bounding_box or "no region"
            print(f"{caption.text} (confidence {caption.confidence:.2f}) [{region}]")

    if response.metadata is not None:
        print(f"Image size: {response.metadata.width}x{response.metadata.height}")
    return 0


async def run(args: argparse.Namespace, config: ClientConfig) -> int:
    """Execute one parsed command and return the exit code."""
    model = config.build_model(args.model)

    async with AzureImageClient() as client:
        if args.command == "generate":
            result = await client.generate_image(model, build_generation_request(model, args))
            if not result.ok:
                raise result.error
            return await _save_images(client, model, result.value, args.output)

        if args.command == "edit":
            request = ImageEditingRequest.from_file(args.image, args.prompt, mask_path=args.mask, size=args.size)
            result = await client.edit_image(model, request)
            if not result.ok:
                raise result.error
            return await _save_images(client, model, result.value, args.output)

        request_class = DenseCaptionRequest if args.dense else ImageCaptionRequest
        fields = {"language": args.language, "gender_neutral_caption": args.gender_neutral}
        if args.image:
            request = request_class.from_file(args.image, **fields)
        else:
            request = request_class(image_url=args.url, **fields)

        if args.dense:
            result = await client.dense_caption_image(model, request)
        else:
            result = await client.caption_image(model, request)
        return _print_captions(result.unwrap())


def main(argv: Optional[List[str]] = None) -> int:
    """Standard entry point for the command line."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
        setup_logging(
            "DEBUG" if args.verbose else config.logging.level,
            config.logging.log_dir,
        )
        return asyncio.run(run(args, config))
    except (AzureImageError, FileNotFoundError) as e:
        logger.error(f"Command failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
