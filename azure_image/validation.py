"""
Request validation against a model variant's legal values.

Validation is a pure check: it never mutates the request and reports the first
violated constraint, in a fixed order, so repeated calls give the same outcome.
"""

from typing import Any, Optional
from urllib.parse import urlparse

from .base import ImageRequest, Operation, RequestConstraints
from .exceptions import ValidationError

_TOKEN_LABELS = {
    "size": "size",
    "quality": "quality",
    "style": "style",
    "output_format": "output format",
    "response_format": "response format",
}


def _fail(field: str, message: str) -> None:
    raise ValidationError(message, field=field)


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def _check_prompt(request: ImageRequest) -> None:
    if _is_blank(getattr(request, "prompt", None)):
        _fail("prompt", "Prompt is required")


def _check_edit_payloads(request: ImageRequest) -> None:
    if not request.image:
        _fail("image", "Image is required")
    if _is_blank(request.image_filename):
        _fail("image_filename", "Image filename is required")
    if request.mask and _is_blank(request.mask_filename):
        _fail("mask_filename", "Mask filename is required when a mask is provided")


def _check_token(request: ImageRequest, kind: str, constraints: RequestConstraints) -> None:
    value = getattr(request, kind, None)
    if value is None:
        return

    if constraints.canonical(kind, value) is None:
        allowed = constraints.allowed(kind)
        label = _TOKEN_LABELS[kind]
        if allowed is None:
            _fail(kind, f"Invalid {label} '{value}'. Use the format WIDTHxHEIGHT, e.g. 1024x1024")
        elif not allowed:
            _fail(kind, f"The {label} field is not supported by this model")
        else:
            _fail(kind, f"Invalid {label} '{value}'. Must be one of: {', '.join(allowed)}")


def _check_count(request: ImageRequest, constraints: RequestConstraints) -> None:
    n = getattr(request, "n", None)
    if n is None:
        return
    if n < constraints.min_count or n > constraints.max_count:
        if constraints.min_count == constraints.max_count:
            _fail("n", f"n must be {constraints.min_count} for this model")
        _fail("n", f"n must be between {constraints.min_count} and {constraints.max_count}")


def _check_percentage(request: ImageRequest, field: str) -> None:
    value = getattr(request, field, None)
    if value is not None and not 0 <= value <= 100:
        _fail(field, f"{field} must be between 0 and 100")


def _check_seed(request: ImageRequest) -> None:
    seed = getattr(request, "seed", None)
    if seed is not None and seed < 0:
        _fail("seed", "Seed must be non-negative")


def _check_caption_source(request: ImageRequest) -> None:
    has_image = request.image is not None
    has_url = request.image_url is not None

    if has_image == has_url:
        _fail("image", "Exactly one of image or image_url must be provided")
    if has_image and not request.image:
        _fail("image", "Image data cannot be empty")
    if has_url:
        parsed = urlparse(request.image_url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            _fail("image_url", "Image URL must be an absolute HTTP or HTTPS URL")


def _check_caption_options(request: ImageRequest, constraints: RequestConstraints) -> None:
    if _is_blank(request.language):
        _fail("language", "Language is required")
    if not 1 <= request.max_dense_captions <= constraints.max_dense_captions:
        _fail(
            "max_dense_captions",
            f"max_dense_captions must be between 1 and {constraints.max_dense_captions}",
        )


def validate_request(request: ImageRequest, constraints: RequestConstraints) -> None:
    """Raise ValidationError for the first constraint ``request`` violates."""
    operation = request.operation

    if operation in (Operation.CAPTION, Operation.DENSE_CAPTION):
        _check_caption_source(request)
        _check_caption_options(request, constraints)
        return

    _check_prompt(request)
    if operation is Operation.EDIT:
        _check_edit_payloads(request)
    _check_token(request, "size", constraints)
    _check_count(request, constraints)
    for kind in ("quality", "style", "output_format", "response_format"):
        _check_token(request, kind, constraints)
    _check_percentage(request, "output_compression")
    _check_seed(request)


def canonical_or_default(
    constraints: RequestConstraints, kind: str, value: Optional[str], default: Any
) -> Any:
    """Canonical spelling of a validated token, or ``default`` when unset."""
    if value is None:
        return constraints.canonical(kind, default) if isinstance(default, str) else default
    return constraints.canonical(kind, value) or value
