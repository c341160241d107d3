"""
Unit tests for response parsing.
"""

import base64
import json
from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from azure_image.exceptions import ParseError
from azure_image.parsing import (
    CaptionResult,
    DenseCaptionResult,
    ImageEditingResponse,
    ImageGenerationResponse,
    StableImageResponse,
    parse_error_body,
    parse_response,
)


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


class TestCaptionParsing:
    """Test cases for caption and dense caption results."""

    def test_single_caption(self):
        """Test a known caption payload parses to exact fields."""
        body = json.dumps({
            "modelVersion": "2023-10-01",
            "metadata": {"width": 800, "height": 600},
            "captionResult": {"text": "A cat", "confidence": 0.87},
        })

        result = parse_response(body, CaptionResult, "azure-vision-captioning")

        assert result.model_version == "2023-10-01"
        assert result.caption.text == "A cat"
        assert result.caption.confidence == 0.87
        assert result.metadata.width == 800
        assert result.metadata.height == 600
        assert not hasattr(result.caption, "bounding_box")
        assert not result.has_error

    def test_missing_metadata_is_unknown(self):
        """Test absent metadata stays unset instead of zero."""
        body = json.dumps({
            "modelVersion": "2023-10-01",
            "metadata": {"width": 800},
            "captionResult": {"text": "A cat", "confidence": 0.5},
        })

        result = parse_response(body, CaptionResult)

        assert result.metadata.width == 800
        assert result.metadata.height is None

    def test_no_metadata(self):
        """Test a payload without a metadata object."""
        body = json.dumps({"modelVersion": "1", "captionResult": {"text": "A cat", "confidence": 1.0}})

        assert parse_response(body, CaptionResult).metadata is None

    def test_dense_captions_with_and_without_region(self):
        """Test a missing bounding box stays absent rather than a zero box."""
        body = json.dumps({
            "modelVersion": "2023-10-01",
            "denseCaptionsResult": {
                "values": [
                    {
                        "text": "a dog on grass",
                        "confidence": 0.92,
                        "boundingBox": {"x": 10, "y": 20, "w": 100, "h": 50},
                    },
                    {"text": "a red ball", "confidence": 0.61},
                ]
            },
        })

        result = parse_response(body, DenseCaptionResult)

        assert len(result.captions) == 2
        assert result.captions[0].bounding_box.as_tuple() == (10, 20, 100, 50)
        assert result.captions[1].bounding_box is None
        assert str(result.captions[0].bounding_box) == "X=10, Y=20, Width=100, Height=50"

    def test_missing_model_version(self):
        """Test a missing required field raises ParseError."""
        body = json.dumps({"captionResult": {"text": "A cat", "confidence": 0.87}})

        with pytest.raises(ParseError) as exc_info:
            parse_response(body, CaptionResult)

        assert "modelVersion" in str(exc_info.value)
        assert exc_info.value.payload == body

    def test_missing_caption_text(self):
        """Test caption entries require text."""
        body = json.dumps({"modelVersion": "1", "captionResult": {"confidence": 0.87}})

        with pytest.raises(ParseError):
            parse_response(body, CaptionResult)

    def test_confidence_out_of_range(self):
        """Test confidence must be within [0, 1]."""
        body = json.dumps({"modelVersion": "1", "captionResult": {"text": "A cat", "confidence": 1.5}})

        with pytest.raises(ParseError):
            parse_response(body, CaptionResult)

    def test_zero_width_region(self):
        """Test bounding boxes must have positive width and height."""
        body = json.dumps({
            "modelVersion": "1",
            "denseCaptionsResult": {
                "values": [{"text": "x", "confidence": 0.5, "boundingBox": {"x": 0, "y": 0, "w": 0, "h": 5}}]
            },
        })

        with pytest.raises(ParseError):
            parse_response(body, DenseCaptionResult)


class TestGenerationParsing:
    """Test cases for generation and editing responses."""

    def test_url_and_inline_entries(self):
        """Test entries are distinguished by url or b64_json."""
        body = json.dumps({
            "created": 1700000000,
            "data": [
                {"url": "https://files.example.com/1.png", "revised_prompt": "A cat, photo"},
                {"b64_json": _b64(b"png-bytes")},
            ],
        })

        result = parse_response(body, ImageGenerationResponse)

        assert result.created_at == datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)
        assert result.images[0].has_url
        assert not result.images[0].has_base64_data
        assert result.images[0].revised_prompt == "A cat, photo"
        assert result.images[1].get_image_bytes() == b"png-bytes"

    def test_editing_response_shape(self):
        """Test editing responses share the generation shape."""
        body = json.dumps({"created": 1, "data": [{"b64_json": _b64(b"edited")}]})

        result = parse_response(body, ImageEditingResponse)

        assert result.images[0].get_image_bytes() == b"edited"

    def test_entry_without_payload(self):
        """Test an entry with neither url nor b64_json is rejected."""
        body = json.dumps({"created": 1, "data": [{"revised_prompt": "x"}]})

        with pytest.raises(ParseError):
            parse_response(body, ImageGenerationResponse)

    def test_missing_data(self):
        """Test success bodies require data."""
        with pytest.raises(ParseError):
            parse_response(json.dumps({"created": 1}), ImageGenerationResponse)

    def test_error_short_circuits(self):
        """Test an error object skips the success fields but keeps partial metadata."""
        body = json.dumps({
            "created": 1700000000,
            "data": [{"unexpected": True}],
            "error": {"code": "contentFilter", "message": "Prompt was blocked"},
        })

        result = parse_response(body, ImageGenerationResponse)

        assert result.has_error
        assert result.error.code == "contentFilter"
        assert result.error.content_filtered
        assert result.created == 1700000000
        assert result.data is None
        assert result.images == []

    def test_other_error_not_content_filtered(self):
        """Test unrelated error codes do not set the content filter flag."""
        body = json.dumps({"error": {"code": "InvalidRequest", "message": "bad"}})

        result = parse_response(body, ImageGenerationResponse)

        assert not result.error.content_filtered

    @pytest.mark.asyncio
    async def test_fetch_bytes_decodes_inline(self):
        """Test inline data is decoded without a download."""
        body = json.dumps({"created": 1, "data": [{"b64_json": _b64(b"inline")}]})
        downloader = AsyncMock()

        image = parse_response(body, ImageGenerationResponse).images[0]

        assert await image.fetch_bytes(downloader) == b"inline"
        downloader.download.assert_not_called()

    @pytest.mark.asyncio
    async def test_fetch_bytes_downloads_url(self):
        """Test URL results are downloaded through the downloader."""
        body = json.dumps({"created": 1, "data": [{"url": "https://files.example.com/1.png"}]})
        downloader = AsyncMock()
        downloader.download.return_value = b"downloaded"

        image = parse_response(body, ImageGenerationResponse).images[0]

        assert await image.fetch_bytes(downloader) == b"downloaded"
        downloader.download.assert_awaited_once_with("https://files.example.com/1.png")

    @pytest.mark.asyncio
    async def test_save_creates_directories(self, tmp_path):
        """Test saving writes the image and creates parent directories."""
        body = json.dumps({"created": 1, "data": [{"b64_json": _b64(b"saved")}]})
        image = parse_response(body, ImageGenerationResponse).images[0]

        path = await image.save(tmp_path / "nested" / "image.png")

        assert path.read_bytes() == b"saved"

    def test_url_only_has_no_inline_bytes(self):
        """Test decoding fails for URL-only entries."""
        body = json.dumps({"created": 1, "data": [{"url": "https://files.example.com/1.png"}]})

        with pytest.raises(ValueError):
            parse_response(body, ImageGenerationResponse).images[0].get_image_bytes()

    def test_invalid_base64(self):
        """Test corrupt inline data raises ParseError."""
        body = json.dumps({"created": 1, "data": [{"b64_json": "***"}]})

        with pytest.raises(ParseError):
            parse_response(body, ImageGenerationResponse).images[0].get_image_bytes()


class TestStableImageParsing:
    """Test cases for Stable Image responses."""

    def test_inline_image_with_metadata(self):
        """Test inline image and optional metadata."""
        body = json.dumps({"image": _b64(b"webp-bytes"), "metadata": {"seed": 42, "format": "webp"}})

        result = parse_response(body, StableImageResponse)

        assert result.get_image_bytes() == b"webp-bytes"
        assert result.metadata.seed == 42
        assert result.metadata.width is None

    def test_missing_image(self):
        """Test success bodies require the image field."""
        with pytest.raises(ParseError):
            parse_response(json.dumps({"metadata": {}}), StableImageResponse)


class TestMalformedBodies:
    """Test cases for bodies that are not valid responses."""

    @pytest.mark.parametrize("body", ["", "   ", "{not json", "[1, 2]", "null"])
    def test_malformed_body(self, body):
        """Test malformed bodies raise ParseError wrapping the payload."""
        with pytest.raises(ParseError) as exc_info:
            parse_response(body, CaptionResult, "azure-vision-captioning")

        assert exc_info.value.payload == body
        assert exc_info.value.model_name == "azure-vision-captioning"

    def test_bytes_body(self):
        """Test byte bodies are decoded before parsing."""
        body = json.dumps({"modelVersion": "1", "captionResult": {"text": "A cat", "confidence": 0.1}})

        assert parse_response(body.encode(), CaptionResult).caption.text == "A cat"


class TestErrorBodies:
    """Test cases for best-effort error body parsing."""

    def test_error_body(self):
        """Test structured error bodies are extracted."""
        info = parse_error_body('{"error": {"code": "content_policy_violation", "message": "blocked"}}')

        assert info.code == "content_policy_violation"
        assert info.message == "blocked"
        assert info.content_filtered

    @pytest.mark.parametrize("body", ["", "Service Unavailable", '{"error": "text"}', "[]", None])
    def test_unstructured_body(self, body):
        """Test unstructured bodies yield no error info."""
        assert parse_error_body(body) is None
