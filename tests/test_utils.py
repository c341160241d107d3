"""
Unit tests for lookup helpers and the error taxonomy.
"""

import pytest

from azure_image.exceptions import (
    AzureImageError,
    ConfigurationError,
    ParseError,
    RemoteServiceError,
    TransportError,
    ValidationError,
)
from azure_image.utils import (
    get_file_extension,
    get_mime_type,
    guess_mime_type,
    parse_size,
)


class TestMimeTypes:
    """Test cases for MIME type and extension lookup."""

    @pytest.mark.parametrize("extension,expected", [
        (".png", "image/png"),
        ("PNG", "image/png"),
        (".jpg", "image/jpeg"),
        ("jpeg", "image/jpeg"),
        (".webp", "image/webp"),
    ])
    def test_get_mime_type(self, extension, expected):
        """Test extensions map to MIME types with or without the dot."""
        assert get_mime_type(extension) == expected

    def test_unknown_extension(self):
        """Test unsupported extensions raise ValueError."""
        with pytest.raises(ValueError):
            get_mime_type(".psd")
        with pytest.raises(ValueError):
            get_mime_type("  ")

    def test_get_file_extension(self):
        """Test MIME types map back to their first extension."""
        assert get_file_extension("image/jpeg") == ".jpg"
        assert get_file_extension("IMAGE/PNG") == ".png"
        with pytest.raises(ValueError):
            get_file_extension("application/pdf")

    def test_guess_mime_type(self):
        """Test filename guessing falls back to a binary type."""
        assert guess_mime_type("photo.JPG") == "image/jpeg"
        assert guess_mime_type("archive.zip") == "application/octet-stream"
        assert guess_mime_type(None) == "application/octet-stream"


class TestParseSize:
    """Test cases for size token parsing."""

    def test_valid_sizes(self):
        """Test well-formed size tokens."""
        assert parse_size("1024x1024") == (1024, 1024)
        assert parse_size(" 1792X1024 ") == (1792, 1024)

    @pytest.mark.parametrize("size", ["", "1024", "0x10", "axb", "10x10x10", "-5x10"])
    def test_invalid_sizes(self, size):
        """Test malformed size tokens yield None."""
        assert parse_size(size) is None


class TestErrors:
    """Test cases for the error taxonomy."""

    def test_hierarchy(self):
        """Test every error derives from the package base class."""
        for error_class in (ConfigurationError, ValidationError, TransportError, RemoteServiceError, ParseError):
            assert issubclass(error_class, AzureImageError)

    @pytest.mark.parametrize("status,retryable", [(400, False), (401, False), (404, False),
                                                  (429, True), (500, True), (503, True)])
    def test_remote_retryable(self, status, retryable):
        """Test only throttling and server errors are retryable."""
        assert RemoteServiceError("failed", status_code=status).retryable is retryable

    def test_transport_retryable(self):
        """Test transport errors are retryable and others are not."""
        assert TransportError("timeout").retryable
        assert not ParseError("bad").retryable
        assert not ValidationError("bad").retryable

    def test_str_includes_context(self):
        """Test the message carries model, status, code and a body snippet."""
        error = RemoteServiceError(
            "Request failed",
            status_code=500,
            error_code="InternalError",
            model_name="dall-e-3",
            response_body="x" * 1000,
        )
        error.attempts = 4

        text = str(error)

        assert "model=dall-e-3" in text
        assert "status=500" in text
        assert "code=InternalError" in text
        assert "attempts=4" in text
        assert text.endswith("x" * 500 + "...")
