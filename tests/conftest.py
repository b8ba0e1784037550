"""Shared pytest fixtures for APIDL tests."""

import textwrap

import pytest

from apidl.core import ir
from apidl.core.pipeline import compile_schema

IMAGE_SCHEMA = textwrap.dedent("""\
    /// Information about an image
    struct ImageInfo {
        /// width of the image
        width: u32,
        /// height of the image
        height: u32,
    }

    #[attributes(Handle, Drop)]
    struct Image {
        /// Create an image from a file
        [static] create_from_file(filename: String) -> Image?,
        /// Create an image from memory
        [static] create_from_memory(name: String, data: [u8]) -> Image?,
        /// Destroy the image
        destroy(),
        /// Get information about an image
        [static] get_info(image: Image) -> ImageInfo?,
    }
""")


@pytest.fixture
def image_schema() -> str:
    """Return the canonical ImageInfo/Image schema."""
    return IMAGE_SCHEMA


@pytest.fixture
def image_document(image_schema: str) -> ir.Document:
    """Return the Document compiled from the canonical schema."""
    result = compile_schema(image_schema, "image.api")
    assert result.document is not None
    return result.document
