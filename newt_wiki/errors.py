"""Exception types shared across the newt_wiki pipeline."""

from __future__ import annotations


class NewtError(RuntimeError):
    """Base class for failures raised by newt_wiki components."""


class GenerationError(NewtError):
    """Raised when the text or structured generation backend fails."""


class SchemaValidationError(GenerationError):
    """Raised when a completed site document does not satisfy the schema."""


class ImageGenerationError(NewtError):
    """Raised when the image backend fails or returns no images."""


class EmptyTopicError(ValueError):
    """Raised when a blank topic is submitted for generation."""


__all__ = [
    "EmptyTopicError",
    "GenerationError",
    "ImageGenerationError",
    "NewtError",
    "SchemaValidationError",
]
