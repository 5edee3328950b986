"""Error taxonomy for cover generation."""

from __future__ import annotations


class CoverError(Exception):
    """Base class for failures of a single generation attempt."""


class ValidationError(CoverError):
    """A required form field is missing."""


class KeyRequiredError(CoverError):
    """The selected API key lacks access to the requested model."""


class UpstreamError(CoverError):
    """Any other failure reported by the image service."""
