"""Exceptions raised by the image normalisation pipeline."""

from __future__ import annotations


class NormalizationError(RuntimeError):
    """Base class for failures while normalising an image."""


class DecodeError(NormalizationError):
    """Raised when the source bytes cannot be decoded into an image."""


class EncodeError(NormalizationError):
    """Raised when the codec cannot produce output for the requested format."""


class NormalizationCancelled(NormalizationError):
    """Raised when a cancellation token is set between encode attempts."""


class ConfigurationError(ValueError):
    """Raised when compression limits are inconsistent."""
