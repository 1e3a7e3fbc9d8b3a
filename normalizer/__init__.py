"""Image normalisation service: resize and recompress images under payload limits."""

__version__ = "0.1.0"
