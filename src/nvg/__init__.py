"""Narrated video generator: turn document text into a narrated slideshow."""

__version__ = "0.1.0"
