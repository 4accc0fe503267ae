"""Multiboot device utilities: ROM switching, wiping and installer generation."""

from .__version__ import __version__

__all__ = ["__version__"]
