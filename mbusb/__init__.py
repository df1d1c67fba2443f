"""Prepare a USB drive that boots multiple ISO images through GRUB."""

from .__version__ import __version__

__all__ = ["__version__"]
