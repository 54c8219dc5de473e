"""Utility package for the QR app.

This package exposes helper functions used throughout the application.
"""

from .qr_generator import decode_data_url, encode
from .share_links import build_share_links

__all__ = ["encode", "decode_data_url", "build_share_links"]
