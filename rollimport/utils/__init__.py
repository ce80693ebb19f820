"""
Utility functions for the voter roll import application.
"""

from .cancellation import CancellationToken

from .image_utils import (
    load_image,
    save_image,
    split_vertical_strips,
)

__all__ = [
    "CancellationToken",

    # Image utilities
    "load_image",
    "save_image",
    "split_vertical_strips",
]
