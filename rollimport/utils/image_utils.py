"""
Image processing utility functions.

Loading, saving and splitting rendered page images.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import cv2
import numpy as np


def load_image(path: Path, flags: int = cv2.IMREAD_COLOR) -> Optional[np.ndarray]:
    """
    Load image from file with proper Unicode path handling.

    Args:
        path: Path to image file
        flags: OpenCV imread flags

    Returns:
        Loaded image as numpy array, or None if failed
    """
    path = Path(path)
    if not path.exists():
        return None

    # cv2.imdecode handles non-ASCII paths
    data = np.fromfile(str(path), dtype=np.uint8)
    img = cv2.imdecode(data, flags)
    if img is None:
        return cv2.imread(str(path), flags)
    return img


def save_image(image: np.ndarray, path: Path, compression: int = 1) -> bool:
    """
    Save image to file with proper Unicode path handling.

    Args:
        image: Image to save
        path: Output path (.png)
        compression: PNG compression level (0-9)

    Returns:
        True if successful, False otherwise
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    success, data = cv2.imencode(path.suffix.lower() or ".png", image,
                                 [cv2.IMWRITE_PNG_COMPRESSION, compression])
    if not success:
        return False
    data.tofile(str(path))
    return True


def split_vertical_strips(image: np.ndarray, count: int) -> List[np.ndarray]:
    """
    Split an image into `count` full-height vertical strips.

    Strips are `width // count` pixels wide, left to right; the last strip
    absorbs the remainder so the strips cover every column exactly once.
    """
    if count < 1:
        raise ValueError("count must be >= 1")
    width = image.shape[1]
    strip_w = width // count
    strips = []
    for i in range(count):
        x = i * strip_w
        w = strip_w if i < count - 1 else width - x
        strips.append(image[:, x:x + w])
    return strips
