"""Screenshot acquisition: decoding, resizing, and screen capture.

Turns encoded image bytes (from a file or the network) into BGR numpy arrays
and grabs the primary monitor with ``mss``. All decoding goes through this
module — no other module should call ``cv2.imdecode`` or import ``mss``
directly.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path

import cv2
import mss
import numpy as np

from config import DEBUG_DIR, SCREENSHOT_MAX_WIDTH
from exceptions import ImageDecodeError

logger = logging.getLogger(__name__)


def decode_image(data: bytes, source: str = "<bytes>") -> np.ndarray:
    """Decode encoded image bytes (PNG, JPEG, ...) into a BGR array.

    Args:
        data: The encoded image bytes.
        source: Label used in error messages and logs.

    Returns:
        A numpy array of shape ``(H, W, 3)`` in BGR colour order.

    Raises:
        ImageDecodeError: If *data* is empty or not a decodable image.
    """
    if not data:
        raise ImageDecodeError(source, "no image data")
    buffer = np.frombuffer(data, dtype=np.uint8)
    image = cv2.imdecode(buffer, cv2.IMREAD_COLOR)
    if image is None:
        raise ImageDecodeError(source, "unsupported or corrupt image data")
    logger.debug("Decoded %s: shape=%s", source, image.shape)
    return image


def fit_to_width(
    image: np.ndarray,
    max_width: int = SCREENSHOT_MAX_WIDTH,
) -> np.ndarray:
    """Downscale *image* so it is at most *max_width* pixels wide.

    Keeps the aspect ratio and never upscales. Images already narrow enough
    are returned unchanged.
    """
    height, width = image.shape[:2]
    if width <= max_width:
        return image
    new_size = (max_width, max(1, round(height * max_width / width)))
    logger.debug("Resizing screenshot %dx%d → %dx%d", width, height, *new_size)
    return cv2.resize(image, new_size, interpolation=cv2.INTER_AREA)


def load_screenshot(path: Path) -> tuple[np.ndarray, bytes]:
    """Read a screenshot file and return the working image plus raw bytes.

    The raw bytes are kept so the untouched original can be uploaded
    alongside the extracted row.

    Args:
        path: Path to the screenshot file.

    Returns:
        A tuple ``(image, data)`` where *image* is the decoded BGR array
        fitted to ``SCREENSHOT_MAX_WIDTH`` and *data* the file's bytes.

    Raises:
        FileNotFoundError: If *path* does not exist.
        ImageDecodeError: If the file is not a decodable image.
    """
    data = Path(path).read_bytes()
    image = fit_to_width(decode_image(data, source=str(path)))
    logger.info("Loaded screenshot %s (%dx%d)", path, image.shape[1], image.shape[0])
    return image, data


def capture_screen() -> np.ndarray:
    """Capture the primary monitor as a BGR numpy array.

    Returns:
        A numpy array of shape ``(H, W, 3)`` in BGR colour order.
    """
    with mss.mss() as sct:
        screenshot = sct.grab(sct.monitors[1])

    # mss returns BGRA; drop alpha channel for OpenCV-compatible BGR.
    frame = np.array(screenshot)[:, :, :3]
    logger.debug("Captured frame: shape=%s", frame.shape)
    return frame


def encode_png(image: np.ndarray) -> bytes:
    """Encode a BGR array as PNG bytes.

    Raises:
        ImageDecodeError: If OpenCV refuses to encode the array.
    """
    ok, buffer = cv2.imencode(".png", image)
    if not ok:
        raise ImageDecodeError("<array>", "PNG encoding failed")
    return buffer.tobytes()


def save_debug_image(image: np.ndarray, context: str) -> Path:
    """Save an image as a timestamped PNG in the debug directory.

    Args:
        image: The BGR array to write.
        context: A short label included in the filename to identify what
            produced the image (e.g. ``"slots"``).

    Returns:
        The path to the saved PNG file.
    """
    DEBUG_DIR.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    filepath = DEBUG_DIR / f"{timestamp}_{context}.png"

    cv2.imwrite(str(filepath), image)
    logger.info("Debug image saved: %s", filepath)
    return filepath
