"""Turn files, byte payloads and URLs into grayscale rasters.

Only JPEG and PNG payloads are accepted from the network boundary. Files on
disk may be any format OpenCV can read.
"""

import base64
import binascii
import logging
from pathlib import Path
from typing import Optional, Union, TYPE_CHECKING

import cv2
import numpy as np
import requests

from colidr.contracts.failure import InitializationError

if TYPE_CHECKING:
    from colidr.schemas import InternalConfig

__all__ = ['ImageLoader', 'sniff_content_type']

logger = logging.getLogger(__name__)

JPEG_MAGIC = b"\xff\xd8\xff"
PNG_MAGIC = b"\x89PNG\r\n\x1a\n"


def sniff_content_type(data: bytes) -> Optional[str]:
    """Return "image/jpeg" or "image/png" from the leading bytes, else None."""
    if data.startswith(JPEG_MAGIC):
        return "image/jpeg"
    if data.startswith(PNG_MAGIC):
        return "image/png"
    return None


class ImageLoader:
    """Decode source images into single-channel uint8 rasters.

    Example usage::

        loader = ImageLoader(config)
        gray = loader.load_file("photo.jpg")
        gray = loader.decode_payload(request_body)             # config.input.mode
        gray = loader.decode_payload(request_body, "base64")
    """

    def __init__(self, config: "InternalConfig"):
        self.mode = config.input.mode
        self.url_timeout = config.input.url_timeout_sec

    def load_file(self, path: Union[str, Path]) -> np.ndarray:
        """Read an image file as grayscale.

        Raises
        ------
        InitializationError
            If the path is missing, is a directory, or cannot be decoded.
        """
        path = Path(path)
        if not path.exists():
            raise InitializationError(f"Image not found: {path}")
        if path.is_dir():
            raise InitializationError(f"Expected an image file, got a directory: {path}")

        image = cv2.imread(str(path), cv2.IMREAD_GRAYSCALE)
        if image is None or image.size == 0:
            raise InitializationError(f"Could not decode image: {path}")

        logger.debug("Loaded %s: shape=%s", path.name, image.shape)
        return image

    def decode_bytes(self, data: bytes) -> np.ndarray:
        """Decode JPEG or PNG bytes as grayscale.

        Raises
        ------
        InitializationError
            If the content is neither JPEG nor PNG, or fails to decode.
        """
        content_type = sniff_content_type(data)
        if content_type is None:
            raise InitializationError(
                "Only jpeg or png images, either raw bytes or base64 encoded, are accepted"
            )

        image = cv2.imdecode(np.frombuffer(data, dtype=np.uint8), cv2.IMREAD_GRAYSCALE)
        if image is None or image.size == 0:
            raise InitializationError(f"Could not decode {content_type} payload ({len(data)} bytes)")

        logger.debug("Decoded %s payload: shape=%s", content_type, image.shape)
        return image

    def fetch_url(self, url: str) -> bytes:
        """Download ``url`` and return the response body.

        Raises
        ------
        InitializationError
            On connection errors, timeouts and non-2xx responses.
        """
        try:
            response = requests.get(url, timeout=self.url_timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise InitializationError(f"Unable to download image from {url}: {e}") from e

        logger.info("Downloaded %s (%d bytes)", url, len(response.content))
        return response.content

    def decode_payload(self, payload: Union[bytes, str], input_mode: Optional[str] = None) -> np.ndarray:
        """Decode a request payload according to ``input_mode``.

        Parameters
        ----------
        payload : bytes or str
            Raw image bytes, base64 text, or a URL.
        input_mode : {"auto", "raw", "base64", "url"}, optional
            Defaults to ``config.input.mode``. In ``auto`` mode the payload
            is base64-decoded when possible and used as raw bytes otherwise.

        Returns
        -------
        np.ndarray
            Grayscale uint8 raster.
        """
        mode = input_mode or self.mode

        if mode == "url":
            try:
                url = payload.decode("utf-8") if isinstance(payload, bytes) else payload
            except UnicodeDecodeError as e:
                raise InitializationError(f"Image URL is not valid UTF-8: {e}") from e
            return self.decode_bytes(self.fetch_url(url.strip()))

        data = payload.encode("latin-1") if isinstance(payload, str) else bytes(payload)

        if mode == "raw":
            return self.decode_bytes(data)

        if mode == "base64":
            try:
                decoded = base64.b64decode(data.strip(), validate=True)
            except binascii.Error as e:
                raise InitializationError(f"Payload is not valid base64: {e}") from e
            return self.decode_bytes(decoded)

        if mode == "auto":
            try:
                data = base64.b64decode(data.strip(), validate=True)
            except binascii.Error:
                logger.debug("Payload is not base64, using raw bytes")
            return self.decode_bytes(data)

        raise InitializationError(f"Unknown input mode: {mode}")
