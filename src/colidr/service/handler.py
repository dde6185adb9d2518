"""Serverless-style entry point.

``handle`` takes the raw request body and returns the encoded line drawing.
Deployment settings come from environment variables, so the same function
can be wrapped by any function runtime:

- ``input_mode``: ``url`` to treat the body as an image URL; anything else
  decodes the body as base64 or raw JPEG/PNG bytes.
- ``output_mode``: ``image``/``json_image`` to return the encoded drawing,
  anything else returns empty bytes.
- ``Http_Query``: the request query string. Drawing parameters (``sr``,
  ``sm``, ``sc``, ``rho``, ``tau``, ``k``, ``ei``, ``di``, ``bl``, ``ai``) and
  ``output`` are read from it. In URL mode the parameters come from the
  image URL's own query string instead.
"""

import os
import logging
from typing import Optional, Union
from urllib.parse import parse_qs, urlsplit

from pydantic import ValidationError

from colidr.contracts.failure import ConfigurationError, InitializationError
from colidr.io.loader import ImageLoader
from colidr.io.writer import encode_image
from colidr.pipeline.processor import LineDrawingProcessor
from colidr.schemas import ParamConfig, UserConfig, resolve_config

__all__ = ['handle']

logger = logging.getLogger(__name__)

IMAGE_OUTPUTS = ("image", "json_image")


def _last_query_value(query: str, key: str) -> Optional[str]:
    values = parse_qs(query.lstrip("?")).get(key)
    return values[-1] if values else None


def handle(request: Union[bytes, str], input_mode: Optional[str] = None,
           output_mode: Optional[str] = None, query: Optional[str] = None) -> bytes:
    """Process one request.

    Parameters
    ----------
    request : bytes or str
        Image bytes, base64 text, or (URL mode) the image URL.
    input_mode : str, optional
        Overrides the ``input_mode`` environment variable.
    output_mode : str, optional
        Overrides the ``output_mode`` environment variable and the
        ``output`` query parameter.
    query : str, optional
        Query string with drawing parameters. Defaults to ``Http_Query``.

    Returns
    -------
    bytes
        Encoded drawing, or empty bytes when no image output is requested.

    Raises
    ------
    InitializationError
        If the image cannot be fetched or decoded.
    ConfigurationError
        If a drawing parameter is invalid.
    """
    input_mode = input_mode or os.environ.get("input_mode") or None
    http_query = os.environ.get("Http_Query", "")
    if query is None:
        query = http_query

    link = None
    if input_mode == "url":
        try:
            text = request.decode("utf-8") if isinstance(request, bytes) else request
        except UnicodeDecodeError as e:
            raise InitializationError(f"Image URL is not valid UTF-8: {e}") from e
        text = text.strip()
        link = text.split("?")[0]
        query = urlsplit(text).query

    try:
        user_cfg = UserConfig.from_query(query)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid drawing parameters: {e}") from e
    config = resolve_config(ParamConfig(), user_cfg)

    if output_mode is None:
        output_mode = (
            os.environ.get("output_mode")
            or _last_query_value(http_query, "output")
            or config.output.output_mode
        )

    loader = ImageLoader(config)
    if link is not None:
        raster = loader.decode_bytes(loader.fetch_url(link))
    else:
        raster = loader.decode_payload(request, input_mode or config.input.mode)

    if output_mode not in IMAGE_OUTPUTS:
        logger.info("Output mode '%s' requests no image, skipping drawing", output_mode)
        return b""

    drawing = LineDrawingProcessor(config).generate(raster)
    return encode_image(drawing, config.output.image_format, config.output.jpeg_quality)
