"""Image decoding and encoding at the pipeline boundary."""

from colidr.io.loader import ImageLoader, sniff_content_type
from colidr.io.writer import encode_image, save_image

__all__ = ['ImageLoader', 'sniff_content_type', 'encode_image', 'save_image']
