"""Function-style request handler."""

from colidr.service.handler import handle

__all__ = ['handle']
