"""Pydantic configuration schemas for the colidr pipeline.

This module provides strictly typed configuration models for the line
drawing pipeline. All configuration validation, coercion, and
normalization happens at schema validation time via Pydantic.

Exports
-------
resolve_config : function
    Single entrypoint for configuration resolution
InternalConfig : class
    Fully validated, authoritative runtime configuration
ParamConfig : class
    Expert defaults (complete)
UserConfig : class
    User-facing configuration (forgiving, minimal, short aliases)
CLIConfig : class
    Command-line operational overrides
"""

from colidr.schemas.resolve import resolve_config
from colidr.schemas.internal import InternalConfig
from colidr.schemas.param import ParamConfig
from colidr.schemas.user import UserConfig
from colidr.schemas.cli import CLIConfig

__all__ = [
    'resolve_config',
    'InternalConfig',
    'ParamConfig',
    'UserConfig',
    'CLIConfig',
]
