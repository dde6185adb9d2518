"""Configuration resolution and merging logic.

This module provides the single entrypoint for configuration resolution:
resolve_config(). It merges ParamConfig, UserConfig, and CLIConfig in
the correct precedence order and returns a validated InternalConfig.

Precedence (highest to lowest):
1. CLIConfig (command-line overrides)
2. UserConfig (user file or query string)
3. ParamConfig (expert defaults)
"""

from typing import Union, Optional
from pydantic import ValidationError

from colidr.contracts.failure import ConfigurationError
from colidr.schemas.param import ParamConfig
from colidr.schemas.user import UserConfig
from colidr.schemas.cli import CLIConfig
from colidr.schemas.internal import InternalConfig


def deep_merge(base: dict, *overrides: dict) -> dict:
    """Deep merge multiple dictionaries.

    Later dictionaries override earlier ones. Nested dictionaries are
    merged recursively; other values are replaced.

    Parameters
    ----------
    base : dict
        Base dictionary (lowest priority)
    *overrides : dict
        Override dictionaries (higher priority, left to right)

    Returns
    -------
    dict
        Merged dictionary

    Examples
    --------
    >>> base = {"a": 1, "b": {"c": 2, "d": 3}}
    >>> override = {"b": {"d": 4, "e": 5}, "f": 6}
    >>> deep_merge(base, override)
    {'a': 1, 'b': {'c': 2, 'd': 4, 'e': 5}, 'f': 6}
    """
    result = base.copy()

    for override in overrides:
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = deep_merge(result[key], value)
            else:
                result[key] = value

    return result


def _as_model(cfg, model_cls):
    if cfg is None or (isinstance(cfg, dict) and not cfg):
        return model_cls()
    if isinstance(cfg, model_cls):
        return cfg
    return model_cls.model_validate(cfg)


def resolve_config(
    param_cfg: Union[dict, ParamConfig],
    user_cfg: Optional[Union[dict, UserConfig]] = None,
    cli_cfg: Optional[Union[dict, CLIConfig]] = None,
) -> InternalConfig:
    """Resolve final runtime configuration from param, user, and CLI configs.

    This is the SINGLE ENTRYPOINT for configuration resolution. It validates
    and merges configs in the correct precedence order, then returns an
    immutable InternalConfig for runtime use.

    Parameters
    ----------
    param_cfg : dict or ParamConfig
        Expert configuration with complete defaults. Required.
    user_cfg : dict or UserConfig, optional
        User configuration with overrides. If None or empty, uses only param defaults.
    cli_cfg : dict or CLIConfig, optional
        Command-line overrides. If None or empty, no CLI overrides applied.

    Returns
    -------
    InternalConfig
        Fully validated, immutable runtime configuration

    Raises
    ------
    ConfigurationError
        If any config fails Pydantic validation. The original
        ValidationError is chained as the cause.

    Examples
    --------
    >>> from colidr.schemas import resolve_config, ParamConfig, UserConfig
    >>> config = resolve_config(ParamConfig(), UserConfig(sr=2.0, k=2))
    >>> config.dog.sigma_r
    2.0
    >>> config.etf.kernel
    2
    """
    try:
        param = _as_model(param_cfg, ParamConfig)
        user = _as_model(user_cfg, UserConfig)
        cli = _as_model(cli_cfg, CLIConfig)

        merged = deep_merge(
            param.model_dump(),
            user.to_internal_overrides(),
            cli.to_internal_overrides(),
        )

        # Re-validate the merged values against the expert constraints
        # before freezing them.
        ParamConfig.model_validate(merged)
        return InternalConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid configuration: {exc}") from exc
