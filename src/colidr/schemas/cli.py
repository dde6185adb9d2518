"""CLIConfig: Command-line operational overrides.

Minimal configuration for operational parameters that commonly change
between runs: output location, verbosity, worker count and the optional
diagnostic outputs.

This schema handles command-line arguments parsed by argparse.
"""

from typing import Literal, Optional
from pydantic import Field, field_validator
from colidr.schemas.base import ColidrBaseModel


class CLIConfig(ColidrBaseModel):
    """Command-line configuration overrides.

    Operational-only settings that override user and param configs.
    Highest priority in config resolution.

    Usage
    -----
        cli_cfg = CLIConfig(
            base_dir="/scratch/colidr_output",
            workers=4,
            plot=True,
        )

        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    base_dir: Optional[str] = None
    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = None
    workers: Optional[int] = Field(None, ge=1)
    anti_alias: Optional[bool] = None
    visualize_etf: Optional[bool] = None
    plot: Optional[bool] = None
    image_format: Optional[Literal["jpeg", "png"]] = None

    @field_validator("log_level", "image_format", mode="before")
    @classmethod
    def normalize_case(cls, v, info):
        """Accept lowercase log levels and the 'jpg' spelling."""
        if not isinstance(v, str):
            return v
        if info.field_name == "log_level":
            return v.upper()
        v = v.lower()
        return "jpeg" if v == "jpg" else v

    def to_internal_overrides(self) -> dict:
        """Convert CLI config to internal config structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        if self.base_dir is not None:
            overrides["base_dir"] = str(self.base_dir)

        if self.log_level is not None:
            overrides["logging"] = {"level": self.log_level}

        if self.workers is not None:
            overrides["parallel"] = {"workers": self.workers}

        postprocessing = {}
        if self.anti_alias is not None:
            postprocessing["anti_alias"] = self.anti_alias
        if self.visualize_etf is not None:
            postprocessing["visualize_etf"] = self.visualize_etf
        if postprocessing:
            overrides["postprocessing"] = postprocessing

        if self.plot is not None:
            overrides["visualization"] = {"enabled": self.plot}

        if self.image_format is not None:
            overrides["output"] = {"image_format": self.image_format}

        return overrides
