"""ParamConfig: Expert defaults for the line drawing pipeline.

This module defines the complete default configuration. ALL pipeline
parameters must have defaults here. No runtime code should define fallback
values - this is the single source of truth for defaults.

The canonical CLD defaults are sr=2.6, sm=3.0, sc=1.0, rho=0.98, tau=0.98,
k=1, ei=1, di=1, bl=3, ai=false.

Runtime code NEVER reads from ParamConfig directly - it only receives InternalConfig.
"""

from typing import Literal, Optional
from pydantic import Field, field_validator
from colidr.schemas.base import ColidrBaseModel


# =============================================================================
# Nested Configuration Models
# =============================================================================

class DoGConfig(ColidrBaseModel):
    """Flow-guided difference-of-Gaussians parameters."""
    sigma_r: float = Field(2.6, gt=0, description="Surround/center sigma ratio")
    sigma_m: float = Field(3.0, gt=0, description="Sigma of the integration along the flow")
    sigma_c: float = Field(1.0, gt=0, description="Center sigma of the gradient DoG")
    rho: float = Field(0.98, ge=0, description="Weight of the surround Gaussian")
    tau: float = Field(0.98, ge=0, le=1.0, description="Binarization threshold")

    @field_validator("sigma_r", "sigma_m", "sigma_c", "rho", "tau", mode="before")
    @classmethod
    def coerce_to_float(cls, v):
        """Allow int or float for DoG parameters."""
        if isinstance(v, int) and not isinstance(v, bool):
            return float(v)
        return v


class EtfConfig(ColidrBaseModel):
    """Edge tangent flow refinement parameters."""
    kernel: int = Field(1, ge=0, description="Half-width of the refinement neighbourhood")
    iterations: int = Field(1, ge=0, description="Number of refinement passes")


class RefinementConfig(ColidrBaseModel):
    """Combine-and-resharpen loop parameters."""
    fdog_iterations: int = Field(1, ge=0, description="Extra filter passes after the first")
    blur_size: int = Field(3, ge=1, description="Odd Gaussian kernel size used between passes")

    @field_validator("blur_size")
    @classmethod
    def require_odd_blur_size(cls, v):
        """Gaussian blur kernels must be odd-sized."""
        if v % 2 == 0:
            raise ValueError(f"blur_size must be odd, got {v}")
        return v


class PostProcessingConfig(ColidrBaseModel):
    """Post-processing and diagnostics."""
    anti_alias: bool = False
    visualize_etf: bool = False
    vis_iterations: int = Field(10, ge=1, description="Walk length of the flow visualization")
    noise_seed: Optional[int] = Field(0, ge=0, description="Seed of the visualization noise")


class ParallelConfig(ColidrBaseModel):
    """Row-band parallelism."""
    workers: Optional[int] = Field(None, ge=1, description="Thread count (None = CPU count)")
    min_band_rows: int = Field(16, ge=1)


class InputConfig(ColidrBaseModel):
    """Boundary input decoding."""
    mode: Literal["auto", "raw", "base64", "url"] = "auto"
    url_timeout_sec: float = Field(30.0, gt=0)


class OutputConfig(ColidrBaseModel):
    """Boundary output encoding."""
    image_format: Literal["jpeg", "png"] = "jpeg"
    jpeg_quality: int = Field(100, ge=1, le=100)
    output_mode: Literal["image", "json_image", "none"] = "image"


class VisualizationConfig(ColidrBaseModel):
    """Visualization settings."""
    enabled: bool = False
    dpi: int = Field(150, ge=50)
    figsize: tuple[float, float] = (15.0, 5.0)
    output_format: Literal["png", "pdf", "jpeg"] = "png"
    cmap: str = "gray"


class LoggingConfig(ColidrBaseModel):
    """Logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"


# =============================================================================
# Main ParamConfig
# =============================================================================

class ParamConfig(ColidrBaseModel):
    """Complete expert configuration with all defaults.

    This is the single source of truth for all pipeline parameters.
    Every tunable parameter MUST have a default here.

    Usage
    -----
    This config is NOT used directly by runtime code. It serves as the
    base layer in config resolution:

        internal_cfg = resolve_config(param_cfg, user_cfg, cli_cfg)

    Runtime code only sees InternalConfig.
    """

    base_dir: Optional[str] = None
    dog: DoGConfig = Field(default_factory=DoGConfig)
    etf: EtfConfig = Field(default_factory=EtfConfig)
    refinement: RefinementConfig = Field(default_factory=RefinementConfig)
    postprocessing: PostProcessingConfig = Field(default_factory=PostProcessingConfig)
    parallel: ParallelConfig = Field(default_factory=ParallelConfig)
    input: InputConfig = Field(default_factory=InputConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    visualization: VisualizationConfig = Field(default_factory=VisualizationConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
