"""InternalConfig: Authoritative runtime configuration.

This is the ONLY config schema that runtime code sees. It is fully validated,
normalized, and contains NO optional fields that processing code depends on.

All .get() calls, fallback defaults, and validation logic are FORBIDDEN in
runtime code - everything is explicit here.
"""

from typing import Literal, Optional
from pydantic import Field, ConfigDict
from colidr.schemas.base import ColidrBaseModel


# =============================================================================
# Nested Configuration Models (Runtime)
# =============================================================================

class FrozenModel(ColidrBaseModel):
    """Immutable base for the runtime sections."""
    model_config = ConfigDict(
        extra='forbid',
        use_enum_values=True,
        str_strip_whitespace=True,
        frozen=True,
    )


class InternalDoGConfig(FrozenModel):
    """Runtime DoG configuration."""
    sigma_r: float = Field(gt=0)
    sigma_m: float = Field(gt=0)
    sigma_c: float = Field(gt=0)
    rho: float = Field(ge=0)
    tau: float = Field(ge=0, le=1.0)


class InternalEtfConfig(FrozenModel):
    """Runtime tangent flow configuration."""
    kernel: int = Field(ge=0)
    iterations: int = Field(ge=0)


class InternalRefinementConfig(FrozenModel):
    """Runtime refinement loop configuration."""
    fdog_iterations: int = Field(ge=0)
    blur_size: int = Field(ge=1)


class InternalPostProcessingConfig(FrozenModel):
    """Runtime post-processing configuration."""
    anti_alias: bool
    visualize_etf: bool
    vis_iterations: int = Field(ge=1)
    noise_seed: Optional[int]


class InternalParallelConfig(FrozenModel):
    """Runtime parallelism.

    Note: workers=None means one worker per CPU, resolved by parallel_rows().
    """
    workers: Optional[int] = Field(ge=1)
    min_band_rows: int = Field(ge=1)


class InternalInputConfig(FrozenModel):
    """Runtime input decoding configuration."""
    mode: Literal["auto", "raw", "base64", "url"]
    url_timeout_sec: float


class InternalOutputConfig(FrozenModel):
    """Runtime output encoding configuration."""
    image_format: Literal["jpeg", "png"]
    jpeg_quality: int
    output_mode: Literal["image", "json_image", "none"]


class InternalVisualizationConfig(FrozenModel):
    """Runtime visualization settings."""
    enabled: bool
    dpi: int
    figsize: tuple[float, float]
    output_format: Literal["png", "pdf", "jpeg"]
    cmap: str


class InternalLoggingConfig(FrozenModel):
    """Runtime logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


# =============================================================================
# Main InternalConfig
# =============================================================================

class InternalConfig(ColidrBaseModel):
    """Authoritative runtime configuration.

    This is the ONLY configuration schema that processing code sees.
    It is fully validated, immutable, and contains explicit values for
    all parameters.

    Usage
    -----
    Runtime modules receive InternalConfig and access fields directly:

        def __init__(self, config: InternalConfig):
            self.tau = config.dog.tau  # NOT .get()
            self.blur_size = config.refinement.blur_size

    Rules
    -----
    - NO .get() calls
    - NO fallback defaults
    - NO validation

    All of that happens during config resolution, not in runtime code.
    """

    base_dir: Optional[str]
    dog: InternalDoGConfig
    etf: InternalEtfConfig
    refinement: InternalRefinementConfig
    postprocessing: InternalPostProcessingConfig
    parallel: InternalParallelConfig
    input: InternalInputConfig
    output: InternalOutputConfig
    visualization: InternalVisualizationConfig
    logging: InternalLoggingConfig

    model_config = ConfigDict(
        extra='forbid',
        validate_assignment=True,
        use_enum_values=True,
        str_strip_whitespace=True,
        frozen=True,  # Immutable after construction
    )
