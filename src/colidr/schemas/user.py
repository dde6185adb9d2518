"""UserConfig: Forgiving, minimal user-facing configuration.

This schema accepts user inputs in a variety of formats, with the short
query-style keys of the line drawing service (sr, sm, sc, rho, tau, k, ei,
di, bl, ai) as aliases for the long parameter names.

UserConfig is intentionally minimal - users only specify what they want
to override from the expert defaults. Validation is lenient: values may
arrive as strings (from a query string) and are coerced by Pydantic.
"""

from typing import Literal, Optional
from urllib.parse import parse_qs

from pydantic import Field, field_validator
from colidr.schemas.base import ColidrBaseModel


class UserDoGConfig(ColidrBaseModel):
    """User-facing DoG config."""
    sigma_r: Optional[float] = None
    sigma_m: Optional[float] = None
    sigma_c: Optional[float] = None
    rho: Optional[float] = None
    tau: Optional[float] = None


class UserEtfConfig(ColidrBaseModel):
    """User-facing tangent flow config."""
    kernel: Optional[int] = None
    iterations: Optional[int] = None


class UserRefinementConfig(ColidrBaseModel):
    """User-facing refinement loop config."""
    fdog_iterations: Optional[int] = None
    blur_size: Optional[int] = None


class UserPostProcessingConfig(ColidrBaseModel):
    """User-facing post-processing config."""
    anti_alias: Optional[bool] = None
    visualize_etf: Optional[bool] = None
    vis_iterations: Optional[int] = None
    noise_seed: Optional[int] = None


class UserConfig(ColidrBaseModel):
    """User-facing configuration schema.

    Minimal, forgiving, and uses the service's short parameter names as
    aliases. Users only specify what they want to override from ParamConfig
    defaults.

    Usage
    -----
        user_cfg = UserConfig(sr=2.0, tau="0.95", ai="true")
        user_cfg = UserConfig.from_query("sr=2.0&tau=0.95&ai=true")

        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    # DoG settings (flat aliases)
    sigma_r: Optional[float] = Field(None, alias="sr")
    sigma_m: Optional[float] = Field(None, alias="sm")
    sigma_c: Optional[float] = Field(None, alias="sc")
    rho: Optional[float] = None
    tau: Optional[float] = None

    # Tangent flow settings (flat aliases)
    etf_kernel: Optional[int] = Field(None, alias="k")
    etf_iterations: Optional[int] = Field(None, alias="ei")

    # Refinement loop settings (flat aliases)
    fdog_iterations: Optional[int] = Field(None, alias="di")
    blur_size: Optional[int] = Field(None, alias="bl")

    # Post-processing (flat aliases)
    anti_alias: Optional[bool] = Field(None, alias="ai")
    visualize_etf: Optional[bool] = None

    # Boundary settings
    input_mode: Optional[Literal["auto", "raw", "base64", "url"]] = None
    output_mode: Optional[Literal["image", "json_image", "none"]] = Field(None, alias="output")
    image_format: Optional[Literal["jpeg", "png"]] = None
    base_dir: Optional[str] = None

    # Nested overrides (advanced users)
    dog: Optional[UserDoGConfig] = None
    etf: Optional[UserEtfConfig] = None
    refinement: Optional[UserRefinementConfig] = None
    postprocessing: Optional[UserPostProcessingConfig] = None

    model_config = ColidrBaseModel.model_config.copy()
    # Allow forgiving input dictionaries (ignore unknown keys such as "output" extras)
    model_config.update({"populate_by_name": True, "extra": "ignore"})

    @field_validator("input_mode", "output_mode", "image_format", mode="before")
    @classmethod
    def normalize_names(cls, v):
        """Normalize mode and format names to lowercase."""
        if isinstance(v, str):
            v = v.lower().strip()
            if v == "jpg":
                return "jpeg"
        return v

    @classmethod
    def from_query(cls, query: str) -> "UserConfig":
        """Build a UserConfig from a URL query string.

        Empty values are treated as unset; for repeated keys the last value
        wins.

        Examples
        --------
        >>> UserConfig.from_query("sr=2.0&k=2&ai=true").etf_kernel
        2
        """
        params = parse_qs(query.lstrip("?"), keep_blank_values=False)
        return cls.model_validate({key: values[-1] for key, values in params.items()})

    def to_internal_overrides(self) -> dict:
        """Convert flat UserConfig to nested InternalConfig structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        if self.base_dir is not None:
            overrides["base_dir"] = str(self.base_dir)

        # DoG section
        dog = {}
        for name in ("sigma_r", "sigma_m", "sigma_c", "rho", "tau"):
            value = getattr(self, name)
            if value is not None:
                dog[name] = value
        if self.dog is not None:
            dog.update(self.dog.model_dump(exclude_none=True))
        if dog:
            overrides["dog"] = dog

        # Tangent flow section
        etf = {}
        if self.etf_kernel is not None:
            etf["kernel"] = self.etf_kernel
        if self.etf_iterations is not None:
            etf["iterations"] = self.etf_iterations
        if self.etf is not None:
            etf.update(self.etf.model_dump(exclude_none=True))
        if etf:
            overrides["etf"] = etf

        # Refinement section
        refinement = {}
        if self.fdog_iterations is not None:
            refinement["fdog_iterations"] = self.fdog_iterations
        if self.blur_size is not None:
            refinement["blur_size"] = self.blur_size
        if self.refinement is not None:
            refinement.update(self.refinement.model_dump(exclude_none=True))
        if refinement:
            overrides["refinement"] = refinement

        # Post-processing section
        postprocessing = {}
        if self.anti_alias is not None:
            postprocessing["anti_alias"] = self.anti_alias
        if self.visualize_etf is not None:
            postprocessing["visualize_etf"] = self.visualize_etf
        if self.postprocessing is not None:
            postprocessing.update(self.postprocessing.model_dump(exclude_none=True))
        if postprocessing:
            overrides["postprocessing"] = postprocessing

        if self.input_mode is not None:
            overrides["input"] = {"mode": self.input_mode}

        output = {}
        if self.output_mode is not None:
            output["output_mode"] = self.output_mode
        if self.image_format is not None:
            output["image_format"] = self.image_format
        if output:
            overrides["output"] = output

        return overrides
