"""Core line drawing runner, separated from argument parsing.

Scripts are thin wrappers; this is the real implementation.
"""

import argparse
import importlib.util
import json
import logging
import shutil
import sys
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

from colidr.pipeline.orchestrator import PipelineOrchestrator
from colidr.schemas import resolve_config, ParamConfig, UserConfig, CLIConfig
from colidr.setup_directories import setup_output_directories

logger = logging.getLogger(__name__)


def load_user_config_dict(config_path: str) -> dict:
    """Load user config dict from Python file.

    Returns the raw dict before Pydantic validation.

    Parameters
    ----------
    config_path : str
        Path to user config Python file containing CONFIG dict.

    Returns
    -------
    dict
        Raw user configuration dictionary.

    Raises
    ------
    FileNotFoundError
        If config file does not exist.
    ValueError
        If no CONFIG dict found in file.
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")

    spec = importlib.util.spec_from_file_location("config_module", path)
    if spec is None or spec.loader is None:
        raise ImportError(f"Could not load config module from {path}")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    for name in dir(module):
        if name.startswith('CONFIG'):
            obj = getattr(module, name)
            if isinstance(obj, dict):
                return obj

    raise ValueError(f"No CONFIG dict found in {path}")


def run_line_drawing(
    inputs: Iterable[str],
    user_config_path: Optional[str] = None,
    user_overrides: Optional[Dict[str, Any]] = None,
    cli_args: Optional[Dict[str, Any]] = None,
    rerun: bool = False,
    verbose: bool = False,
) -> Dict[str, list]:
    """Draw every input image.

    1. Loads and resolves configuration (Param < User < CLI)
    2. Sets up output directories (optionally cleaning them first)
    3. Runs the pipeline orchestrator until all inputs are done

    Parameters
    ----------
    inputs : iterable of str
        Image files.
    user_config_path : str, optional
        Python file with a CONFIG dict of drawing parameters.
    user_overrides : dict, optional
        Drawing parameters from the command line (``sr``, ``k``, ...). They
        are applied on top of the user config file.
    cli_args : dict, optional
        Operational overrides: base_dir, log_level, workers, anti_alias,
        visualize_etf, plot, image_format.
    rerun : bool, optional
        If True, delete the output directory before running.
    verbose : bool, optional
        If True, enable DEBUG logging and print the resolved config.

    Returns
    -------
    dict
        Summary from PipelineOrchestrator.start().
    """
    param_cfg = ParamConfig()

    user_cfg_dict = load_user_config_dict(user_config_path) if user_config_path else {}
    user_cfg_dict = {**user_cfg_dict, **(user_overrides or {})}
    user_cfg = UserConfig.model_validate(user_cfg_dict)

    cli_args = dict(cli_args or {})
    if verbose and "log_level" not in cli_args:
        cli_args["log_level"] = "DEBUG"
    cli_dict = {k: v for k, v in cli_args.items() if v is not None}
    cli_cfg = CLIConfig.model_validate(cli_dict) if cli_dict else CLIConfig()

    config = resolve_config(param_cfg, user_cfg, cli_cfg)

    base_dir = Path(config.base_dir) if config.base_dir else Path.cwd() / "colidr_output"
    if rerun and base_dir.exists():
        print(f"Cleaning output directory: {base_dir}")
        shutil.rmtree(base_dir)

    output_dirs = setup_output_directories(base_dir)

    inputs = list(inputs)
    print(f"\n{'='*60}")
    print("colidr Coherent Line Drawing")
    print('='*60)
    print(f"Inputs: {len(inputs)} file(s)")
    print(f"Config: {user_config_path or 'defaults'}")
    print(f"Output: {output_dirs['base']}")
    print('='*60)

    if verbose:
        print("\nFull Internal Configuration:")
        print(json.dumps(config.model_dump(), indent=2))
        print('='*60)

    orchestrator = PipelineOrchestrator(config, output_dirs)
    return orchestrator.start(inputs)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Turn photographs into coherent line drawings")
    parser.add_argument("inputs", nargs="+", help="Image files to draw")
    parser.add_argument("-c", "--config", help="Path to user config file (Python file with CONFIG dict)")
    parser.add_argument("-o", "--output-dir", dest="base_dir", help="Output directory")

    cld = parser.add_argument_group("drawing parameters")
    cld.add_argument("--sr", type=float, help="Surround/center sigma ratio")
    cld.add_argument("--sm", type=float, help="Sigma of the integration along the flow")
    cld.add_argument("--sc", type=float, help="Center sigma of the gradient DoG")
    cld.add_argument("--rho", type=float, help="Weight of the surround Gaussian")
    cld.add_argument("--tau", type=float, help="Binarization threshold")
    cld.add_argument("--k", type=int, help="ETF refinement kernel radius")
    cld.add_argument("--ei", type=int, help="ETF refinement iterations")
    cld.add_argument("--di", type=int, help="FDoG refinement iterations")
    cld.add_argument("--bl", type=int, help="Blur size (odd)")

    parser.add_argument("--anti-alias", action="store_true", default=None, help="Soften the drawing")
    parser.add_argument("--visualize-etf", action="store_true", default=None,
                        help="Also write a tangent field visualization")
    parser.add_argument("--plot", action="store_true", default=None, help="Write summary figures")
    parser.add_argument("--format", dest="image_format", choices=["jpeg", "jpg", "png"],
                        help="Output image format")
    parser.add_argument("--workers", type=int, help="Worker threads per stage")
    parser.add_argument("--rerun", action="store_true", help="Delete output directory before running")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv=None) -> int:
    """Console entry point (``colidr-draw``)."""
    args = build_parser().parse_args(argv)

    user_overrides = {
        key: getattr(args, key)
        for key in ("sr", "sm", "sc", "rho", "tau", "k", "ei", "di", "bl")
        if getattr(args, key) is not None
    }
    cli_args = {
        "base_dir": args.base_dir,
        "anti_alias": args.anti_alias,
        "visualize_etf": args.visualize_etf,
        "plot": args.plot,
        "image_format": args.image_format,
        "workers": args.workers,
    }

    summary = run_line_drawing(
        args.inputs,
        user_config_path=args.config,
        user_overrides=user_overrides,
        cli_args=cli_args,
        rerun=args.rerun,
        verbose=args.verbose,
    )
    return 1 if summary["failed"] else 0


if __name__ == "__main__":
    sys.exit(main())
