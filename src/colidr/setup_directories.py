"""
Directory setup for line drawing runs.

Flat layout under one base directory:
- drawings/  line drawings, named after the source image
- etf/       tangent field visualizations
- plots/     matplotlib summary figures
- logs/      pipeline log
"""

from pathlib import Path
from typing import Dict, Optional, Union


def setup_output_directories(base_output_dir: Optional[Union[str, Path]] = None) -> Dict[str, Path]:
    """
    Set up the output directory structure.

    Parameters
    ----------
    base_output_dir : str or Path, optional
        Base output directory. If None, ``./colidr_output`` is used.

    Returns
    -------
    dict
        Dictionary with paths: 'base', 'drawings', 'etf', 'plots', 'logs'
    """
    if base_output_dir is None:
        base_output_dir = Path.cwd() / "colidr_output"

    base_output_dir = Path(base_output_dir).expanduser().resolve()

    directories = {
        "base": base_output_dir,
        "drawings": base_output_dir / "drawings",
        "etf": base_output_dir / "etf",
        "plots": base_output_dir / "plots",
        "logs": base_output_dir / "logs",
    }

    for path in directories.values():
        path.mkdir(parents=True, exist_ok=True)

    return directories


def get_drawing_path(output_dirs: Dict[str, Path], source_name: str, image_format: str = "jpeg") -> Path:
    """
    Get the line drawing path for a source image.

    Example
    -------
    >>> get_drawing_path(dirs, 'portrait.png', 'jpeg')
    Path('output/drawings/portrait_cld.jpg')
    """
    ext = "jpg" if image_format == "jpeg" else image_format
    return Path(output_dirs["drawings"]) / f"{Path(source_name).stem}_cld.{ext}"


def get_etf_path(output_dirs: Dict[str, Path], source_name: str) -> Path:
    """Get the tangent field visualization path (always PNG)."""
    return Path(output_dirs["etf"]) / f"{Path(source_name).stem}_etf.png"


def get_plot_path(output_dirs: Dict[str, Path], source_name: str, plot_type: str = "summary",
                  output_format: str = "png") -> Path:
    """
    Get the plot path for a source image.

    Example
    -------
    >>> get_plot_path(dirs, 'portrait.png')
    Path('output/plots/portrait_summary.png')
    """
    return Path(output_dirs["plots"]) / f"{Path(source_name).stem}_{plot_type}.{output_format}"


def get_log_path(output_dirs: Dict[str, Path]) -> Path:
    """Get the pipeline log file path."""
    log_dir = Path(output_dirs["logs"])
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir / "colidr_pipeline.log"
