#!/usr/bin/env python3
"""``colidr`` Coherent Line Drawing Runner.

Usage:
    python scripts/run_line_drawing.py photo.jpg
    python scripts/run_line_drawing.py photo.jpg --config scripts/user_config.py
    python scripts/run_line_drawing.py *.png -o out --sr 2.0 --k 2 --plot

Note: User config in scripts/user_config.py, expert defaults in colidr.schemas.param
"""

import sys
from pathlib import Path

# Add src to path
project_root = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(project_root / "src"))

from colidr.cli.run_drawing import main


if __name__ == "__main__":
    sys.exit(main())
