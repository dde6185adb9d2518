"""colidr User Configuration.

This is the user-facing configuration file. Modify settings here to customize
the drawing. Expert defaults live in colidr/schemas/param.py; only the keys
you set here override them.

Usage:
    python scripts/run_line_drawing.py photo.jpg --config scripts/user_config.py
"""

CONFIG = {
    # ========================================================================
    # OUTPUT
    # ========================================================================
    "base_dir": "./colidr_output",  # All outputs go here
    "image_format": "jpeg",         # "jpeg" or "png"

    # ========================================================================
    # DIFFERENCE OF GAUSSIANS
    # ========================================================================
    "sr": 2.6,     # Surround/center sigma ratio
    "sm": 3.0,     # Sigma of the integration along the flow (longer lines)
    "sc": 1.0,     # Center sigma (line thickness)
    "rho": 0.98,   # Surround weight (noise suppression)
    "tau": 0.98,   # Threshold: higher keeps more edges

    # ========================================================================
    # EDGE TANGENT FLOW
    # ========================================================================
    "k": 1,        # Refinement kernel radius
    "ei": 1,       # Refinement iterations

    # ========================================================================
    # REFINEMENT & POST-PROCESSING
    # ========================================================================
    "di": 1,       # Extra FDoG passes
    "bl": 3,       # Blur size between passes (odd)
    "ai": False,   # Anti-alias the final drawing
    "visualize_etf": False,
}
