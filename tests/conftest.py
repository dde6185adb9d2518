"""Root-level pytest fixtures for the colidr test suite.

Provides shared configuration fixtures following the Pydantic-based
architecture. Tests build configs through these fixtures instead of
hand-writing InternalConfig dicts.
"""

import pytest
from pathlib import Path
import tempfile
import shutil

from colidr.schemas import ParamConfig, UserConfig, resolve_config


# =============================================================================
# Configuration Fixtures (Pydantic-based)
# =============================================================================

@pytest.fixture
def param_config():
    """Expert configuration with all defaults."""
    return ParamConfig()


@pytest.fixture
def internal_config(param_config):
    """Fully validated runtime configuration (no overrides).

    Examples
    --------
    >>> def test_processor_init(internal_config):
    ...     proc = LineDrawingProcessor(internal_config)
    ...     assert proc.config.dog.tau == 0.98
    """
    return resolve_config(param_config, None, None)


@pytest.fixture
def make_config(param_config):
    """Factory fixture for creating custom test configs.

    Returns a callable that accepts UserConfig-compatible kwargs (short
    aliases such as ``sr`` or ``di`` included) plus an optional ``cli``
    dict of CLIConfig overrides.

    Examples
    --------
    >>> def test_single_pass(make_config):
    ...     config = make_config(di=0)
    ...     assert config.refinement.fdog_iterations == 0
    """
    def _make(cli=None, **user_overrides):
        user = UserConfig(**user_overrides) if user_overrides else None
        return resolve_config(param_config, user, cli)

    return _make


# =============================================================================
# Directory Fixtures
# =============================================================================

@pytest.fixture
def temp_dir():
    """Temporary directory that is cleaned up after test."""
    d = tempfile.mkdtemp()
    yield Path(d)
    shutil.rmtree(d, ignore_errors=True)


@pytest.fixture
def output_dirs(temp_dir):
    """Standard colidr output directory structure under temp_dir."""
    from colidr.setup_directories import setup_output_directories
    return setup_output_directories(temp_dir)


# =============================================================================
# Logging Fixtures
# =============================================================================

@pytest.fixture
def restore_logging():
    """Put back the root logger handlers the orchestrator replaces."""
    import logging

    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)
