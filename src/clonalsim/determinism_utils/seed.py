"""Environment fingerprinting for reproducible simulation runs."""

from __future__ import annotations

import os
import platform
import subprocess
import sys
from typing import Any

import numpy as np


def git_sha() -> str:
    """Get current git SHA, return 'unknown' if not available."""
    try:
        result = subprocess.run(
            ["git", "rev-parse", "HEAD"],
            capture_output=True,
            text=True,
            check=True,
            timeout=5,
        )
        return result.stdout.strip()
    except (subprocess.CalledProcessError, subprocess.TimeoutExpired, FileNotFoundError):
        return "unknown"


def env_fingerprint() -> dict[str, Any]:
    """Capture environment fingerprint for reproducibility tracking."""
    import pandas as pd

    return {
        "python_version": sys.version.split()[0],
        "platform": platform.platform(),
        "machine": platform.machine(),
        "cpu_count": os.cpu_count(),
        "git_sha": git_sha(),
        "numpy_version": np.__version__,
        "pandas_version": pd.__version__,
    }
