"""
Test configuration and fixtures for clonalsim tests.
"""

import pytest
import numpy as np
from pathlib import Path
import tempfile
import shutil

from clonalsim.config import SimulationConfig
from clonalsim.rng import choose_rng
from clonalsim.simulate import simulate_tumor


@pytest.fixture
def seed():
    """Fixed random seed for reproducible tests."""
    return 42


@pytest.fixture
def rng(seed):
    """Seeded generator for direct sampler tests."""
    return choose_rng(seed).generator


@pytest.fixture
def temp_dir():
    """Temporary directory for test outputs."""
    temp_dir = tempfile.mkdtemp()
    yield Path(temp_dir)
    shutil.rmtree(temp_dir)


@pytest.fixture
def default_config(seed):
    """Default four-clone configuration with a fixed seed."""
    return SimulationConfig(seed=seed)


@pytest.fixture
def small_config(seed):
    """Three clones, one shared group, germline variants on."""
    return SimulationConfig.from_dict({
        "subclone_freqs": [0.2, 0.3, 0.4],
        "n_mut_per_clone": [5, 6, 7],
        "n_mut_founder": 4,
        "n_mut_shared": {"2 3": 3},
        "germline_variants": {"enabled": True, "n_variants": 8},
        "seed": seed,
    })


@pytest.fixture
def small_result(small_config):
    """Simulation result built from ``small_config``."""
    return simulate_tumor(small_config)


@pytest.fixture
def noiseless_config():
    """Configuration with both noise stages disabled."""
    return SimulationConfig.from_dict({
        "subclone_freqs": [0.3, 0.5],
        "n_mut_per_clone": [4, 4],
        "n_mut_founder": 3,
        "n_mut_shared": {},
        "biological_noise": {"enabled": False},
        "sequencing_noise": {"enabled": False},
        "seed": 1,
    })


@pytest.fixture
def sample_vafs():
    """Hand-picked true VAFs covering the edges of [0, 1]."""
    return np.array([0.0, 0.01, 0.25, 0.5, 0.99, 1.0])
