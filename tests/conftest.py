"""
Shared pytest fixtures for the cube simulation.

Fixtures build small, seeded populations so each test controls exactly which
faces touch.
"""

from __future__ import annotations

import pathlib
import sys
from typing import Any, Callable, Dict

import pytest
import yaml

REPO_ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from cubesim.particle_group import ParticleGroup  # noqa: E402
from cubesim.settings import BondingSettings, MoleculeSettings, SimulationSettings  # noqa: E402


@pytest.fixture(scope="session")
def project_root() -> pathlib.Path:
    """Return repository root directory."""
    return REPO_ROOT


@pytest.fixture(scope="session")
def config_template(project_root: pathlib.Path) -> Dict[str, Any]:
    """Parsed representation of the default simulation config template."""
    with (project_root / "config" / "template.yaml").open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle)


@pytest.fixture
def group_factory() -> Callable[..., ParticleGroup]:
    """Build a seeded ParticleGroup; molecules start unrotated unless asked otherwise."""

    def make_group(policy: str = "coplanar", initial_rotation: str = "identity", seed: int = 1234) -> ParticleGroup:
        settings = SimulationSettings(
            bonding=BondingSettings(policy=policy),
            molecules=MoleculeSettings(initial_rotation=initial_rotation),
            seed=seed,
        )
        return ParticleGroup(settings)

    return make_group


@pytest.fixture
def group(group_factory: Callable[..., ParticleGroup]) -> ParticleGroup:
    return group_factory()
