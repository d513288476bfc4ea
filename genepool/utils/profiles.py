"""
Predefined configuration profiles for GenePool.

Profiles provide convenient shortcuts for common experimentation modes such as
quick smoke tests or long searches. They are merged on top of global defaults
before user overrides are applied.
"""

from __future__ import annotations

from typing import Dict

from omegaconf import OmegaConf


PROFILES: Dict[str, Dict[str, object]] = {
    "smoke": {
        "engine": {
            "population": 32,
            "generations": 50,
            "store_size": 3,
            "backend": "serial",
            "log_every": 10,
        },
    },
    "balanced": {
        "engine": {
            "population": 256,
            "generations": 5000,
            "elite_fraction": 0.1,
            "backend": "threads",
        },
    },
    "thorough": {
        "engine": {
            "population": 1024,
            "generations": 50000,
            "min_error": 0.0,
            "elite_fraction": 0.05,
            "backend": "threads",
            "log_every": 1000,
        },
        "logging": {
            "show_elite": True,
            "visit_every": 1000,
        },
    },
}


def list_profiles() -> Dict[str, Dict[str, object]]:
    """Return a copy of the registered profiles."""

    return {name: OmegaConf.to_container(OmegaConf.create(conf), resolve=True) for name, conf in PROFILES.items()}


def get_profile(name: str) -> Dict[str, object]:
    """Return a profile configuration by name."""

    if name not in PROFILES:
        raise KeyError(f"Unknown profile '{name}'. Available profiles: {list(PROFILES)}")
    return OmegaConf.to_container(OmegaConf.create(PROFILES[name]), resolve=True)
