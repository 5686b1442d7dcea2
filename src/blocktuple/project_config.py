"""Centralized project configuration loader.

All scripts in the project should use this module to load configuration.

Usage:
    from blocktuple.project_config import load_config, get_simulation_settings, get_storage_settings

    # Load full config
    config = load_config()

    # Get specific sections
    simulation = get_simulation_settings()
    storage = get_storage_settings()

Config file locations (in order of priority):
    1. Path specified in BLOCKTUPLE_CONFIG_PATH environment variable
    2. config/blocktuple.json (project root)
    3. ~/.config/blocktuple/config.json (user home)
"""

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Any, Union

from .distribution import SLOTS_PER_EPOCH

# Default config file locations
CONFIG_PATHS = [
    Path(__file__).parent.parent.parent / "config" / "blocktuple.json",
    Path.home() / ".config" / "blocktuple" / "config.json",
]


@dataclass
class SimulationSettings:
    """Scalars driving the statistics run."""
    pool_id: str = "Lido"
    epoch_length: int = SLOTS_PER_EPOCH
    num_epochs: int = 225
    num_simulations: int = 50_000
    target_epoch: Optional[int] = 225
    target_slot: Optional[Union[int, str]] = "random"
    projection_slot: Optional[int] = None
    pmf_samples: int = 1_000_000
    seed: Optional[int] = None
    workers: int = 1

    @classmethod
    def from_dict(cls, data: dict) -> "SimulationSettings":
        defaults = cls()
        return cls(
            pool_id=data.get("pool_id", defaults.pool_id),
            epoch_length=data.get("epoch_length", defaults.epoch_length),
            num_epochs=data.get("num_epochs", defaults.num_epochs),
            num_simulations=data.get("num_simulations", defaults.num_simulations),
            target_epoch=data.get("target_epoch", defaults.target_epoch),
            target_slot=data.get("target_slot", defaults.target_slot),
            projection_slot=data.get("projection_slot"),
            pmf_samples=data.get("pmf_samples", defaults.pmf_samples),
            seed=data.get("seed"),
            workers=data.get("workers", defaults.workers),
        )


@dataclass
class StorageSettings:
    """Result storage configuration."""
    sqlite_path: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "StorageSettings":
        return cls(sqlite_path=data.get("sqlite_path"))


class ProjectConfig:
    """Main project configuration container."""

    def __init__(self, data: dict):
        self._data = data
        self.simulation = SimulationSettings.from_dict(data.get("simulation", {}))
        self.storage = StorageSettings.from_dict(data.get("storage", {}))

    def get(self, key: str, default: Any = None) -> Any:
        """Get a raw config value by key path (e.g., 'simulation.num_epochs')."""
        keys = key.split(".")
        value = self._data
        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
            else:
                return default
        return value if value is not None else default


_config_cache: Optional[ProjectConfig] = None


def load_config(path: Optional[str | Path] = None, reload: bool = False) -> ProjectConfig:
    """Load project configuration from JSON file.

    Args:
        path: Explicit config file path. If None, searches default locations.
        reload: Force reload even if cached.

    Returns:
        ProjectConfig instance. Defaults are used when no file is found.
    """
    global _config_cache

    if _config_cache is not None and not reload and path is None:
        return _config_cache

    # Determine config path
    config_path = None

    if path:
        config_path = Path(path)
    elif os.getenv("BLOCKTUPLE_CONFIG_PATH"):
        config_path = Path(os.getenv("BLOCKTUPLE_CONFIG_PATH"))
    else:
        for default_path in CONFIG_PATHS:
            if default_path.exists():
                config_path = default_path
                break

    if config_path is None or not config_path.exists():
        # Return default config if no file found
        _config_cache = ProjectConfig({})
        return _config_cache

    with open(config_path) as f:
        data = json.load(f)

    _config_cache = ProjectConfig(data)
    return _config_cache


def get_simulation_settings(path: Optional[str | Path] = None) -> SimulationSettings:
    """Get simulation settings."""
    return load_config(path).simulation


def get_storage_settings(path: Optional[str | Path] = None) -> StorageSettings:
    """Get storage settings."""
    return load_config(path).storage
