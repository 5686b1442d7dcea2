"""Tests for environment and project configuration."""

import json
from unittest.mock import patch

import pytest

from blocktuple.config import Config
from blocktuple.project_config import get_simulation_settings, get_storage_settings, load_config


class TestConfig:
    """Tests for Config class."""

    def test_config_defaults(self):
        config = Config(api_token="t")
        assert config.network == "mainnet"
        assert config.host == "https://api.rated.network"
        assert config.window == "1d"
        assert config.id_type == "pool"

    def test_from_env(self):
        env = {"RATED_API_BEARER_TOKEN": "abc", "RATED_NETWORK": "holesky"}
        with patch.dict("os.environ", env, clear=True):
            config = Config.from_env()
        assert config.api_token == "abc"
        assert config.network == "holesky"

    def test_from_env_missing_vars(self):
        with patch.dict("os.environ", {}, clear=True):
            with pytest.raises(ValueError, match="Missing required"):
                Config.from_env()

    def test_from_env_optional_returns_none(self):
        with patch.dict("os.environ", {}, clear=True):
            assert Config.from_env_optional() is None


class TestProjectConfig:
    """Tests for the JSON project config loader."""

    def test_defaults_without_file(self, tmp_path):
        config = load_config(tmp_path / "missing.json", reload=True)
        assert config.simulation.epoch_length == 32
        assert config.simulation.num_epochs == 225
        assert config.simulation.num_simulations == 50_000
        assert config.simulation.target_slot == "random"
        assert config.storage.sqlite_path is None

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "blocktuple.json"
        path.write_text(json.dumps({
            "simulation": {"pool_id": "Kraken", "num_epochs": 10, "target_epoch": None, "seed": 3},
            "storage": {"sqlite_path": "out.db"},
        }))

        config = load_config(path, reload=True)
        assert config.simulation.pool_id == "Kraken"
        assert config.simulation.num_epochs == 10
        assert config.simulation.target_epoch is None
        assert config.simulation.seed == 3
        assert config.simulation.num_simulations == 50_000
        assert config.storage.sqlite_path == "out.db"
        assert config.get("simulation.num_epochs") == 10
        assert config.get("simulation.unknown", "fallback") == "fallback"

    def test_env_path(self, tmp_path):
        path = tmp_path / "env.json"
        path.write_text(json.dumps({"simulation": {"workers": 3}}))
        with patch.dict("os.environ", {"BLOCKTUPLE_CONFIG_PATH": str(path)}):
            config = load_config(reload=True)
        assert config.simulation.workers == 3

    def test_settings_accessors(self, tmp_path):
        path = tmp_path / "accessors.json"
        path.write_text(json.dumps({
            "simulation": {"pool_id": "Coinbase", "target_slot": 7},
            "storage": {"sqlite_path": "runs.db"},
        }))
        assert get_simulation_settings(path).pool_id == "Coinbase"
        assert get_simulation_settings(path).target_slot == 7
        assert get_storage_settings(path).sqlite_path == "runs.db"
