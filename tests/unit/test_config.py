"""
Unit tests for bridge configuration.
"""

import pytest

from shieldpool.config import MAX_VERIFYING_KEY_SIZE, BridgeConfig
from shieldpool.errors import ConfigurationError, ValidationError


class TestBridgeConfig:
    """Test BridgeConfig."""

    def test_defaults(self):
        """Test default values."""
        config = BridgeConfig()
        config.validate()
        assert config.tree_depth == 20
        assert config.max_verifying_key_size == MAX_VERIFYING_KEY_SIZE == 4096
        assert config.hash_engine == "xor-fold"
        assert config.require_registered_assets is False

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"tree_depth": 0},
            {"tree_depth": 33},
            {"max_verifying_key_size": 0},
            {"hash_engine": "md5"},
        ],
    )
    def test_invalid_values(self, kwargs):
        """Test validation failures."""
        with pytest.raises(ConfigurationError) as exc_info:
            BridgeConfig(**kwargs).validate()
        assert isinstance(exc_info.value, ValidationError)

    def test_dict_round_trip(self):
        """Test to_dict/from_dict."""
        config = BridgeConfig(tree_depth=8, hash_engine="blake2s", require_registered_assets=True)
        restored = BridgeConfig.from_dict(config.to_dict())
        assert restored.to_dict() == config.to_dict()

    def test_from_dict_unknown_key(self):
        """Test unknown keys are rejected."""
        with pytest.raises(ConfigurationError):
            BridgeConfig.from_dict({"tree_depth": 8, "fees": 1})


class TestEnvironmentOverrides:
    """Test SHIELDPOOL_* environment variables."""

    def test_overrides_applied(self):
        """Test each variable reaches its field."""
        environ = {
            "SHIELDPOOL_TREE_DEPTH": "12",
            "SHIELDPOOL_MAX_VK_SIZE": "2048",
            "SHIELDPOOL_HASH_ENGINE": "blake2s",
            "SHIELDPOOL_REQUIRE_REGISTERED_ASSETS": "yes",
        }
        config = BridgeConfig.from_env(environ=environ)
        assert config.tree_depth == 12
        assert config.max_verifying_key_size == 2048
        assert config.hash_engine == "blake2s"
        assert config.require_registered_assets is True
        assert config.environment_overrides["SHIELDPOOL_TREE_DEPTH"] == 12

    def test_custom_prefix(self):
        """Test a different prefix."""
        config = BridgeConfig.from_env(prefix="POOL_", environ={"POOL_TREE_DEPTH": "4"})
        assert config.tree_depth == 4

    def test_no_overrides(self):
        """Test an empty environment yields defaults."""
        config = BridgeConfig.from_env(environ={})
        assert config.to_dict() == BridgeConfig().to_dict()
        assert config.environment_overrides == {}

    def test_bad_integer(self):
        """Test non-numeric values raise ConfigurationError."""
        with pytest.raises(ConfigurationError) as exc_info:
            BridgeConfig.from_env(environ={"SHIELDPOOL_TREE_DEPTH": "deep"})
        assert exc_info.value.field == "tree_depth"

    def test_out_of_range(self):
        """Test parsed values are still validated."""
        with pytest.raises(ConfigurationError):
            BridgeConfig.from_env(environ={"SHIELDPOOL_TREE_DEPTH": "64"})

    def test_reads_process_environment(self, monkeypatch):
        """Test os.environ is used by default."""
        monkeypatch.setenv("SHIELDPOOL_TREE_DEPTH", "6")
        assert BridgeConfig.from_env().tree_depth == 6
