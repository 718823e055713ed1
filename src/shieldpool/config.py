"""
Configuration for the shielded pool.

``BridgeConfig`` holds the ledger-level settings. Values can come from a
dictionary or from ``SHIELDPOOL_*`` environment variables; invalid values
raise ``ConfigurationError``.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from .crypto.hashing import available_hash_engines
from .crypto.merkle import TREE_DEPTH
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

MAX_VERIFYING_KEY_SIZE = 4096


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("true", "1", "yes", "on")


@dataclass
class BridgeConfig:
    """Configuration for the privacy bridge."""

    tree_depth: int = TREE_DEPTH
    max_verifying_key_size: int = MAX_VERIFYING_KEY_SIZE
    hash_engine: str = "xor-fold"
    # Reject raw deposits for asset ids with no registration
    require_registered_assets: bool = False

    # Environment variables that were applied
    environment_overrides: Dict[str, Any] = field(default_factory=dict)

    def validate(self) -> None:
        """Validate configuration parameters."""
        if not isinstance(self.tree_depth, int) or not 1 <= self.tree_depth <= 32:
            raise ConfigurationError(
                "tree_depth must be between 1 and 32",
                field="tree_depth",
                value=self.tree_depth,
            )
        if self.max_verifying_key_size <= 0:
            raise ConfigurationError(
                "max_verifying_key_size must be positive",
                field="max_verifying_key_size",
                value=self.max_verifying_key_size,
            )
        if self.hash_engine not in available_hash_engines():
            raise ConfigurationError(
                f"Unknown hash engine: {self.hash_engine!r}",
                field="hash_engine",
                value=self.hash_engine,
                expected=available_hash_engines(),
            )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tree_depth": self.tree_depth,
            "max_verifying_key_size": self.max_verifying_key_size,
            "hash_engine": self.hash_engine,
            "require_registered_assets": self.require_registered_assets,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "BridgeConfig":
        """Create from dictionary; unknown keys are rejected."""
        known = {"tree_depth", "max_verifying_key_size", "hash_engine", "require_registered_assets"}
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(
                f"Unknown configuration keys: {sorted(unknown)}", value=sorted(unknown)
            )
        config = cls(
            tree_depth=data.get("tree_depth", TREE_DEPTH),
            max_verifying_key_size=data.get("max_verifying_key_size", MAX_VERIFYING_KEY_SIZE),
            hash_engine=data.get("hash_engine", "xor-fold"),
            require_registered_assets=data.get("require_registered_assets", False),
        )
        config.validate()
        return config

    @classmethod
    def from_env(
        cls, prefix: str = "SHIELDPOOL_", environ: Optional[Mapping[str, str]] = None
    ) -> "BridgeConfig":
        """Defaults overridden by ``<prefix>TREE_DEPTH`` and friends."""
        environ = os.environ if environ is None else environ
        env_mappings = {
            f"{prefix}TREE_DEPTH": ("tree_depth", int),
            f"{prefix}MAX_VK_SIZE": ("max_verifying_key_size", int),
            f"{prefix}HASH_ENGINE": ("hash_engine", str),
            f"{prefix}REQUIRE_REGISTERED_ASSETS": ("require_registered_assets", bool),
        }
        config = cls()
        for env_var, (attr_name, attr_type) in env_mappings.items():
            env_value = environ.get(env_var)
            if env_value is None:
                continue
            try:
                if attr_type is bool:
                    value = _parse_bool(env_value)
                else:
                    value = attr_type(env_value)
            except (ValueError, TypeError) as e:
                raise ConfigurationError(
                    f"Invalid environment variable {env_var}={env_value!r}",
                    field=attr_name,
                    value=env_value,
                    cause=e,
                ) from e
            setattr(config, attr_name, value)
            config.environment_overrides[env_var] = value
        if config.environment_overrides:
            logger.debug("Applied environment overrides: %s", config.environment_overrides)
        config.validate()
        return config
