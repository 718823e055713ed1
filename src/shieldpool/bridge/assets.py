"""Registry mapping external asset identifiers to local numeric ids."""

import threading
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from ..crypto.notes import MAX_AMOUNT, MAX_ASSET_ID
from ..errors import AssetNotRegistered, LedgerError, ValidationError


@dataclass
class RegisteredAsset:
    """Registration details for an external asset."""

    external_id: str
    local_id: int
    min_deposit: int = 0
    is_active: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "external_id": self.external_id,
            "local_id": self.local_id,
            "min_deposit": self.min_deposit,
            "is_active": self.is_active,
        }


class AssetRegistry:
    """Assigns dense local ids to external assets."""

    def __init__(self):
        self._assets: Dict[str, RegisteredAsset] = {}
        self._by_local_id: Dict[int, RegisteredAsset] = {}
        self._next_local_id = 0
        self._lock = threading.RLock()

    def register(self, external_id: str, min_deposit: int = 0) -> RegisteredAsset:
        """
        Register an asset, or update the minimum of an existing registration.

        Args:
            external_id: Identifier of the asset on its home network
            min_deposit: Smallest accepted deposit

        Returns:
            The registration, with its local id
        """
        if not external_id:
            raise ValidationError("external_id cannot be empty", field="external_id")
        if not 0 <= min_deposit <= MAX_AMOUNT:
            raise ValidationError(
                "min_deposit out of range", field="min_deposit", value=min_deposit
            )
        with self._lock:
            existing = self._assets.get(external_id)
            if existing is not None:
                existing.min_deposit = min_deposit
                existing.is_active = True
                return existing
            if self._next_local_id > MAX_ASSET_ID:
                raise LedgerError("Local asset id space exhausted")
            asset = RegisteredAsset(external_id, self._next_local_id, min_deposit)
            self._assets[external_id] = asset
            self._by_local_id[asset.local_id] = asset
            self._next_local_id += 1
            return asset

    def get(self, external_id: str) -> Optional[RegisteredAsset]:
        with self._lock:
            return self._assets.get(external_id)

    def by_local_id(self, local_id: int) -> Optional[RegisteredAsset]:
        with self._lock:
            return self._by_local_id.get(local_id)

    def local_id_and_minimum(self, external_id: str) -> Optional[Tuple[int, int]]:
        """``(local_id, min_deposit)`` of an active registration, else ``None``."""
        with self._lock:
            asset = self._assets.get(external_id)
            if asset is None or not asset.is_active:
                return None
            return asset.local_id, asset.min_deposit

    def deactivate(self, external_id: str) -> None:
        with self._lock:
            asset = self._assets.get(external_id)
            if asset is None:
                raise AssetNotRegistered(f"Asset {external_id!r} is not registered")
            asset.is_active = False

    def list_assets(self) -> List[RegisteredAsset]:
        with self._lock:
            return list(self._assets.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._assets)
