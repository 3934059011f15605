"""
Asset registry for workflow builders.

Maps local file inputs to the ``asset_<n>`` keys referenced by the
instruction graph. Inputs are stored as given; nothing is read until the
builder materializes the registry at execution time.
"""
import logging
from typing import Any, Dict, Iterator, Tuple

from nutrient_dws.core.constants import ASSET_KEY_PREFIX
from nutrient_dws.core.error_handling import ValidationError
from nutrient_dws.services.file_inputs import is_remote_file_input, validate_file_input

logger = logging.getLogger(__name__)


class AssetRegistry:
    """Per-builder registry of files to upload with a build."""

    def __init__(self):
        self._assets: Dict[str, Any] = {}
        self._next_index = 0

    def register(self, file_input: Any) -> str:
        """Register a local file input and return its asset key.

        Every call allocates a new key, even for an input registered before.

        Raises:
            ValidationError: If the input is invalid or is a remote URL
        """
        if not validate_file_input(file_input):
            raise ValidationError(
                "Invalid file input provided to workflow",
                details={"input": repr(file_input)}
            )

        if is_remote_file_input(file_input):
            raise ValidationError(
                "Remote file input doesn't need to be registered",
                details={"input": repr(file_input)}
            )

        asset_key = f"{ASSET_KEY_PREFIX}{self._next_index}"
        self._next_index += 1
        self._assets[asset_key] = file_input

        logger.debug(f"Registered {asset_key} ({type(file_input).__name__})")
        return asset_key

    def snapshot(self) -> Dict[str, Any]:
        """Copy of the current key -> input mapping."""
        return dict(self._assets)

    def restore(self, snapshot: Dict[str, Any]) -> None:
        """Roll the mapping back to a snapshot.

        The key counter is left alone, so keys handed out since the snapshot
        are never reused.
        """
        dropped = [key for key in self._assets if key not in snapshot]
        self._assets = dict(snapshot)
        if dropped:
            logger.debug(f"Dropped {dropped} after a failed builder call")

    def clear(self) -> None:
        """Drop all assets and reset the key counter."""
        self._assets.clear()
        self._next_index = 0

    def items(self) -> Iterator[Tuple[str, Any]]:
        return iter(list(self._assets.items()))

    def __contains__(self, asset_key: str) -> bool:
        return asset_key in self._assets

    def __getitem__(self, asset_key: str) -> Any:
        return self._assets[asset_key]

    def __len__(self) -> int:
        return len(self._assets)

    def __repr__(self) -> str:
        return f"AssetRegistry(assets={list(self._assets)})"
