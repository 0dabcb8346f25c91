"""Settings repository interface."""

from abc import ABC, abstractmethod
from typing import Any


class SettingsRepository(ABC):
    """Key-value storage for settings groups.

    Values are stored exactly as given; normalization happens in the
    settings service.
    """

    @abstractmethod
    async def get_all(self) -> dict[str, dict[str, Any]]:
        """Load every stored group.

        Returns:
            Mapping of group name to its stored key/value pairs
        """
        pass

    @abstractmethod
    async def save_group(self, group: str, values: dict[str, Any]) -> None:
        """Persist all keys of one group, replacing stored values."""
        pass
