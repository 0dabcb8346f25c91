"""In-memory settings store for testing."""

from typing import Any

from donorlink.domain.repository.settings import SettingsRepository


class InMemorySettingsRepository(SettingsRepository):
    def __init__(self) -> None:
        self._groups: dict[str, dict[str, Any]] = {}

    async def get_all(self) -> dict[str, dict[str, Any]]:
        return {group: dict(values) for group, values in self._groups.items()}

    async def save_group(self, group: str, values: dict[str, Any]) -> None:
        self._groups.setdefault(group, {}).update(values)
