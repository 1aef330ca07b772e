"""Settings service — persistent key/value preferences."""

from __future__ import annotations

from typing import TYPE_CHECKING

from result import Err, Ok, Result

if TYPE_CHECKING:
    from clocked.config import Config
    from clocked.data.store import ProjectStore

IDLE_THRESHOLD_KEY = "idle_threshold_ms"
COST_PER_MESSAGE_KEY = "cost_per_message"
SUBSCRIPTION_COST_KEY = "subscription_cost"


class SettingsService:
    """Service for settings stored alongside the cache.

    Typed helpers fall back to the startup ``Config`` when a setting is absent
    or unparsable.
    """

    def __init__(self, store: ProjectStore, config: Config) -> None:
        self._store = store
        self._config = config

    async def get(self, key: str) -> Result[str | None, str]:
        return Ok(await self._store.get_setting(key))

    async def set(self, key: str, value: str) -> Result[None, str]:
        key = key.strip()
        if not key:
            return Err("Setting key must not be empty")
        match key:
            case "idle_threshold_ms":
                if not value.isdigit() or int(value) <= 0:
                    return Err(f"{key} must be a positive integer, got {value!r}")
            case "cost_per_message" | "subscription_cost":
                try:
                    if float(value) < 0:
                        return Err(f"{key} must not be negative, got {value!r}")
                except ValueError:
                    return Err(f"{key} must be a number, got {value!r}")
        await self._store.set_setting(key, value)
        return Ok(None)

    async def delete(self, key: str) -> Result[bool, str]:
        return Ok(await self._store.delete_setting(key))

    async def get_all(self) -> Result[dict[str, str], str]:
        return Ok(await self._store.list_settings())

    async def idle_threshold_ms(self) -> int:
        value = await self._store.get_setting(IDLE_THRESHOLD_KEY)
        if value is not None and value.isdigit() and int(value) > 0:
            return int(value)
        return self._config.idle_threshold_ms

    async def cost_per_message(self) -> float:
        value = await self._store.get_setting(COST_PER_MESSAGE_KEY)
        if value is not None:
            try:
                rate = float(value)
            except ValueError:
                return self._config.cost_per_message
            if rate >= 0:
                return rate
        return self._config.cost_per_message

    async def subscription_cost(self) -> float:
        value = await self._store.get_setting(SUBSCRIPTION_COST_KEY)
        if value is not None:
            try:
                cost = float(value)
            except ValueError:
                return self._config.subscription_cost
            if cost >= 0:
                return cost
        return self._config.subscription_cost
