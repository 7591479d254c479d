"""Settings provider backed by a durable settings store.

Reads are synchronous and served from an in-memory mirror. Until init()
finishes the mirror holds the compiled-in defaults, so callers never wait
on storage to read configuration.
"""

import asyncio
import logging
from collections.abc import Callable, Mapping

from metrichistory.core.exceptions import StorageFault
from metrichistory.core.models import DEFAULT_SETTINGS, SettingValue
from metrichistory.core.ports import SettingsStoragePort

logger = logging.getLogger(__name__)

SettingsListener = Callable[[str, SettingValue | None], None]


def _check_value(key: str, value: object) -> None:
    if not isinstance(value, (str, int, float, bool)):
        raise TypeError(
            f"Setting {key!r} must be str, int, float or bool, "
            f"got {type(value).__name__}"
        )


class SettingsProvider:
    """Process-wide configuration with load-on-start and read-after-load.

    Example:
        ```python
        provider = SettingsProvider(SQLiteSettingsStorage("monitor.db"))
        await provider.init()
        provider.get("retention_days")
        ```
    """

    def __init__(
        self,
        storage: SettingsStoragePort,
        defaults: Mapping[str, SettingValue] | None = None,
    ) -> None:
        """Initialize the provider.

        Args:
            storage: Durable settings backend.
            defaults: Recognized keys and their compiled-in defaults.
                Defaults to DEFAULT_SETTINGS.
        """
        self._storage = storage
        self._defaults = dict(DEFAULT_SETTINGS if defaults is None else defaults)
        self._values: dict[str, SettingValue] = dict(self._defaults)
        self._init_task: asyncio.Task[None] | None = None
        self._initialized = False
        # Keys written while a load is in flight; the load must not clobber them.
        self._written_during_load: set[str] = set()
        self._listeners: list[SettingsListener] = []

    async def init(self) -> None:
        """Load every recognized key from storage once.

        Safe to call repeatedly and concurrently: all callers await the same
        load.
        """
        if self._init_task is None:
            self._init_task = asyncio.ensure_future(self._load())
        await self._init_task

    def is_initialized(self) -> bool:
        """Return True once init() has completed."""
        return self._initialized

    async def _load(self) -> None:
        keys = list(self._defaults)
        results = await asyncio.gather(
            *(self._storage.get(key) for key in keys), return_exceptions=True
        )
        for key, result in zip(keys, results, strict=True):
            if isinstance(result, StorageFault):
                logger.warning("Failed to load setting %r, keeping default", key)
                continue
            if isinstance(result, BaseException):
                raise result
            if result is None or key in self._written_during_load:
                continue
            self._apply(key, result)
        self._written_during_load.clear()
        self._initialized = True
        logger.debug("Settings loaded: %s", sorted(keys))

    def get(
        self, key: str, default: SettingValue | None = None
    ) -> SettingValue | None:
        """Return the current value for key without blocking.

        Falls back to the compiled-in default, then to the given default.
        """
        return self._values.get(key, default)

    def snapshot(self) -> dict[str, SettingValue]:
        """Return a copy of every current value."""
        return dict(self._values)

    async def set(self, key: str, value: SettingValue) -> None:
        """Write a value through to storage, then update the mirror.

        Raises:
            TypeError: value is not a str, int, float or bool.
            StorageFault: The storage write failed; the mirror is unchanged.
        """
        _check_value(key, value)
        await self._storage.put(key, value)
        if not self._initialized:
            self._written_during_load.add(key)
        self._apply(key, value)

    async def delete(self, key: str) -> None:
        """Remove a stored value and fall back to its default."""
        await self._storage.delete(key)
        if not self._initialized:
            self._written_during_load.add(key)
        if key in self._defaults:
            self._apply(key, self._defaults[key])
        elif key in self._values:
            del self._values[key]
            self._notify(key, None)

    def subscribe(self, listener: SettingsListener) -> Callable[[], None]:
        """Register a change listener.

        Returns:
            A callable that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _apply(self, key: str, value: SettingValue) -> None:
        self._values[key] = value
        self._notify(key, value)

    def _notify(self, key: str, value: SettingValue | None) -> None:
        for listener in list(self._listeners):
            try:
                listener(key, value)
            except Exception:
                logger.exception("Settings listener failed for %r", key)
