"""Service container wiring for the heap cache."""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict

from .cache.store import HeapStore
from .config.settings import Settings

SERVICE_NAME = "heap_cache"
SERVICE_ALIAS = "HeapCache"


@dataclass
class ServiceContainer:
    """Holds lazily built, shared application services."""

    _factories: Dict[str, Callable[[], Any]] = field(default_factory=dict)
    _instances: Dict[str, Any] = field(default_factory=dict)
    _aliases: Dict[str, str] = field(default_factory=dict)

    def singleton(self, name: str, factory: Callable[[], Any]) -> None:
        """Bind name to a factory whose result is built once and shared."""
        self._factories[name] = factory
        self._instances.pop(name, None)

    def alias(self, alias: str, name: str) -> None:
        """Make alias resolve to the same service as name."""
        self._aliases[alias] = name

    def bound(self, name: str) -> bool:
        return self._aliases.get(name, name) in self._factories

    def make(self, name: str) -> Any:
        """
        Resolve a service by name or alias.

        Raises:
            KeyError: If nothing is bound under name
        """
        resolved = self._aliases.get(name, name)
        if resolved not in self._instances:
            try:
                factory = self._factories[resolved]
            except KeyError:
                raise KeyError(f"no service bound as '{name}'") from None
            self._instances[resolved] = factory()
        return self._instances[resolved]


def register_heap_cache(container: ServiceContainer, settings: Settings = None) -> None:
    """Bind a HeapStore as a container singleton, reachable under its alias too."""
    container.singleton(SERVICE_NAME, lambda: HeapStore(settings=settings))
    container.alias(SERVICE_ALIAS, SERVICE_NAME)
