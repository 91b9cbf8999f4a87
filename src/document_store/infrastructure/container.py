"""Dependency injection container."""

from __future__ import annotations

from typing import Any, Callable, TypeVar

from document_store.adapters.outbound import JsonFileStorage
from document_store.domain.services import TypeRegistry, ValueCodec, get_default_registry
from document_store.infrastructure.config import Config, get_config
from document_store.infrastructure.metrics import MetricsRegistry, get_metrics
from document_store.ports.outbound import DocumentStorage

T = TypeVar("T")


class Container:
    """
    Simple dependency injection container.

    Holds the shared collaborators of a database (configuration, storage
    backend, type registry, metrics) keyed by their type. Factories run
    once, on first resolution.
    """

    def __init__(self) -> None:
        """Initialize an empty container."""
        self._factories: dict[type, Callable[[Container], Any]] = {}
        self._instances: dict[type, Any] = {}

    def register_instance(self, key: type[T], instance: T) -> None:
        """
        Register a ready-made instance.

        Args:
            key: The type the instance is resolved by
            instance: The instance, replacing any earlier registration
        """
        self._factories.pop(key, None)
        self._instances[key] = instance

    def register_factory(self, key: type[T], factory: Callable[[Container], T]) -> None:
        """
        Register a factory for lazy instantiation.

        Args:
            key: The type the product is resolved by
            factory: Called with the container on first resolution
        """
        self._instances.pop(key, None)
        self._factories[key] = factory

    def resolve(self, key: type[T]) -> T:
        """
        Resolve a dependency.

        Raises:
            KeyError: If nothing is registered for the key
        """
        if key in self._instances:
            return self._instances[key]

        factory = self._factories.get(key)
        if factory is None:
            raise KeyError(f"No registration found for {key.__name__}")

        instance = factory(self)
        self._instances[key] = instance
        return instance

    def has(self, key: type) -> bool:
        """Check if a key is registered."""
        return key in self._instances or key in self._factories

    def clear(self) -> None:
        """Clear all registrations and instances."""
        self._factories.clear()
        self._instances.clear()


def wire_defaults(container: Container, config: Config | None = None) -> Container:
    """
    Register the default collaborators of a document database.

    Args:
        container: The container to fill
        config: Configuration to register (default: the global one)

    Returns:
        The same container
    """
    if config is not None:
        container.register_instance(Config, config)
    else:
        container.register_factory(Config, lambda c: get_config())

    container.register_factory(
        DocumentStorage,  # type: ignore[type-abstract]
        lambda c: JsonFileStorage(indent=c.resolve(Config).storage.json_indent),
    )
    container.register_factory(TypeRegistry, lambda c: get_default_registry())
    container.register_factory(MetricsRegistry, lambda c: get_metrics())
    container.register_factory(ValueCodec, lambda c: ValueCodec())
    return container


# Global container instance
_container: Container | None = None


def get_container() -> Container:
    """Get the global container, wired with the defaults on first use."""
    global _container
    if _container is None:
        _container = wire_defaults(Container())
    return _container


def reset_container() -> None:
    """Reset the global container (useful for testing)."""
    global _container
    if _container is not None:
        _container.clear()
    _container = None
