"""Type registry: stable string tags mapped to record factories.

Stored schemas name their record types by tag. Loading a stored schema
therefore needs a way back from a tag to a live type; the registry is that
way, populated once at process start:

    >>> registry = TypeRegistry()
    >>> registry.register(Player)
    'Player'
    >>> registry.create("Player")
    Player(...)

Unregistered tags fail fast with ``UnknownTypeError``.
"""

from __future__ import annotations

import threading
from typing import Any, Callable, TypeVar

from document_store.domain.entities.record import (
    RecordDescriptor,
    RecordFactory,
    describe_record,
    record_tag,
)
from document_store.domain.errors import SchemaError, UnknownTypeError
from document_store.domain.value_objects import TypeTag

T = TypeVar("T", bound=type)


class TypeRegistry:
    """Mapping of type tags to record types and their factories.

    Thread Safety:
        Registration and lookup are guarded by a lock; registries are
        usually filled at start-up and only read afterwards.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._types: dict[TypeTag, type] = {}
        self._factories: dict[TypeTag, RecordFactory] = {}

    def register(
        self,
        record_type: type,
        tag: str | None = None,
        factory: RecordFactory | None = None,
    ) -> TypeTag:
        """Register a storable type.

        Registering the same type twice under the same tag is a no-op.

        Args:
            record_type: The record class.
            tag: Stable tag to persist instead of the class name.
            factory: Zero-argument callable building an empty record;
                defaults to the class itself.

        Returns:
            The tag the type is stored under.

        Raises:
            NotStorableError: If the type is not storable.
            SchemaError: If the tag is already taken by another type.
        """
        if tag is not None and record_type.__dict__.get("__record_tag__") != tag:
            record_type.__record_tag__ = tag  # type: ignore[attr-defined]
            describe_record.cache_clear()

        descriptor = describe_record(record_type)

        with self._lock:
            existing = self._types.get(descriptor.tag)
            if existing is not None and existing is not record_type:
                raise SchemaError(
                    f"Tag {descriptor.tag} is already registered for {existing.__qualname__}"
                )
            self._types[descriptor.tag] = record_type
            self._factories[descriptor.tag] = factory or record_type

        return descriptor.tag

    def resolve(self, tag: str) -> type:
        """Return the record type registered under ``tag``.

        Raises:
            UnknownTypeError: If no type is registered under that tag.
        """
        with self._lock:
            record_type = self._types.get(TypeTag(tag))
        if record_type is None:
            raise UnknownTypeError(f"No record type registered under tag {tag!r}")
        return record_type

    def factory(self, tag: str) -> RecordFactory:
        """Return the factory registered under ``tag``.

        Raises:
            UnknownTypeError: If no type is registered under that tag.
        """
        with self._lock:
            factory = self._factories.get(TypeTag(tag))
        if factory is None:
            raise UnknownTypeError(f"No record type registered under tag {tag!r}")
        return factory

    def create(self, tag: str) -> Any:
        """Build an empty record of the type registered under ``tag``."""
        return self.factory(tag)()

    def descriptor(self, tag: str) -> RecordDescriptor:
        """Return the cached descriptor of the type registered under ``tag``."""
        return describe_record(self.resolve(tag))

    def tag_of(self, record_type: type) -> TypeTag:
        """Return the tag of a registered type.

        Raises:
            UnknownTypeError: If the type is not registered.
        """
        tag = record_tag(record_type)
        with self._lock:
            registered = self._types.get(tag)
        if registered is not record_type:
            raise UnknownTypeError(f"{record_type.__qualname__} is not registered")
        return tag

    def contains(self, tag: str) -> bool:
        """Check whether a type is registered under ``tag``."""
        with self._lock:
            return TypeTag(tag) in self._types

    @property
    def record_types(self) -> tuple[type, ...]:
        """Registered types in registration order."""
        with self._lock:
            return tuple(self._types.values())

    @property
    def tags(self) -> tuple[TypeTag, ...]:
        """Registered tags in registration order."""
        with self._lock:
            return tuple(self._types)

    def __contains__(self, tag: object) -> bool:
        return isinstance(tag, str) and self.contains(tag)

    def __len__(self) -> int:
        with self._lock:
            return len(self._types)


_default_registry = TypeRegistry()


def get_default_registry() -> TypeRegistry:
    """Get the process-wide registry filled by ``@storable``."""
    return _default_registry


def storable(
    record_type: T | None = None,
    *,
    tag: str | None = None,
    registry: TypeRegistry | None = None,
) -> T | Callable[[T], T]:
    """Class decorator registering a record type.

    Usable bare (``@storable``) or with arguments
    (``@storable(tag="game.Player")``).
    """

    def decorator(cls: T) -> T:
        target = registry if registry is not None else _default_registry
        target.register(cls, tag=tag)
        return cls

    if record_type is not None:
        return decorator(record_type)
    return decorator
