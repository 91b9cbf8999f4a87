"""Unit tests for TypeRegistry."""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from document_store.domain.entities import Record, describe_record, persisted, record_tag
from document_store.domain.errors import NotStorableError, SchemaError, UnknownTypeError
from document_store.domain.services import TypeRegistry, storable


@dataclass
class Player(Record):
    name: str = persisted(default="")


@dataclass
class Monster(Record):
    kind: str = persisted(default="")


class Plain:
    pass


@pytest.mark.unit
class TestTypeRegistry:
    """Tests for registration and lookup."""

    def test_register_by_class_name(self, registry: TypeRegistry) -> None:
        """Types are registered under their class name by default."""
        assert registry.register(Player) == "Player"
        assert registry.resolve("Player") is Player
        assert "Player" in registry
        assert registry.contains("Player")
        assert len(registry) == 1

    def test_register_is_idempotent(self, registry: TypeRegistry) -> None:
        """Registering a type twice keeps one entry."""
        registry.register(Player)
        registry.register(Player)

        assert registry.record_types == (Player,)

    def test_explicit_tag(self, registry: TypeRegistry) -> None:
        """An explicit tag is stored and used by descriptors."""

        @dataclass
        class Boss(Record):
            title: str = persisted(default="")

        tag = registry.register(Boss, tag="game.Boss")

        assert tag == "game.Boss"
        assert record_tag(Boss) == "game.Boss"
        assert describe_record(Boss).tag == "game.Boss"
        assert registry.resolve("game.Boss") is Boss

    def test_tag_conflict(self, registry: TypeRegistry) -> None:
        """A tag cannot name two types."""

        class Other(Record):
            pass

        registry.register(Player)
        with pytest.raises(SchemaError):
            registry.register(Other, tag="Player")

    def test_unknown_tag(self, registry: TypeRegistry) -> None:
        """Unregistered tags fail fast."""
        with pytest.raises(UnknownTypeError):
            registry.resolve("Player")
        with pytest.raises(UnknownTypeError):
            registry.create("Player")

    def test_unknown_type_is_schema_error(self, registry: TypeRegistry) -> None:
        """UnknownTypeError belongs to the schema errors."""
        with pytest.raises(SchemaError):
            registry.factory("Player")

    def test_not_storable(self, registry: TypeRegistry) -> None:
        """Only storable types can be registered."""
        with pytest.raises(NotStorableError):
            registry.register(Plain)

    def test_factory(self, registry: TypeRegistry) -> None:
        """Custom factories build the records."""
        registry.register(Monster, factory=lambda: Monster(kind="slime"))

        monster = registry.create("Monster")

        assert isinstance(monster, Monster)
        assert monster.kind == "slime"

    def test_default_factory_is_the_class(self, registry: TypeRegistry) -> None:
        """Without factory the class itself is called."""
        registry.register(Player)

        assert registry.create("Player") == Player()

    def test_tag_of(self, registry: TypeRegistry) -> None:
        """tag_of only answers for registered types."""
        registry.register(Player)

        assert registry.tag_of(Player) == "Player"
        with pytest.raises(UnknownTypeError):
            registry.tag_of(Monster)

    def test_descriptor(self, registry: TypeRegistry) -> None:
        """Descriptors are looked up by tag."""
        registry.register(Player)

        assert [m.name for m in registry.descriptor("Player").members] == ["name", "ID"]


@pytest.mark.unit
class TestStorableDecorator:
    """Tests for the @storable decorator."""

    def test_bare_decorator_with_registry(self, registry: TypeRegistry) -> None:
        """The decorator registers and returns the class."""

        @storable(registry=registry)
        @dataclass
        class Chest(Record):
            gold: int = persisted(default=0)

        assert registry.resolve("Chest") is Chest

    def test_decorator_with_tag(self, registry: TypeRegistry) -> None:
        """Tags can be given to the decorator."""

        @storable(tag="loot.Gem", registry=registry)
        @dataclass
        class Gem(Record):
            color: str = persisted(default="")

        assert registry.tags == ("loot.Gem",)
