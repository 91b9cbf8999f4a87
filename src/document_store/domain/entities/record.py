"""Record contract: the base class and markers for storable types.

A storable record exposes an integer ``ID`` property and can be built with
no arguments. Every other member that should be persisted is marked
explicitly, either as a dataclass field declared with ``persisted()`` or as
a property declared with ``persisted_property``:

    >>> from dataclasses import dataclass
    >>> @dataclass
    ... class Player(Record):
    ...     name: str = persisted(default="")
    ...     session_token: str = ""          # not persisted
    >>> [m.name for m in describe_record(Player).members]
    ['name', 'ID']

The members of a type are inspected once per type and cached in a
``RecordDescriptor``; table schemas and codecs work from that descriptor and
from the field list of the active schema, never from ad-hoc reflection.
"""

from __future__ import annotations

import builtins
import dataclasses
import datetime
import inspect
import re
import sys
import typing
from dataclasses import dataclass
from decimal import Decimal
from functools import cache
from types import NoneType, UnionType
from typing import Any, Callable, ClassVar

from document_store.domain.errors import NotStorableError
from document_store.domain.value_objects import (
    ANY_TAG,
    BOOL_TAG,
    DATE_TAG,
    DATETIME_TAG,
    DECIMAL_TAG,
    FLOAT_TAG,
    ID_FIELD_NAME,
    INT_TAG,
    STR_TAG,
    UNSET_ID,
    FieldKind,
    RecordId,
    TypeTag,
)

RecordFactory = Callable[[], Any]

PERSIST_MARKER = "document_store.persisted"

# bool before int: bool is an int subclass
_SCALAR_TAGS: tuple[tuple[type, TypeTag], ...] = (
    (bool, BOOL_TAG),
    (int, INT_TAG),
    (float, FLOAT_TAG),
    (str, STR_TAG),
    (datetime.datetime, DATETIME_TAG),
    (datetime.date, DATE_TAG),
    (Decimal, DECIMAL_TAG),
)


class Record:
    """Base class for anything stored in a table.

    Provides the integer ``ID`` property. ``0`` means the record was never
    saved; tables issue identifiers starting at ``1``.
    """

    __record_tag__: ClassVar[str | None] = None

    _record_id: int = UNSET_ID

    @property
    def ID(self) -> int:  # noqa: N802
        """Identifier of this record within its table."""
        return self._record_id

    @ID.setter
    def ID(self, value: int) -> None:  # noqa: N802
        self._record_id = RecordId(int(value))


class persisted_property(property):  # noqa: N801
    """A property whose value is persisted.

    Used exactly like ``property``; getter, setter and deleter chaining keep
    the marker.
    """


def persisted(**field_kwargs: Any) -> Any:
    """Declare a dataclass field whose value is persisted.

    Accepts the keyword arguments of ``dataclasses.field``.
    """
    metadata = dict(field_kwargs.pop("metadata", None) or {})
    metadata[PERSIST_MARKER] = True
    return dataclasses.field(metadata=metadata, **field_kwargs)


@dataclass(frozen=True, slots=True)
class MemberDescriptor:
    """One persisted member of a record type."""

    name: str
    kind: FieldKind
    type_tag: TypeTag


@dataclass(frozen=True)
class RecordDescriptor:
    """Registration-time description of a storable type.

    Attributes:
        record_type: The described class.
        tag: Stable tag naming the type in persisted schemas.
        members: Persisted members, plain fields first in declaration order,
            then properties (``ID`` included) in class-definition order.
    """

    record_type: type
    tag: TypeTag
    members: tuple[MemberDescriptor, ...]

    def member(self, name: str) -> MemberDescriptor | None:
        """Find a persisted member by name."""
        for member in self.members:
            if member.name == name:
                return member
        return None


def is_record_type(value: Any) -> bool:
    """Check whether ``value`` is a class exposing a record ``ID`` property."""
    return inspect.isclass(value) and isinstance(
        inspect.getattr_static(value, ID_FIELD_NAME, None), property
    )


def record_tag(record_type: type) -> TypeTag:
    """Tag of a record type: the registered tag, else the class name."""
    explicit = record_type.__dict__.get("__record_tag__")
    return TypeTag(explicit or record_type.__name__)


_OPTIONAL_TEXT = re.compile(r"^(?:typing\.)?Optional\[(.+)\]$")


def _annotation_name(text: str) -> str | None:
    """Bare type name of an unevaluated annotation, ``None`` for unions."""
    text = text.strip().strip("\"'")
    match = _OPTIONAL_TEXT.match(text)
    if match:
        return _annotation_name(match.group(1))
    parts = [part.strip() for part in text.split("|")]
    parts = [part for part in parts if part != "None"]
    if len(parts) != 1:
        return None
    return parts[0]


def _lookup(name: str, namespace: dict[str, Any]) -> Any:
    head, *rest = name.split(".")
    target = namespace.get(head, getattr(builtins, head, None))
    for attribute in rest:
        target = getattr(target, attribute, None)
    return target


def _resolve_text(annotation: Any, owner: type) -> Any:
    if not isinstance(annotation, str):
        return annotation
    name = _annotation_name(annotation)
    if name is None:
        return None
    module = sys.modules.get(owner.__module__)
    return _lookup(name, vars(module) if module is not None else {})


def annotation_tag(annotation: Any, owner: type) -> TypeTag:
    """Tag of a member annotation of ``owner``, evaluated or not.

    Annotations that could not be evaluated (forward references to classes
    local to a function, for instance) are parsed: ``X | None`` and
    ``Optional[X]`` reduce to ``X``, which is looked up in the module of
    ``owner``. A name found nowhere is taken as the class name of a record
    type.
    """
    if not isinstance(annotation, str):
        return type_tag(annotation)

    name = _annotation_name(annotation)
    if name is None:
        return ANY_TAG

    target = _resolve_text(annotation, owner)
    if target is not None:
        return type_tag(target)
    return TypeTag(name.rsplit(".", 1)[-1])


def type_tag(annotation: Any) -> TypeTag:
    """Map a type annotation to the tag stored in table schemas.

    ``Optional[X]`` maps to the tag of ``X``; record classes map to their
    record tag; unknown annotations map to their name.
    """
    origin = typing.get_origin(annotation)
    if origin is typing.Union or origin is UnionType:
        args = [arg for arg in typing.get_args(annotation) if arg is not NoneType]
        if len(args) == 1:
            return type_tag(args[0])
        return ANY_TAG

    if annotation is Any or annotation is None:
        return ANY_TAG

    if is_record_type(annotation):
        return record_tag(annotation)

    if inspect.isclass(annotation):
        for python_type, tag in _SCALAR_TAGS:
            if annotation is python_type:
                return tag
        return TypeTag(annotation.__name__)

    return TypeTag(getattr(annotation, "__name__", None) or str(annotation))


def _ensure_storable(record_type: Any) -> None:
    if not inspect.isclass(record_type):
        raise NotStorableError(f"{record_type!r} is not a class")

    id_member = inspect.getattr_static(record_type, ID_FIELD_NAME, None)
    if not isinstance(id_member, property) or id_member.fset is None:
        raise NotStorableError(
            f"{record_type.__name__} should expose a settable integer '{ID_FIELD_NAME}' property"
        )

    id_type = _resolve_text(_property_type(id_member), record_type)
    if id_type is not None and not (inspect.isclass(id_type) and issubclass(id_type, int)):
        raise NotStorableError(
            f"{record_type.__name__}.{ID_FIELD_NAME} should be an int, not {id_type!r}"
        )

    try:
        signature = inspect.signature(record_type)
    except (TypeError, ValueError):
        return
    for parameter in signature.parameters.values():
        if parameter.kind in (parameter.VAR_POSITIONAL, parameter.VAR_KEYWORD):
            continue
        if parameter.default is parameter.empty:
            raise NotStorableError(
                f"{record_type.__name__} should have a constructor callable without arguments"
            )


def _property_type(prop: property) -> Any:
    if prop.fget is None:
        return None
    try:
        hints = typing.get_type_hints(prop.fget)
    except (NameError, TypeError):
        return prop.fget.__annotations__.get("return")
    return hints.get("return")


@cache
def describe_record(record_type: type) -> RecordDescriptor:
    """Build (once) the descriptor of a storable type.

    Raises:
        NotStorableError: If the type lacks an integer ``ID`` property or a
            zero-argument constructor.
    """
    _ensure_storable(record_type)

    members: list[MemberDescriptor] = []

    if dataclasses.is_dataclass(record_type):
        try:
            hints = typing.get_type_hints(record_type)
        except (NameError, TypeError):
            hints = {}
        for field in dataclasses.fields(record_type):
            if field.metadata.get(PERSIST_MARKER):
                annotation = hints.get(field.name, field.type)
                members.append(
                    MemberDescriptor(
                        field.name, FieldKind.PLAIN_FIELD, annotation_tag(annotation, record_type)
                    )
                )

    seen: set[str] = {member.name for member in members}
    for klass in reversed(record_type.__mro__):
        for name, value in vars(klass).items():
            if name in seen or not isinstance(value, property):
                continue
            # the leaf-most definition wins
            current = inspect.getattr_static(record_type, name)
            if name != ID_FIELD_NAME and not isinstance(current, persisted_property):
                continue
            seen.add(name)
            members.append(
                MemberDescriptor(
                    name,
                    FieldKind.ACCESSOR_PROPERTY,
                    INT_TAG if name == ID_FIELD_NAME else annotation_tag(
                        _property_type(current), record_type
                    ),
                )
            )

    return RecordDescriptor(
        record_type=record_type,
        tag=record_tag(record_type),
        members=tuple(members),
    )


def read_member(record: Any, name: str, is_property: bool) -> Any:
    """Read a persisted member from a record.

    Raises:
        AttributeError: If the live type has no such member.
    """
    if is_property:
        prop = inspect.getattr_static(type(record), name, None)
        if not isinstance(prop, property) or prop.fget is None:
            raise AttributeError(f"{type(record).__name__} has no readable property {name!r}")
        return prop.__get__(record, type(record))

    if not _has_plain_member(record, name):
        raise AttributeError(f"{type(record).__name__} has no field {name!r}")
    return getattr(record, name)


def write_member(record: Any, name: str, is_property: bool, value: Any) -> None:
    """Write a persisted member on a record.

    Raises:
        AttributeError: If the live type has no such member, or the
            property is read-only.
    """
    if is_property:
        prop = inspect.getattr_static(type(record), name, None)
        if not isinstance(prop, property) or prop.fset is None:
            raise AttributeError(f"{type(record).__name__} has no writable property {name!r}")
        prop.__set__(record, value)
        return

    if not _has_plain_member(record, name):
        raise AttributeError(f"{type(record).__name__} has no field {name!r}")
    setattr(record, name, value)


def _has_plain_member(record: Any, name: str) -> bool:
    if dataclasses.is_dataclass(record) and name in {f.name for f in dataclasses.fields(record)}:
        return True
    if isinstance(inspect.getattr_static(type(record), name, None), property):
        return False
    return hasattr(record, name)

