"""Fillable port for incremental query results.

``Table.fill`` hands decoded records batch by batch to any container that
implements this protocol. Plain lists satisfy it through ``list.append`` /
``list.extend`` wrappers; UI models and caches implement it directly.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Iterable, Protocol, TypeVar

T_contra = TypeVar("T_contra", contravariant=True)


class Fillable(Protocol[T_contra]):
    """Protocol for containers receiving query results."""

    @abstractmethod
    def add_item(self, item: T_contra) -> None:
        """Receive one record."""
        ...

    @abstractmethod
    def add_items(self, items: Iterable[T_contra]) -> None:
        """Receive one batch of records."""
        ...


class ListFill(list):  # type: ignore[type-arg]
    """A list implementing ``Fillable``."""

    def add_item(self, item: object) -> None:
        self.append(item)

    def add_items(self, items: Iterable[object]) -> None:
        self.extend(items)
