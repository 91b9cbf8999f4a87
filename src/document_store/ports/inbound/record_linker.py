"""Record Linker port for cross-table references.

A linked field stores only the identifier of the record it points to. The
linker turns that identifier back into a record by asking the table of the
linked type, and gives unsaved linked records an identifier before their
owner is written.

Resolution is eager and shares one identity map per load, keyed by
``(type tag, ID)``. A record already in the map is returned as is, which
makes mutually linked records resolve to the same instances and keeps
cycles finite.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Any, Protocol

from document_store.domain.value_objects import RecordId, TypeTag

IdentityMap = dict[tuple[TypeTag, RecordId], Any]
"""Records already materialized during one load, by ``(tag, ID)``."""


class RecordLinker(Protocol):
    """Protocol for resolving and creating linked records."""

    @abstractmethod
    def resolve_link(
        self,
        tag: TypeTag,
        record_id: RecordId,
        identity_map: IdentityMap,
    ) -> Any | None:
        """Return the record of type ``tag`` with identifier ``record_id``.

        Args:
            tag: Type tag of the linked record.
            record_id: Stored identifier; never ``0``.
            identity_map: Records materialized so far in this load.

        Returns:
            The record, or ``None`` if no such record exists.

        Raises:
            TableNotFoundError: If no table holds records of type ``tag``.
        """
        ...

    @abstractmethod
    def create_linked(self, record: Any) -> RecordId:
        """Create and persist an unsaved linked record.

        Returns:
            The identifier assigned to the record.

        Raises:
            TableNotFoundError: If no table holds records of that type.
        """
        ...
