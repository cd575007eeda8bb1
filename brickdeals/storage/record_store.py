# brickdeals/storage/record_store.py

"""Record store capability used by the ingestion and query layers."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

Document = dict[str, Any]

CONDITION_OPS: frozenset[str] = frozenset({"eq", "lte", "prefix", "not_null"})


class StoreUnavailableError(RuntimeError):
    """The backing store could not be reached or failed mid-operation."""


@dataclass(frozen=True)
class FieldCondition:
    """A single predicate on a document field; conditions are AND-ed."""

    field: str
    op: str  # eq | lte | prefix | not_null
    value: Any = None

    def __post_init__(self) -> None:
        if self.op not in CONDITION_OPS:
            raise ValueError(f"Unsupported condition op: {self.op}")


@dataclass(frozen=True)
class SortSpec:
    """Single-field sort direction."""

    field: str
    descending: bool = False


class RecordStore(ABC):
    """Bulk-replace / find / count over named document collections.

    ``replace_all`` is delete-all followed by insert-all.  The
    contract does not promise the pair is atomic; a concurrent
    reader may observe an empty collection in between.
    """

    @abstractmethod
    def replace_all(
        self, collection: str, records: Sequence[Document],
    ) -> int:
        """Replace a collection's content, returning the insert count."""
        ...

    @abstractmethod
    def find(
        self,
        collection: str,
        conditions: Sequence[FieldCondition] = (),
        sort: SortSpec | None = None,
        skip: int = 0,
        limit: int | None = None,
    ) -> list[Document]:
        """Return matching documents; no sort means insertion order."""
        ...

    @abstractmethod
    def count(
        self,
        collection: str,
        conditions: Sequence[FieldCondition] = (),
    ) -> int:
        """Count documents matching all conditions."""
        ...

    def close(self) -> None:
        """Release any held resources."""
