"""Sparse free-text tables keyed by row id, or by (row id, attribute id)."""

from __future__ import annotations

import logging
from typing import Callable, Dict, Generic, Set, Tuple, TypeVar

logger = logging.getLogger(__name__)

K = TypeVar("K")
V = TypeVar("V")

CellKey = Tuple[str, str]  # (row id, attribute id)


class AssociationTable(Generic[K, V]):
    """Upsert store whose keys carry a row-id component.

    ``row_of`` extracts the row id from a key and ``with_row`` returns the
    same key with its row id replaced, so one implementation serves both key
    shapes. The ``staged_*`` methods compute a new entry mapping without
    touching the table; :meth:`commit` installs one. They let a caller
    rewrite several tables and commit them together.
    """

    def __init__(
        self,
        name: str,
        default: V,
        row_of: Callable[[K], str],
        with_row: Callable[[K, str], K],
    ) -> None:
        self.name = name
        self._default = default
        self._row_of = row_of
        self._with_row = with_row
        self._entries: Dict[K, V] = {}

    def get(self, key: K) -> V:
        return self._entries.get(key, self._default)

    def set(self, key: K, value: V) -> None:
        self._entries[key] = value

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def snapshot(self) -> Dict[K, V]:
        return dict(self._entries)

    def row_ids(self) -> Set[str]:
        return {self._row_of(key) for key in self._entries}

    # ----- row-level rewrites -----
    def staged_delete(self, row_id: str) -> Dict[K, V]:
        return {k: v for k, v in self._entries.items() if self._row_of(k) != row_id}

    def staged_rekey(self, old_row_id: str, new_row_id: str) -> Dict[K, V]:
        if old_row_id == new_row_id:
            return dict(self._entries)
        staged: Dict[K, V] = {}
        for key, value in self._entries.items():
            row_id = self._row_of(key)
            if row_id == new_row_id:
                continue  # stale leftovers under the target id are replaced
            if row_id == old_row_id:
                key = self._with_row(key, new_row_id)
            staged[key] = value
        return staged

    def commit(self, entries: Dict[K, V]) -> None:
        before = len(self._entries)
        self._entries = entries
        if before != len(entries):
            logger.debug("%s: %d -> %d entries", self.name, before, len(entries))

    def delete_by_row(self, row_id: str) -> int:
        staged = self.staged_delete(row_id)
        removed = len(self._entries) - len(staged)
        self.commit(staged)
        return removed

    def rekey_row(self, old_row_id: str, new_row_id: str) -> None:
        self.commit(self.staged_rekey(old_row_id, new_row_id))


def cell_table(name: str) -> "AssociationTable[CellKey, str]":
    """Table keyed by ``(row_id, attribute_id)``; rekeying leaves the attribute untouched."""
    return AssociationTable(
        name,
        "",
        row_of=lambda key: key[0],
        with_row=lambda key, row_id: (row_id, key[1]),
    )


def row_table(name: str) -> "AssociationTable[str, str]":
    """Table keyed by the row id alone."""
    return AssociationTable(
        name,
        "",
        row_of=lambda key: key,
        with_row=lambda key, row_id: row_id,
    )
