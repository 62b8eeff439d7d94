"""Rows (safeguard x taxonomy node) and the cascading rename that keeps dependents in step."""

from __future__ import annotations

import logging
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from .associations import AssociationTable
from .catalog import ControlCatalog
from .errors import DuplicateKeyError, EmptyKeyError, NotApplicableError, UnknownReferenceError
from .models import Row, SelectionOption, row_key
from .taxonomy import TaxonomyStore

logger = logging.getLogger(__name__)


def needs_separator(previous: Optional[SelectionOption], current: SelectionOption) -> bool:
    """True where a selection list moves from one type's subclasses to the next type."""
    return previous is not None and previous.level == "subclass" and current.level == "type"


class RowRegistry:
    """Ordered rows with unique composite ids.

    Every mutation validates first and then commits the row list together
    with all dependent tables, so a rejected call leaves everything as it was
    and a successful one never exposes a row whose dependents still use the
    old id.
    """

    def __init__(
        self,
        taxonomy: TaxonomyStore,
        controls: ControlCatalog,
        dependents: Sequence[AssociationTable] = (),
    ) -> None:
        self._taxonomy = taxonomy
        self._controls = controls
        self._dependents: Tuple[AssociationTable, ...] = tuple(dependents)
        self._rows: List[Row] = []

    # ----- reads -----
    def rows(self) -> Tuple[Row, ...]:
        return tuple(self._rows)

    def get(self, row_id: str) -> Optional[Row]:
        for row in self._rows:
            if row.id == row_id:
                return row
        return None

    def __contains__(self, row_id: object) -> bool:
        return any(row.id == row_id for row in self._rows)

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[Row]:
        return iter(tuple(self._rows))

    def selectable_nodes_for(self, safeguard_id: str) -> List[SelectionOption]:
        """Nodes a row for ``safeguard_id`` may point at, grouped type -> class -> subclass."""
        applicable = self._controls.applicable_types(safeguard_id)
        if not applicable:
            return []
        return list(self._taxonomy.walk(applicable))

    # ----- writes -----
    def _build_row(self, row_id: str, safeguard_id: str, node_id: str) -> Row:
        selection = self._taxonomy.selection_for(node_id)
        if selection is None:
            raise UnknownReferenceError(f"Unknown asset '{node_id}'.")
        subclass_id, class_id, type_id = selection.triple
        return Row(row_id, safeguard_id, node_id, subclass_id, class_id, type_id)

    def add_row(self, safeguard_id: str, node_id: str) -> str:
        if not safeguard_id or not node_id:
            raise EmptyKeyError("Both a safeguard and an asset must be selected.")
        safeguard = self._controls.safeguard(safeguard_id)
        if safeguard is None:
            raise UnknownReferenceError(f"Unknown safeguard '{safeguard_id}'.")
        row_id = row_key(safeguard_id, node_id)
        row = self._build_row(row_id, safeguard_id, node_id)
        if row.asset_type_id not in safeguard.applicable_asset_types:
            raise NotApplicableError(
                f"Asset '{node_id}' is not applicable to safeguard '{safeguard_id}'."
            )
        if row_id in self:
            logger.warning("Rejected add: row '%s' already exists", row_id)
            raise DuplicateKeyError(row_id, "This combination already exists!")
        self._rows.append(row)
        logger.debug("Added row '%s'", row_id)
        return row_id

    def reassign_row_asset(self, row_id: str, new_node_id: str) -> str:
        """Point ``row_id`` at ``new_node_id``, renaming the row and every dependent entry.

        Returns the (possibly unchanged) row id. Raises
        :class:`DuplicateKeyError` when the new id belongs to another row, in
        which case nothing is modified.
        """
        index = self._index_of(row_id)
        current = self._rows[index]
        if new_node_id == current.asset_node_id:
            return row_id

        new_row_id = row_key(current.safeguard_id, new_node_id)
        if new_row_id != row_id and new_row_id in self:
            logger.warning("Rejected rename of '%s': '%s' already exists", row_id, new_row_id)
            raise DuplicateKeyError(new_row_id, "This combination already exists!")

        rebuilt = self._build_row(new_row_id, current.safeguard_id, new_node_id)
        staged_rows = list(self._rows)
        staged_rows[index] = rebuilt
        staged_tables = [table.staged_rekey(row_id, new_row_id) for table in self._dependents]

        self._commit(staged_rows, staged_tables)
        logger.debug("Renamed row '%s' -> '%s'", row_id, new_row_id)
        return new_row_id

    def delete_row(self, row_id: str) -> bool:
        """Remove a row and every dependent entry; ``False`` if the row did not exist."""
        if row_id not in self:
            return False
        staged_rows = [row for row in self._rows if row.id != row_id]
        staged_tables = [table.staged_delete(row_id) for table in self._dependents]
        self._commit(staged_rows, staged_tables)
        logger.debug("Deleted row '%s'", row_id)
        return True

    def _index_of(self, row_id: str) -> int:
        for index, row in enumerate(self._rows):
            if row.id == row_id:
                return index
        raise UnknownReferenceError(f"Unknown row '{row_id}'.")

    def _commit(self, rows: List[Row], tables: List[Dict]) -> None:
        self._rows = rows
        for table, entries in zip(self._dependents, tables):
            table.commit(entries)
