"""The framework store: every table of one framework plus its command surface."""

from __future__ import annotations

from typing import Iterable, List, Tuple

from .associations import AssociationTable, CellKey, cell_table, row_table
from .catalog import AttributeCatalog, ControlCatalog
from .errors import UnknownReferenceError
from .models import AssetType, Attribute, Control, FlatRecord, Row, SelectionOption
from .projection import project
from .registry import RowRegistry
from .taxonomy import TaxonomyStore


class FrameworkStore:
    """Owns the taxonomy, catalogs, rows and the three value tables.

    Reads are total (misses give ``""``); writes naming an unknown row or
    attribute raise :class:`UnknownReferenceError`.
    """

    def __init__(
        self,
        asset_types: Iterable[AssetType],
        controls: Iterable[Control],
        attributes: Iterable[Attribute] = (),
    ) -> None:
        self.taxonomy = TaxonomyStore(asset_types)
        self.controls = ControlCatalog(controls)
        self.attributes = AttributeCatalog(attributes)
        self.methods: AssociationTable[CellKey, str] = cell_table("methods")
        self.outcomes: AssociationTable[CellKey, str] = cell_table("outcomes")
        self.enforcement_points: AssociationTable[str, str] = row_table("enforcement_points")
        self.registry = RowRegistry(
            self.taxonomy,
            self.controls,
            (self.methods, self.outcomes, self.enforcement_points),
        )

    @property
    def rows(self) -> Tuple[Row, ...]:
        return self.registry.rows()

    # ----- row commands -----
    def selectable_nodes_for(self, safeguard_id: str) -> List[SelectionOption]:
        return self.registry.selectable_nodes_for(safeguard_id)

    def add_row(self, safeguard_id: str, node_id: str) -> str:
        return self.registry.add_row(safeguard_id, node_id)

    def reassign_row_asset(self, row_id: str, new_node_id: str) -> str:
        return self.registry.reassign_row_asset(row_id, new_node_id)

    def delete_row(self, row_id: str) -> bool:
        return self.registry.delete_row(row_id)

    def add_attribute(self, name: str, tooltip: str = "") -> str:
        return self.attributes.add(name, tooltip)

    # ----- cell commands -----
    def _check_row(self, row_id: str) -> None:
        if row_id not in self.registry:
            raise UnknownReferenceError(f"Unknown row '{row_id}'.")

    def _check_cell(self, row_id: str, attribute_id: str) -> None:
        self._check_row(row_id)
        if attribute_id not in self.attributes:
            raise UnknownReferenceError(f"Unknown attribute '{attribute_id}'.")

    def set_cell_value(self, row_id: str, attribute_id: str, value: str) -> None:
        self._check_cell(row_id, attribute_id)
        self.methods.set((row_id, attribute_id), value)

    def set_outcome_value(self, row_id: str, attribute_id: str, value: str) -> None:
        self._check_cell(row_id, attribute_id)
        self.outcomes.set((row_id, attribute_id), value)

    def set_enforcement_point(self, row_id: str, value: str) -> None:
        self._check_row(row_id)
        self.enforcement_points.set(row_id, value)

    # ----- reads -----
    def get_cell_value(self, row_id: str, attribute_id: str) -> str:
        return self.methods.get((row_id, attribute_id))

    def get_outcome_value(self, row_id: str, attribute_id: str) -> str:
        return self.outcomes.get((row_id, attribute_id))

    def get_enforcement_point(self, row_id: str) -> str:
        return self.enforcement_points.get(row_id)

    def safeguard_name(self, safeguard_id: str) -> str:
        return self.controls.safeguard_name(safeguard_id)

    def control_name_for(self, safeguard_id: str) -> str:
        return self.controls.control_name(safeguard_id)

    def asset_label(self, row: Row) -> str:
        """Label of the node a row points at, falling back to its raw id."""
        return self.taxonomy.display_name(row.asset_node_id) or row.asset_node_id

    def project(self, use_outcomes: bool = False) -> List[FlatRecord]:
        return project(self, use_outcomes)
