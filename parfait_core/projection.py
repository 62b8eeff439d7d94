"""Flattened read-side view of the framework, one record per row."""

from __future__ import annotations

from typing import TYPE_CHECKING, List

from .models import FlatRecord

if TYPE_CHECKING:
    from .store import FrameworkStore


def project(store: "FrameworkStore", use_outcomes: bool = False) -> List[FlatRecord]:
    """Join rows with names and values; attribute values come from outcomes or methods."""
    taxonomy = store.taxonomy
    controls = store.controls
    attributes = store.attributes.list()
    values = store.outcomes if use_outcomes else store.methods

    records = []
    for row in store.rows:
        records.append(
            FlatRecord(
                control=controls.control_name(row.safeguard_id),
                safeguard=controls.safeguard_name(row.safeguard_id),
                asset_type=taxonomy.type_name(row.asset_type_id),
                asset_class=taxonomy.class_name(row.asset_class_id),
                asset_subclass=taxonomy.subclass_name(row.asset_subclass_id),
                enforcement_point=store.enforcement_points.get(row.id),
                values={attr.name: values.get((row.id, attr.id)) for attr in attributes},
            )
        )
    return records
