"""Build a :class:`FrameworkStore` from a YAML framework definition."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import yaml

from .catalog import attribute_id_for
from .errors import FrameworkConfigError, FrameworkError
from .models import AssetClass, AssetSubclass, AssetType, Attribute, Control, Safeguard
from .store import FrameworkStore

logger = logging.getLogger(__name__)

DEFAULT_FRAMEWORK_PATH = Path(__file__).with_name("default_framework.yaml")


def load_framework(path: Optional[Union[str, Path]] = None) -> FrameworkStore:
    """Read a framework file (the bundled CIS sample when ``path`` is ``None``)."""
    path = Path(path) if path is not None else DEFAULT_FRAMEWORK_PATH
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise FrameworkConfigError(f"Could not parse '{path}': {e}") from e
    store = build_framework(data)
    logger.info(
        "Loaded framework from %s: %d asset types, %d controls, %d attributes, %d rows",
        path,
        len(store.taxonomy.asset_types),
        len(store.controls.controls),
        len(store.attributes),
        len(store.registry),
    )
    return store


def build_framework(data: Mapping[str, Any]) -> FrameworkStore:
    if not isinstance(data, Mapping):
        raise FrameworkConfigError("Framework definition must be a mapping.")

    store = FrameworkStore(
        [_asset_type(raw) for raw in _entries(data, "asset_types")],
        [_control(raw) for raw in _entries(data, "controls")],
        [_attribute(raw) for raw in _entries(data, "attributes")],
    )
    for index, raw in enumerate(_entries(data, "rows")):
        _load_row(store, index, raw)
    return store


# ----- sections -----
def _entries(data: Mapping[str, Any], key: str) -> List[Mapping[str, Any]]:
    items = data.get(key) or []
    if not isinstance(items, list):
        raise FrameworkConfigError(f"'{key}' must be a list.")
    for item in items:
        if not isinstance(item, Mapping):
            raise FrameworkConfigError(f"Every entry of '{key}' must be a mapping, got {item!r}.")
    return items


def _text(raw: Mapping[str, Any], key: str, context: str, required: bool = True) -> str:
    value = raw.get(key)
    if value is None or (isinstance(value, str) and not value.strip()):
        if required:
            raise FrameworkConfigError(f"{context}: '{key}' is required.")
        return ""
    return str(value)


def _attribute(raw: Mapping[str, Any]) -> Attribute:
    name = _text(raw, "name", "attribute")
    attribute_id = _text(raw, "id", f"attribute '{name}'", required=False) or attribute_id_for(name)
    return Attribute(attribute_id, name, _text(raw, "tooltip", name, required=False))


def _asset_type(raw: Mapping[str, Any]) -> AssetType:
    type_id = _text(raw, "id", "asset type")
    classes = []
    for raw_class in _entries(raw, "classes"):
        class_id = _text(raw_class, "id", f"class of '{type_id}'")
        subclasses = tuple(
            AssetSubclass(
                _text(raw_sub, "id", f"subclass of '{class_id}'"),
                _text(raw_sub, "name", f"subclass of '{class_id}'"),
                class_id,
            )
            for raw_sub in _entries(raw_class, "subclasses")
        )
        classes.append(AssetClass(class_id, _text(raw_class, "name", class_id), type_id, subclasses))
    return AssetType(type_id, _text(raw, "name", type_id), tuple(classes))


def _control(raw: Mapping[str, Any]) -> Control:
    control_id = _text(raw, "id", "control")
    safeguards = []
    for raw_sg in _entries(raw, "safeguards"):
        sg_id = _text(raw_sg, "id", f"safeguard of '{control_id}'")
        applicable = raw_sg.get("applicable_asset_types") or []
        if not isinstance(applicable, list):
            raise FrameworkConfigError(f"{sg_id}: 'applicable_asset_types' must be a list.")
        safeguards.append(
            Safeguard(sg_id, _text(raw_sg, "name", sg_id), control_id, frozenset(map(str, applicable)))
        )
    return Control(control_id, _text(raw, "name", control_id), tuple(safeguards))


def _load_row(store: FrameworkStore, index: int, raw: Mapping[str, Any]) -> None:
    context = f"row #{index + 1}"
    safeguard_id = _text(raw, "safeguard", context)
    node_id = _text(raw, "asset", context)
    try:
        row_id = store.add_row(safeguard_id, node_id)
        enforcement_point = _text(raw, "enforcement_point", context, required=False)
        if enforcement_point:
            store.set_enforcement_point(row_id, enforcement_point)
        for attribute_id, value in _values(raw, "methods", context).items():
            store.set_cell_value(row_id, attribute_id, value)
        for attribute_id, value in _values(raw, "outcomes", context).items():
            store.set_outcome_value(row_id, attribute_id, value)
    except FrameworkConfigError:
        raise
    except FrameworkError as e:
        raise FrameworkConfigError(f"{context} ({safeguard_id} / {node_id}): {e}") from e


def _values(raw: Mapping[str, Any], key: str, context: str) -> Dict[str, str]:
    values = raw.get(key) or {}
    if not isinstance(values, Mapping):
        raise FrameworkConfigError(f"{context}: '{key}' must map attribute ids to text.")
    return {str(k): "" if v is None else str(v) for k, v in values.items()}
