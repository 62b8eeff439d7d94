"""Three-level asset taxonomy (type -> class -> subclass) and its lookups."""

from __future__ import annotations

from collections import Counter
from typing import Dict, Iterable, Optional, Set, Tuple

from .errors import FrameworkConfigError
from .models import (
    AssetClass,
    AssetSubclass,
    AssetType,
    ClassSelection,
    ResolvedNode,
    SelectionOption,
    SubclassSelection,
    TypeSelection,
)

_MISSING = ResolvedNode()


class TaxonomyStore:
    """Read-only index over an ordered sequence of asset types.

    Lookups are total: an unknown id resolves to an empty name, an empty
    tuple or ``None`` instead of raising, because callers routinely probe an
    id before knowing which level it belongs to.
    """

    def __init__(self, asset_types: Iterable[AssetType]) -> None:
        self._types: Tuple[AssetType, ...] = tuple(asset_types)
        self._type_by_id: Dict[str, AssetType] = {}
        self._class_by_id: Dict[str, AssetClass] = {}
        self._subclass_by_id: Dict[str, AssetSubclass] = {}
        self._index()
        self._ambiguous = self._ambiguous_subclass_ids()

    # ----- construction -----
    def _index(self) -> None:
        seen: Dict[str, str] = {}

        def claim(node_id: str, level: str) -> None:
            if not node_id:
                raise FrameworkConfigError(f"Empty asset {level} id.")
            if node_id in seen:
                raise FrameworkConfigError(
                    f"Asset {level} id '{node_id}' is already used by an asset {seen[node_id]}."
                )
            seen[node_id] = level

        for asset_type in self._types:
            claim(asset_type.id, "type")
            self._type_by_id[asset_type.id] = asset_type
            for asset_class in asset_type.classes:
                if asset_class.asset_type_id != asset_type.id:
                    raise FrameworkConfigError(
                        f"Asset class '{asset_class.id}' references type "
                        f"'{asset_class.asset_type_id}' but is owned by '{asset_type.id}'."
                    )
                claim(asset_class.id, "class")
                self._class_by_id[asset_class.id] = asset_class
                for subclass in asset_class.subclasses:
                    if subclass.asset_class_id != asset_class.id:
                        raise FrameworkConfigError(
                            f"Asset subclass '{subclass.id}' references class "
                            f"'{subclass.asset_class_id}' but is owned by '{asset_class.id}'."
                        )
                    claim(subclass.id, "subclass")
                    self._subclass_by_id[subclass.id] = subclass

    def _ambiguous_subclass_ids(self) -> Set[str]:
        ambiguous: Set[str] = set()
        for asset_type in self._types:
            counts = Counter(
                sub.name for cls in asset_type.classes for sub in cls.subclasses
            )
            for cls in asset_type.classes:
                ambiguous.update(sub.id for sub in cls.subclasses if counts[sub.name] > 1)
        return ambiguous

    # ----- traversal -----
    @property
    def asset_types(self) -> Tuple[AssetType, ...]:
        return self._types

    def __contains__(self, node_id: object) -> bool:
        return (
            node_id in self._subclass_by_id
            or node_id in self._class_by_id
            or node_id in self._type_by_id
        )

    def asset_type(self, type_id: Optional[str]) -> Optional[AssetType]:
        return self._type_by_id.get(type_id) if type_id else None

    def classes_of(self, type_id: Optional[str]) -> Tuple[AssetClass, ...]:
        asset_type = self.asset_type(type_id)
        return asset_type.classes if asset_type else ()

    def subclasses_of(self, class_id: Optional[str]) -> Tuple[AssetSubclass, ...]:
        asset_class = self._class_by_id.get(class_id) if class_id else None
        return asset_class.subclasses if asset_class else ()

    def resolve_node(self, node_id: Optional[str]) -> ResolvedNode:
        if not node_id:
            return _MISSING
        sub = self._subclass_by_id.get(node_id)
        if sub is not None:
            parent = self._class_by_id[sub.asset_class_id]
            return ResolvedNode("subclass", sub.name, parent.id, parent.asset_type_id)
        cls = self._class_by_id.get(node_id)
        if cls is not None:
            return ResolvedNode("class", cls.name, None, cls.asset_type_id)
        typ = self._type_by_id.get(node_id)
        if typ is not None:
            return ResolvedNode("type", typ.name)
        return _MISSING

    def selection_for(self, node_id: Optional[str]) -> Optional[SelectionOption]:
        """Return the tagged selection for ``node_id`` with its ancestors filled in."""
        node = self.resolve_node(node_id)
        if node.level == "subclass":
            return SubclassSelection(
                node_id, self.display_name(node_id), node.parent_class_id, node.parent_type_id
            )
        if node.level == "class":
            return ClassSelection(node_id, node.name, node.parent_type_id)
        if node.level == "type":
            return TypeSelection(node_id, node.name)
        return None

    def walk(self, type_ids: Optional[Iterable[str]] = None) -> Iterable[SelectionOption]:
        """Yield selections depth-first: each type, then its classes, each followed by its subclasses.

        ``type_ids`` restricts the walk to those types; taxonomy order is kept
        regardless of the order the ids are given in.
        """
        allowed = None if type_ids is None else set(type_ids)
        for asset_type in self._types:
            if allowed is not None and asset_type.id not in allowed:
                continue
            yield TypeSelection(asset_type.id, asset_type.name)
            for cls in asset_type.classes:
                yield ClassSelection(cls.id, cls.name, asset_type.id)
                for sub in cls.subclasses:
                    yield SubclassSelection(sub.id, self.display_name(sub.id), cls.id, asset_type.id)

    # ----- names -----
    def display_name(self, node_id: Optional[str], disambiguate: bool = True) -> str:
        """Name of any node; repeated subclass names within a type get their class appended."""
        node = self.resolve_node(node_id)
        if node.level == "subclass" and disambiguate and node_id in self._ambiguous:
            return f"{node.name} ({self.class_name(node.parent_class_id)})"
        return node.name

    def type_name(self, type_id: Optional[str]) -> str:
        asset_type = self.asset_type(type_id)
        return asset_type.name if asset_type else ""

    def class_name(self, class_id: Optional[str]) -> str:
        cls = self._class_by_id.get(class_id) if class_id else None
        return cls.name if cls else ""

    def subclass_name(self, subclass_id: Optional[str]) -> str:
        sub = self._subclass_by_id.get(subclass_id) if subclass_id else None
        return sub.name if sub else ""
