"""Domain models for the control measurement framework."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Dict, FrozenSet, Literal, Optional, Tuple, Union

AssetLevel = Literal["type", "class", "subclass"]


@dataclass(frozen=True)
class AssetSubclass:
    id: str
    name: str
    asset_class_id: str


@dataclass(frozen=True)
class AssetClass:
    id: str
    name: str
    asset_type_id: str
    subclasses: Tuple[AssetSubclass, ...] = ()


@dataclass(frozen=True)
class AssetType:
    id: str
    name: str
    classes: Tuple[AssetClass, ...] = ()


@dataclass(frozen=True)
class Safeguard:
    """A measurable safeguard and the asset types it can be measured against."""

    id: str
    name: str
    control_id: str
    applicable_asset_types: FrozenSet[str] = frozenset()


@dataclass(frozen=True)
class Control:
    id: str
    name: str
    safeguards: Tuple[Safeguard, ...] = ()


@dataclass(frozen=True)
class Attribute:
    """A measurement dimension (one column in every view and export)."""

    id: str
    name: str
    tooltip: str = ""


# Asset selections: one variant per taxonomy level, each carrying exactly the
# parent links valid for that level.


@dataclass(frozen=True)
class TypeSelection:
    level: ClassVar[AssetLevel] = "type"

    id: str
    name: str

    @property
    def triple(self) -> Tuple[Optional[str], Optional[str], str]:
        return None, None, self.id


@dataclass(frozen=True)
class ClassSelection:
    level: ClassVar[AssetLevel] = "class"

    id: str
    name: str
    type_id: str

    @property
    def triple(self) -> Tuple[Optional[str], Optional[str], str]:
        return None, self.id, self.type_id


@dataclass(frozen=True)
class SubclassSelection:
    level: ClassVar[AssetLevel] = "subclass"

    id: str
    name: str
    class_id: str
    type_id: str

    @property
    def triple(self) -> Tuple[Optional[str], Optional[str], str]:
        return self.id, self.class_id, self.type_id


SelectionOption = Union[TypeSelection, ClassSelection, SubclassSelection]


@dataclass(frozen=True)
class ResolvedNode:
    """Result of a taxonomy lookup; ``level`` is ``None`` for unknown ids."""

    level: Optional[AssetLevel] = None
    name: str = ""
    parent_class_id: Optional[str] = None
    parent_type_id: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.level is not None


@dataclass(frozen=True)
class Row:
    """One safeguard measured against one taxonomy node.

    ``id`` is an opaque key built from ``safeguard_id`` and ``asset_node_id``;
    the structured fields are the source of truth and the key is never parsed.
    """

    id: str
    safeguard_id: str
    asset_node_id: str
    asset_subclass_id: Optional[str] = None
    asset_class_id: Optional[str] = None
    asset_type_id: Optional[str] = None


def row_key(safeguard_id: str, node_id: str) -> str:
    return f"{safeguard_id}-{node_id}"


# keys of the fixed fields in an exported record; attribute names may not reuse them
EXPORT_FIELDS = (
    "control",
    "safeguard",
    "assetType",
    "assetClass",
    "assetSubclass",
    "enforcementPoint",
)


@dataclass(frozen=True)
class FlatRecord:
    """One exported row: names resolved, every field a string."""

    control: str = ""
    safeguard: str = ""
    asset_type: str = ""
    asset_class: str = ""
    asset_subclass: str = ""
    enforcement_point: str = ""
    values: Dict[str, str] = field(default_factory=dict)  # attribute name -> text

    def as_dict(self) -> Dict[str, str]:
        fixed = (
            self.control,
            self.safeguard,
            self.asset_type,
            self.asset_class,
            self.asset_subclass,
            self.enforcement_point,
        )
        out = dict(zip(EXPORT_FIELDS, fixed))
        out.update(self.values)
        return out
