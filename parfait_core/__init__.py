"""Core data model for the control performance and reliability framework."""

from .models import (
    AssetClass,
    AssetSubclass,
    AssetType,
    Attribute,
    ClassSelection,
    Control,
    FlatRecord,
    ResolvedNode,
    Row,
    Safeguard,
    SelectionOption,
    SubclassSelection,
    TypeSelection,
)
from .errors import (
    DuplicateKeyError,
    EmptyKeyError,
    FrameworkConfigError,
    FrameworkError,
    NotApplicableError,
    UnknownReferenceError,
)
from .taxonomy import TaxonomyStore
from .catalog import AttributeCatalog, ControlCatalog, attribute_id_for
from .associations import AssociationTable, cell_table, row_table
from .registry import RowRegistry, needs_separator
from .projection import project
from .store import FrameworkStore
from .loader import build_framework, load_framework

__all__ = [
    "AssetClass",
    "AssetSubclass",
    "AssetType",
    "Attribute",
    "ClassSelection",
    "Control",
    "FlatRecord",
    "ResolvedNode",
    "Row",
    "Safeguard",
    "SelectionOption",
    "SubclassSelection",
    "TypeSelection",
    "DuplicateKeyError",
    "EmptyKeyError",
    "FrameworkConfigError",
    "FrameworkError",
    "NotApplicableError",
    "UnknownReferenceError",
    "TaxonomyStore",
    "AttributeCatalog",
    "ControlCatalog",
    "attribute_id_for",
    "AssociationTable",
    "cell_table",
    "row_table",
    "RowRegistry",
    "needs_separator",
    "project",
    "FrameworkStore",
    "build_framework",
    "load_framework",
]
