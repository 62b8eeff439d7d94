"""Control/safeguard catalog and the append-only attribute catalog."""

from __future__ import annotations

import logging
import re
from typing import Dict, FrozenSet, Iterable, Iterator, List, Optional, Tuple

from .errors import DuplicateKeyError, EmptyKeyError, FrameworkConfigError
from .models import EXPORT_FIELDS, Attribute, Control, Safeguard

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")
_RESERVED_NAMES = frozenset(f.lower() for f in EXPORT_FIELDS)


def attribute_id_for(name: str) -> str:
    """Derive an attribute id: lowercase, whitespace runs collapsed to ``_``."""
    return _WHITESPACE.sub("_", name.strip().lower())


class ControlCatalog:
    def __init__(self, controls: Iterable[Control]) -> None:
        self._controls: Tuple[Control, ...] = tuple(controls)
        self._control_by_id: Dict[str, Control] = {}
        self._safeguard_by_id: Dict[str, Safeguard] = {}
        for control in self._controls:
            if control.id in self._control_by_id:
                raise FrameworkConfigError(f"Duplicate control id '{control.id}'.")
            self._control_by_id[control.id] = control
            for safeguard in control.safeguards:
                if safeguard.id in self._safeguard_by_id:
                    raise FrameworkConfigError(f"Duplicate safeguard id '{safeguard.id}'.")
                if safeguard.control_id != control.id:
                    raise FrameworkConfigError(
                        f"Safeguard '{safeguard.id}' references control "
                        f"'{safeguard.control_id}' but is owned by '{control.id}'."
                    )
                self._safeguard_by_id[safeguard.id] = safeguard

    @property
    def controls(self) -> Tuple[Control, ...]:
        return self._controls

    def safeguards(self) -> List[Safeguard]:
        return [sg for control in self._controls for sg in control.safeguards]

    def safeguard(self, safeguard_id: Optional[str]) -> Optional[Safeguard]:
        return self._safeguard_by_id.get(safeguard_id) if safeguard_id else None

    def control_for(self, safeguard_id: Optional[str]) -> Optional[Control]:
        safeguard = self.safeguard(safeguard_id)
        return self._control_by_id.get(safeguard.control_id) if safeguard else None

    def applicable_types(self, safeguard_id: Optional[str]) -> FrozenSet[str]:
        safeguard = self.safeguard(safeguard_id)
        return safeguard.applicable_asset_types if safeguard else frozenset()

    def safeguard_name(self, safeguard_id: str) -> str:
        """Safeguard display name, falling back to the id itself."""
        safeguard = self.safeguard(safeguard_id)
        return safeguard.name if safeguard else safeguard_id

    def control_name(self, safeguard_id: Optional[str]) -> str:
        control = self.control_for(safeguard_id)
        return control.name if control else ""


class AttributeCatalog:
    """Ordered attributes; the order is the column order of every view and export.

    Exports key attribute values by name, so names are unique and may not
    reuse one of the fixed export fields.
    """

    def __init__(self, attributes: Iterable[Attribute] = ()) -> None:
        self._attributes: Dict[str, Attribute] = {}
        for attribute in attributes:
            if attribute.id in self._attributes:
                raise FrameworkConfigError(f"Duplicate attribute id '{attribute.id}'.")
            problem = self._name_problem(attribute.name)
            if problem:
                raise FrameworkConfigError(problem)
            self._attributes[attribute.id] = attribute

    def _name_problem(self, name: str) -> Optional[str]:
        if name.lower() in _RESERVED_NAMES:
            return f"Attribute name '{name}' is reserved for a fixed export field."
        if any(attr.name == name for attr in self._attributes.values()):
            return f"Attribute name '{name}' already exists."
        return None

    def add(self, name: str, tooltip: str = "") -> str:
        if not name or not name.strip():
            raise EmptyKeyError("Attribute name must not be empty.")
        name = name.strip()
        attribute_id = attribute_id_for(name)
        if attribute_id in self._attributes:
            logger.warning("Rejected attribute '%s': id '%s' exists", name, attribute_id)
            raise DuplicateKeyError(attribute_id, f"Attribute '{attribute_id}' already exists.")
        problem = self._name_problem(name)
        if problem:
            logger.warning("Rejected attribute '%s': %s", name, problem)
            raise DuplicateKeyError(name, problem)
        self._attributes[attribute_id] = Attribute(attribute_id, name, tooltip)
        logger.debug("Added attribute '%s'", attribute_id)
        return attribute_id

    def list(self) -> Tuple[Attribute, ...]:
        return tuple(self._attributes.values())

    def get(self, attribute_id: str) -> Optional[Attribute]:
        return self._attributes.get(attribute_id)

    def __contains__(self, attribute_id: object) -> bool:
        return attribute_id in self._attributes

    def __len__(self) -> int:
        return len(self._attributes)

    def __iter__(self) -> Iterator[Attribute]:
        return iter(self.list())
