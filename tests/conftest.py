import pytest

from parfait_core import (
    AssetClass,
    AssetSubclass,
    AssetType,
    Attribute,
    Control,
    FrameworkStore,
    Safeguard,
    load_framework,
)


@pytest.fixture
def store() -> FrameworkStore:
    """The bundled CIS sample framework, freshly loaded for every test."""
    return load_framework()


@pytest.fixture
def small_store() -> FrameworkStore:
    """Two asset types with a repeated subclass name under 'cloud' and one safeguard spanning both types."""
    asset_types = [
        AssetType("cloud", "Cloud", (
            AssetClass("iaas", "IaaS", "cloud", (
                AssetSubclass("iaas-storage", "Storage", "iaas"),
                AssetSubclass("iaas-compute", "Compute", "iaas"),
            )),
            AssetClass("paas", "PaaS", "cloud", (
                AssetSubclass("paas-storage", "Storage", "paas"),
            )),
        )),
        AssetType("people", "People", (
            AssetClass("staff", "Staff", "people", (
                AssetSubclass("admins", "Administrators", "staff"),
            )),
        )),
        AssetType("data", "Data"),
    ]
    controls = [
        Control("c1", "Control One", (
            Safeguard("c1.1", "Both", "c1", frozenset({"people", "cloud"})),
            Safeguard("c1.2", "Cloud only", "c1", frozenset({"cloud"})),
        )),
        Control("c2", "Control Two", (
            Safeguard("c2.1", "Nothing applicable", "c2", frozenset()),
        )),
    ]
    attributes = [
        Attribute("effectiveness", "Effectiveness", "Does it work?"),
        Attribute("coverage", "Coverage", "Share of assets covered"),
    ]
    return FrameworkStore(asset_types, controls, attributes)
