import pytest

from parfait_core import (
    AssetClass,
    AssetSubclass,
    AssetType,
    ClassSelection,
    FrameworkConfigError,
    FrameworkStore,
    ResolvedNode,
    SubclassSelection,
    TaxonomyStore,
    TypeSelection,
)


def test_resolve_node_reports_level_and_parents(store: FrameworkStore) -> None:
    taxonomy = store.taxonomy

    assert taxonomy.resolve_node("laptops") == ResolvedNode("subclass", "Laptops", "endpoints", "devices")
    assert taxonomy.resolve_node("network") == ResolvedNode("class", "Network", None, "devices")
    assert taxonomy.resolve_node("software") == ResolvedNode("type", "Software")


@pytest.mark.parametrize("node_id", ["", None, "mainframes"])
def test_resolve_node_miss_is_empty(store: FrameworkStore, node_id) -> None:
    node = store.taxonomy.resolve_node(node_id)

    assert not node.found
    assert node.name == ""
    assert store.taxonomy.selection_for(node_id) is None


def test_children_lookups_keep_order_and_tolerate_misses(store: FrameworkStore) -> None:
    taxonomy = store.taxonomy

    assert [c.id for c in taxonomy.classes_of("devices")] == ["endpoints", "network", "servers"]
    assert [s.id for s in taxonomy.subclasses_of("endpoints")] == ["workstations", "laptops", "mobile"]
    assert taxonomy.classes_of("unknown") == ()
    assert taxonomy.subclasses_of(None) == ()


def test_display_name_qualifies_repeated_subclass_names(store: FrameworkStore) -> None:
    taxonomy = store.taxonomy

    assert taxonomy.display_name("os-services") == "Services (Operating Systems)"
    assert taxonomy.display_name("app-apis") == "APIs (Applications)"
    assert taxonomy.display_name("os-services", disambiguate=False) == "Services"
    assert taxonomy.display_name("workstations") == "Workstations"
    assert taxonomy.display_name("software") == "Software"
    assert taxonomy.display_name("nope") == ""


def test_disambiguation_is_driven_by_the_type_not_its_id(small_store: FrameworkStore) -> None:
    taxonomy = small_store.taxonomy

    assert taxonomy.display_name("iaas-storage") == "Storage (IaaS)"
    assert taxonomy.display_name("paas-storage") == "Storage (PaaS)"
    assert taxonomy.display_name("iaas-compute") == "Compute"


def test_same_subclass_name_under_different_types_is_not_qualified() -> None:
    taxonomy = TaxonomyStore([
        AssetType("a", "A", (AssetClass("a1", "A1", "a", (AssetSubclass("a1-x", "X", "a1"),)),)),
        AssetType("b", "B", (AssetClass("b1", "B1", "b", (AssetSubclass("b1-x", "X", "b1"),)),)),
    ])

    assert taxonomy.display_name("a1-x") == "X"
    assert taxonomy.display_name("b1-x") == "X"


def test_selection_for_builds_tagged_variants(store: FrameworkStore) -> None:
    taxonomy = store.taxonomy

    assert taxonomy.selection_for("devices") == TypeSelection("devices", "Devices")
    assert taxonomy.selection_for("servers") == ClassSelection("servers", "Servers", "devices")
    sub = taxonomy.selection_for("os-apis")
    assert sub == SubclassSelection("os-apis", "APIs (Operating Systems)", "operating-systems", "software")
    assert sub.triple == ("os-apis", "operating-systems", "software")


def test_name_helpers_fall_back_to_empty_string(store: FrameworkStore) -> None:
    taxonomy = store.taxonomy

    assert taxonomy.type_name("devices") == "Devices"
    assert taxonomy.class_name("endpoints") == "Endpoints"
    assert taxonomy.subclass_name("mobile") == "Mobile Devices"
    assert taxonomy.type_name(None) == ""
    assert taxonomy.class_name("devices") == ""
    assert taxonomy.subclass_name("endpoints") == ""


def test_duplicate_ids_within_a_level_are_rejected() -> None:
    with pytest.raises(FrameworkConfigError):
        TaxonomyStore([
            AssetType("t", "T", (
                AssetClass("c1", "C1", "t", (AssetSubclass("x", "X", "c1"),)),
                AssetClass("c2", "C2", "t", (AssetSubclass("x", "X", "c2"),)),
            )),
        ])


def test_ids_reused_across_levels_are_rejected() -> None:
    with pytest.raises(FrameworkConfigError, match="network"):
        TaxonomyStore([
            AssetType("network", "Network", (AssetClass("network", "Network", "network"),)),
        ])


def test_broken_back_references_are_rejected() -> None:
    with pytest.raises(FrameworkConfigError):
        TaxonomyStore([AssetType("t", "T", (AssetClass("c", "C", "other"),))])
    with pytest.raises(FrameworkConfigError):
        TaxonomyStore([
            AssetType("t", "T", (AssetClass("c", "C", "t", (AssetSubclass("s", "S", "elsewhere"),)),)),
        ])
