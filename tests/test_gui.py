import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
QtWidgets = pytest.importorskip("PyQt5.QtWidgets")

from parfait_core import FrameworkStore  # noqa: E402
from parfait_gui import (  # noqa: E402
    ATTRIBUTE_ID_ROLE,
    COL_ENFORCEMENT,
    FIXED_COLUMNS,
    ROW_ID_ROLE,
    AddRowDialog,
    MainWindow,
)


@pytest.fixture(scope="module")
def qapp():
    app = QtWidgets.QApplication.instance() or QtWidgets.QApplication([])
    yield app


@pytest.fixture
def window(qapp, store: FrameworkStore):
    win = MainWindow(store)
    yield win
    win.close()
    win.deleteLater()


def test_tables_mirror_the_store(window: MainWindow, store: FrameworkStore) -> None:
    for table in (window.methods_table, window.outcomes_table):
        assert table.rowCount() == len(store.rows)
        assert table.columnCount() == len(FIXED_COLUMNS) + len(store.attributes)
    assert window.methods_table.row_id_at(0) == "cis1.1-workstations"
    assert window.methods_table.item(0, len(FIXED_COLUMNS)).text() == "Monthly compliance scan success rate"
    assert window.outcomes_table.item(0, len(FIXED_COLUMNS)).text() == "High (92% compliance)"


def test_reassign_asset_refreshes_both_tabs(window: MainWindow, store: FrameworkStore) -> None:
    window.reassign_asset("cis1.2-firewalls", "routers")

    assert window.methods_table.row_id_at(2) == "cis1.2-routers"
    assert window.outcomes_table.row_id_at(2) == "cis1.2-routers"
    assert window.methods_table.cellWidget(2, 1).text() == "Routers"


def test_editing_a_cell_writes_through(window: MainWindow, store: FrameworkStore) -> None:
    window.outcomes_table.item(1, len(FIXED_COLUMNS) + 2).setText("90%")

    assert store.get_outcome_value("cis1.1-laptops", "coverage") == "90%"
    assert store.get_cell_value("cis1.1-laptops", "coverage") == "Network access logs vs. inventory"


def test_enforcement_point_edit_shows_in_both_tabs(window: MainWindow, store: FrameworkStore) -> None:
    window.methods_table.item(1, COL_ENFORCEMENT).setText("Intune")

    assert store.get_enforcement_point("cis1.1-laptops") == "Intune"
    assert window.outcomes_table.item(1, COL_ENFORCEMENT).text() == "Intune"

    window.outcomes_table.item(1, COL_ENFORCEMENT).setText("Jamf")

    assert store.get_enforcement_point("cis1.1-laptops") == "Jamf"
    assert window.methods_table.item(1, COL_ENFORCEMENT).text() == "Jamf"


def test_attribute_cells_carry_the_attribute_id(window: MainWindow) -> None:
    item = window.methods_table.item(0, len(FIXED_COLUMNS) + 1)

    assert item.data(ATTRIBUTE_ID_ROLE) == "efficiency"
    assert item.data(ROW_ID_ROLE) is None
    assert window.methods_table.row_id_at(0) == "cis1.1-workstations"


def test_add_row_dialog_lists_only_applicable_assets(qapp, store: FrameworkStore) -> None:
    dlg = AddRowDialog(store)
    dlg.combo_safeguard.setCurrentIndex(dlg.combo_safeguard.findData("cis2.1"))

    ids = [dlg.combo_asset.itemData(i) for i in range(dlg.combo_asset.count())]

    assert ids[:3] == ["", "software", "operating-systems"]
    assert "devices" not in ids
    dlg.combo_asset.setCurrentIndex(dlg.combo_asset.findData("os-apis"))
    assert dlg.get_values() == ("cis2.1", "os-apis")
