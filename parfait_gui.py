#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
CTRL_PaRFait GUI (PyQt5)
- Two tabs: measurement methods / assessment outcomes
- Asset column: per-row menu restricted to the safeguard's asset types
- Export: JSON, CSV, Excel, printable page (PDF), slides
"""

import html
import logging
import os
import sys
from typing import List, Optional, Tuple

from PyQt5 import QtCore, QtWidgets
from PyQt5.QtCore import Qt
from PyQt5.QtWidgets import (
    QAbstractItemView, QAction, QApplication, QComboBox, QDialog, QDialogButtonBox, QFileDialog,
    QFormLayout, QHeaderView, QLabel, QLineEdit, QMainWindow, QMenu, QMessageBox, QShortcut,
    QStyle, QTableWidget, QTableWidgetItem, QTabWidget, QToolButton, QVBoxLayout, QWidget,
)
from PyQt5.QtGui import QKeySequence

from parfait_core import (
    Attribute,
    DuplicateKeyError,
    FrameworkError,
    FrameworkStore,
    Row,
    load_framework,
    needs_separator,
)
from parfait_core import exporters

logger = logging.getLogger("parfait_gui")

ROW_ID_ROLE = Qt.UserRole
ATTRIBUTE_ID_ROLE = Qt.UserRole + 1
FIXED_COLUMNS = ("Safeguard", "Asset", "Enforcement Point")
COL_SAFEGUARD, COL_ASSET, COL_ENFORCEMENT = range(3)
LEVEL_INDENT = {"type": "", "class": "    ", "subclass": "        "}


def make_html_tooltip(title: str, body: str) -> str:
    return f"<html><b>{html.escape(title)}</b><br>{html.escape(body)}</html>"


# ==========================
# Add Row dialog
# ==========================
class AddRowDialog(QDialog):
    """Pick a safeguard, then one of the asset nodes applicable to it."""

    def __init__(self, store: FrameworkStore, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Add Row")
        self.store = store
        form = QFormLayout(self)

        self.combo_safeguard = QComboBox()
        self.combo_safeguard.addItem("Select a safeguard", "")
        for sg in store.controls.safeguards():
            self.combo_safeguard.addItem(f"{sg.id}: {sg.name}", sg.id)
        self.combo_asset = QComboBox()
        self.combo_asset.setEnabled(False)
        self.combo_safeguard.currentIndexChanged.connect(self._refresh_assets)

        form.addRow("Safeguard", self.combo_safeguard)
        form.addRow("Asset", self.combo_asset)
        btns = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        btns.accepted.connect(self.accept)
        btns.rejected.connect(self.reject)
        self._ok = btns.button(QDialogButtonBox.Ok)
        self._ok.setEnabled(False)
        self.combo_asset.currentIndexChanged.connect(
            lambda _i: self._ok.setEnabled(bool(self.combo_asset.currentData()))
        )
        form.addRow(btns)

    def _refresh_assets(self, _index: int = 0) -> None:
        self.combo_asset.clear()
        options = self.store.selectable_nodes_for(self.combo_safeguard.currentData() or "")
        self.combo_asset.addItem("Select an asset", "")
        previous = None
        for option in options:
            if needs_separator(previous, option):
                self.combo_asset.insertSeparator(self.combo_asset.count())
            self.combo_asset.addItem(LEVEL_INDENT[option.level] + option.name, option.id)
            previous = option
        self.combo_asset.setEnabled(bool(options))

    def get_values(self) -> Tuple[str, str]:
        return self.combo_safeguard.currentData() or "", self.combo_asset.currentData() or ""


# ==========================
# Add Attribute dialog
# ==========================
class AddAttributeDialog(QDialog):
    def __init__(self, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Add New Attribute")
        form = QFormLayout(self)
        self.ed_name = QLineEdit()
        self.ed_name.setPlaceholderText("e.g. Reliability")
        self.ed_tooltip = QLineEdit()
        self.ed_tooltip.setPlaceholderText("What does this attribute measure?")
        form.addRow("Attribute name", self.ed_name)
        form.addRow("Tooltip", self.ed_tooltip)
        btns = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        btns.accepted.connect(self.accept)
        btns.rejected.connect(self.reject)
        form.addRow(btns)

    def get_values(self) -> Tuple[str, str]:
        return self.ed_name.text().strip(), self.ed_tooltip.text().strip()


# ==========================
# Framework table (one per tab)
# ==========================
class FrameworkTable(QTableWidget):
    """Rows of the store; attribute cells edit either method or outcome values."""

    def __init__(self, store: FrameworkStore, use_outcomes: bool, window: "MainWindow"):
        super().__init__(window)
        self.store = store
        self.use_outcomes = use_outcomes
        self.main_window = window
        self._populating = False
        self.setSelectionBehavior(QAbstractItemView.SelectRows)
        self.setSelectionMode(QAbstractItemView.SingleSelection)
        self.setEditTriggers(QAbstractItemView.DoubleClicked | QAbstractItemView.EditKeyPressed)
        self.setWordWrap(True)
        self.verticalHeader().setVisible(False)
        self.horizontalHeader().setSectionResizeMode(QHeaderView.Interactive)
        self.horizontalHeader().setStretchLastSection(True)
        self.itemChanged.connect(self._on_item_changed)

    # ----- build -----
    def rebuild(self) -> None:
        self._populating = True
        try:
            attributes = self.store.attributes.list()
            self.clear()
            self.setColumnCount(len(FIXED_COLUMNS) + len(attributes))
            self.setRowCount(len(self.store.rows))
            for col, title in enumerate(FIXED_COLUMNS):
                self.setHorizontalHeaderItem(col, QTableWidgetItem(title))
            for offset, attr in enumerate(attributes):
                header = QTableWidgetItem(attr.name)
                header.setToolTip(make_html_tooltip(attr.name, attr.tooltip))
                self.setHorizontalHeaderItem(len(FIXED_COLUMNS) + offset, header)
            for row_idx, row in enumerate(self.store.rows):
                self._fill_row(row_idx, row, attributes)
            self.resizeRowsToContents()
        finally:
            self._populating = False

    def _fill_row(self, row_idx: int, row: Row, attributes: Tuple[Attribute, ...]) -> None:
        sg_item = QTableWidgetItem(self.store.safeguard_name(row.safeguard_id))
        sg_item.setData(ROW_ID_ROLE, row.id)
        sg_item.setToolTip(make_html_tooltip(row.safeguard_id, self.store.control_name_for(row.safeguard_id)))
        sg_item.setFlags(sg_item.flags() & ~Qt.ItemIsEditable)
        self.setItem(row_idx, COL_SAFEGUARD, sg_item)
        self.setCellWidget(row_idx, COL_ASSET, self._asset_button(row))
        self.setItem(row_idx, COL_ENFORCEMENT, QTableWidgetItem(self.store.get_enforcement_point(row.id)))
        for offset, attr in enumerate(attributes):
            if self.use_outcomes:
                value = self.store.get_outcome_value(row.id, attr.id)
            else:
                value = self.store.get_cell_value(row.id, attr.id)
            item = QTableWidgetItem(value)
            item.setData(ATTRIBUTE_ID_ROLE, attr.id)
            self.setItem(row_idx, len(FIXED_COLUMNS) + offset, item)

    def _asset_button(self, row: Row) -> QToolButton:
        btn = QToolButton(self)
        btn.setText(self.store.asset_label(row))
        btn.setPopupMode(QToolButton.InstantPopup)
        btn.setToolButtonStyle(Qt.ToolButtonTextOnly)
        btn.setSizePolicy(QtWidgets.QSizePolicy.Expanding, QtWidgets.QSizePolicy.Preferred)
        menu = QMenu(btn)
        previous = None
        for option in self.store.selectable_nodes_for(row.safeguard_id):
            if needs_separator(previous, option):
                menu.addSeparator()
            act = menu.addAction(LEVEL_INDENT[option.level] + option.name)
            act.setCheckable(True)
            act.setChecked(option.id == row.asset_node_id)
            # deferred: the rename rebuilds the table, which owns this menu
            act.triggered.connect(
                lambda _=False, rid=row.id, node_id=option.id: QtCore.QTimer.singleShot(
                    0, lambda: self.main_window.reassign_asset(rid, node_id)
                )
            )
            previous = option
        btn.setMenu(menu)
        return btn

    # ----- edits -----
    def row_id_at(self, row_idx: int) -> Optional[str]:
        item = self.item(row_idx, COL_SAFEGUARD)
        return item.data(ROW_ID_ROLE) if item is not None else None

    def show_enforcement_point(self, row_idx: int, text: str) -> None:
        """Mirror an enforcement point edited in the other tab."""
        item = self.item(row_idx, COL_ENFORCEMENT)
        if item is None or item.text() == text:
            return
        self._populating = True
        try:
            item.setText(text)
        finally:
            self._populating = False

    def _on_item_changed(self, item: QTableWidgetItem) -> None:
        if self._populating:
            return
        row_id = self.row_id_at(item.row())
        if not row_id:
            return
        try:
            if item.column() == COL_ENFORCEMENT:
                self.store.set_enforcement_point(row_id, item.text())
                self.main_window.sibling_of(self).show_enforcement_point(item.row(), item.text())
            elif item.column() >= len(FIXED_COLUMNS):
                attribute_id = item.data(ATTRIBUTE_ID_ROLE)
                if self.use_outcomes:
                    self.store.set_outcome_value(row_id, attribute_id, item.text())
                else:
                    self.store.set_cell_value(row_id, attribute_id, item.text())
        except FrameworkError as e:
            QMessageBox.warning(self, "Edit", str(e))
            QtCore.QTimer.singleShot(0, self.main_window.refresh)


# ==========================
# Main window
# ==========================
class MainWindow(QMainWindow):
    def __init__(self, store: FrameworkStore):
        super().__init__()
        self.setWindowTitle(exporters.FRAMEWORK_TITLE)
        self.resize(1400, 840)
        self.store = store
        self.settings = QtCore.QSettings("CTRL_PaRFait", "FrameworkTable")

        central = QWidget(self)
        vroot = QVBoxLayout(central)
        vroot.setContentsMargins(12, 12, 12, 12)
        intro = QLabel(
            "A framework to maintain the Tools, Techniques, Procedures used to measure and monitor "
            "the performance and reliability of security controls. Measurements can be defined per "
            "Asset Type, Asset Class, or Asset Subclass and per Safeguard."
        )
        intro.setWordWrap(True)
        vroot.addWidget(intro)

        self.tabs = QTabWidget(self)
        self.methods_table = FrameworkTable(store, False, self)
        self.outcomes_table = FrameworkTable(store, True, self)
        self.tabs.addTab(self.methods_table, exporters.mode_title(False))
        self.tabs.addTab(self.outcomes_table, exporters.mode_title(True))
        vroot.addWidget(self.tabs)
        self.setCentralWidget(central)

        self._build_menus()
        self.refresh()
        self._restore_settings()

    def _build_menus(self) -> None:
        frame_menu = self.menuBar().addMenu("Framework")

        act_add_row = QAction("Add Row…", self)
        act_add_row.setShortcut("Ctrl+N")
        act_add_row.setToolTip("Add a safeguard / asset row (Ctrl+N)")
        act_add_row.setIcon(self.style().standardIcon(QStyle.SP_FileDialogNewFolder))
        act_add_row.triggered.connect(self._action_add_row)
        frame_menu.addAction(act_add_row)

        act_del_row = QAction("Delete Row", self)
        act_del_row.setShortcut("Ctrl+Del")
        act_del_row.setToolTip("Delete the selected row and all of its values (Ctrl+Del)")
        act_del_row.setIcon(self.style().standardIcon(QStyle.SP_TrashIcon))
        act_del_row.triggered.connect(self._action_delete_row)
        frame_menu.addAction(act_del_row)

        act_add_attr = QAction("Add Attribute…", self)
        act_add_attr.setShortcut("Ctrl+Alt+N")
        act_add_attr.setIcon(self.style().standardIcon(QStyle.SP_FileDialogContentsView))
        act_add_attr.triggered.connect(self._action_add_attribute)
        frame_menu.addAction(act_add_attr)

        self._del_shortcut = QShortcut(QKeySequence(Qt.Key_Delete), self)
        self._del_shortcut.activated.connect(self._action_delete_row)

        export_menu = self.menuBar().addMenu("Export")
        for label, handler in (
            ("Export as JSON", self._action_export_json),
            ("Export as Spreadsheet (CSV)", self._action_export_csv),
            ("Export as Excel", self._action_export_xlsx),
            ("Export as PDF", self._action_export_pdf),
            ("Export as Slide", self._action_export_slides),
        ):
            act = QAction(label, self)
            act.triggered.connect(handler)
            export_menu.addAction(act)

    # ----- helpers -----
    def refresh(self) -> None:
        self.methods_table.rebuild()
        self.outcomes_table.rebuild()

    def current_table(self) -> FrameworkTable:
        return self.outcomes_table if self.tabs.currentIndex() == 1 else self.methods_table

    def sibling_of(self, table: FrameworkTable) -> FrameworkTable:
        return self.methods_table if table is self.outcomes_table else self.outcomes_table

    def use_outcomes(self) -> bool:
        return self.current_table().use_outcomes

    def _selected_row_id(self) -> Optional[str]:
        table = self.current_table()
        row = table.currentRow()
        if row < 0 or row >= table.rowCount():
            return None
        return table.row_id_at(row)

    # ----- row / attribute actions -----
    def reassign_asset(self, row_id: str, node_id: str) -> None:
        try:
            new_id = self.store.reassign_row_asset(row_id, node_id)
        except DuplicateKeyError:
            QMessageBox.warning(self, "Change asset", "This combination already exists!")
            self.refresh()
            return
        except FrameworkError as e:
            QMessageBox.critical(self, "Change asset", str(e))
            self.refresh()
            return
        self.refresh()
        if new_id != row_id:
            self.statusBar().showMessage(f"Row {row_id} is now {new_id}", 2000)

    def _action_add_row(self) -> None:
        dlg = AddRowDialog(self.store, self)
        if not dlg.exec_():
            return
        safeguard_id, node_id = dlg.get_values()
        try:
            row_id = self.store.add_row(safeguard_id, node_id)
        except DuplicateKeyError:
            QMessageBox.warning(self, "Add Row", "This combination already exists!")
            return
        except FrameworkError as e:
            QMessageBox.critical(self, "Add Row", str(e))
            return
        self.refresh()
        self.statusBar().showMessage(f"Row {row_id} added", 1500)

    def _action_delete_row(self) -> None:
        row_id = self._selected_row_id()
        if not row_id:
            QMessageBox.information(self, "Delete Row", "No row selected.")
            return
        reply = QMessageBox.question(
            self, "Confirm Deletion",
            "Are you sure you want to delete this row? This action cannot be undone.",
            QMessageBox.Yes | QMessageBox.No, QMessageBox.No,
        )
        if reply != QMessageBox.Yes:
            return
        self.store.delete_row(row_id)
        self.refresh()
        self.statusBar().showMessage(f"Row {row_id} deleted", 1500)

    def _action_add_attribute(self) -> None:
        dlg = AddAttributeDialog(self)
        if not dlg.exec_():
            return
        name, tooltip = dlg.get_values()
        if not name:
            return
        try:
            self.store.add_attribute(name, tooltip)
        except FrameworkError as e:
            QMessageBox.warning(self, "Add Attribute", str(e))
            return
        self.refresh()
        self.statusBar().showMessage(f"Attribute '{name}' added", 1500)

    # ----- export -----
    def _ask_path(self, title: str, kind: str, file_filter: str) -> Optional[str]:
        suggested = exporters.default_filename(kind, self.use_outcomes())
        path, _ = QFileDialog.getSaveFileName(self, title, suggested, file_filter)
        return path or None

    def _written(self, path: str) -> None:
        logger.info("Exported %s", path)
        QMessageBox.information(self, "Export", f"Exported to {path}.")
        self.statusBar().showMessage(f"Exported to {os.path.basename(path)}", 2000)

    def _records(self):
        return self.store.project(self.use_outcomes()), self.store.attributes.list()

    def _action_export_json(self) -> None:
        path = self._ask_path("Export as JSON", "json", "JSON (*.json)")
        if not path:
            return
        try:
            exporters.write_text(path, exporters.to_json(self.store))
        except OSError as e:
            QMessageBox.critical(self, "Export failed", str(e))
            return
        self._written(path)

    def _action_export_csv(self) -> None:
        path = self._ask_path("Export as Spreadsheet", "csv", "CSV (*.csv)")
        if not path:
            return
        records, attributes = self._records()
        try:
            exporters.write_text(path, exporters.to_csv(records, attributes))
        except OSError as e:
            QMessageBox.critical(self, "Export failed", str(e))
            return
        self._written(path)

    def _action_export_xlsx(self) -> None:
        path = self._ask_path("Export as Excel", "xlsx", "Excel (*.xlsx)")
        if not path:
            return
        records, attributes = self._records()
        try:
            exporters.write_xlsx(records, attributes, path, self.use_outcomes())
        except (OSError, ValueError) as e:
            QMessageBox.critical(self, "Export failed", str(e))
            return
        self._written(path)

    def _action_export_pdf(self) -> None:
        path = self._ask_path("Export as PDF (printable HTML)", "pdf", "HTML (*.html)")
        if not path:
            return
        records, attributes = self._records()
        try:
            exporters.write_text(path, exporters.to_html_table(records, attributes, self.use_outcomes()))
        except OSError as e:
            QMessageBox.critical(self, "Export failed", str(e))
            return
        self._written(path)

    def _action_export_slides(self) -> None:
        path = self._ask_path("Export as Slides (printable HTML)", "slides", "HTML (*.html)")
        if not path:
            return
        records, attributes = self._records()
        try:
            exporters.write_text(path, exporters.to_html_slides(records, attributes, self.use_outcomes()))
        except OSError as e:
            QMessageBox.critical(self, "Export failed", str(e))
            return
        self._written(path)

    # ----- settings -----
    def _restore_settings(self) -> None:
        geo = self.settings.value("win/geo", type=QtCore.QByteArray)
        if geo:
            self.restoreGeometry(geo)
        tab = self.settings.value("ui/tab", 0, type=int)
        if 0 <= tab < self.tabs.count():
            self.tabs.setCurrentIndex(tab)

    def closeEvent(self, e):
        self.settings.setValue("win/geo", self.saveGeometry())
        self.settings.setValue("ui/tab", self.tabs.currentIndex())
        super().closeEvent(e)


# ===== entry point =====
def configure_logging() -> None:
    level = os.environ.get("PARFAIT_LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    )


def main(argv: Optional[List[str]] = None) -> int:
    argv = list(sys.argv if argv is None else argv)
    configure_logging()
    path = argv[1] if len(argv) > 1 else None
    try:
        store = load_framework(path)
    except (OSError, FrameworkError) as e:
        raise SystemExit(f"Failed to load framework: {e}")
    app = QApplication(argv)
    win = MainWindow(store)
    win.show()
    return app.exec_()


if __name__ == "__main__":
    sys.exit(main())
