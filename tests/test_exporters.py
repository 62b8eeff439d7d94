import json
from pathlib import Path

import pandas as pd
import pytest

from parfait_core import FlatRecord, FrameworkStore
from parfait_core import exporters


def test_json_contains_both_modes(store: FrameworkStore) -> None:
    payload = json.loads(exporters.to_json(store))

    assert set(payload) == {"methods", "outcomes"}
    assert len(payload["methods"]) == len(payload["outcomes"]) == 5
    first = payload["methods"][0]
    assert list(first)[:6] == [
        "control", "safeguard", "assetType", "assetClass", "assetSubclass", "enforcementPoint",
    ]
    assert first["Effectiveness"] == "Monthly compliance scan success rate"
    assert payload["outcomes"][0]["Effectiveness"] == "High (92% compliance)"


def test_csv_header_and_quoted_values(store: FrameworkStore) -> None:
    text = exporters.to_csv(store.project(), store.attributes.list())
    lines = text.split("\n")

    assert lines[0] == (
        "Control,Safeguard,Asset Type,Asset Class,Asset Subclass,Enforcement Point,"
        "Effectiveness,Efficiency,Coverage,Friction"
    )
    assert len(lines) == 6
    assert lines[4].startswith('"CIS Control 2: Inventory and Control of Software Assets",')
    assert '"Services"' in lines[4]
    assert lines[4].endswith('"System admin feedback form"')


def test_csv_doubles_embedded_quotes() -> None:
    record = FlatRecord(control='Say "hi"')

    line = exporters.to_csv([record], []).split("\n")[1]

    assert line.startswith('"Say ""hi""",')


def test_html_table_escapes_and_lists_every_row(store: FrameworkStore) -> None:
    store.set_enforcement_point("cis1.1-laptops", "<script>alert(1)</script>")

    page = exporters.to_html_table(store.project(True), store.attributes.list(), use_outcomes=True)

    assert page.startswith("<!DOCTYPE html>")
    assert "<h2>Assessment Outcomes</h2>" in page
    assert page.count("<tr>") == 6
    assert "<script>alert" not in page
    assert "&lt;script&gt;" in page


def test_slides_group_rows_by_control(store: FrameworkStore) -> None:
    records = store.project()

    deck = exporters.to_html_slides(records, store.attributes.list())

    assert list(exporters.group_by_control(records)) == [
        "CIS Control 1: Inventory and Control of Enterprise Assets",
        "CIS Control 2: Inventory and Control of Software Assets",
    ]
    # title, overview, two control slides, attribute glossary
    assert deck.count('<div class="slide') == 5
    assert "Services (Operating Systems)" in deck
    assert "Percent in-scope assets covered" in deck


def test_dataframe_and_xlsx(store: FrameworkStore, tmp_path: Path) -> None:
    records, attributes = store.project(), store.attributes.list()
    df = exporters.to_dataframe(records, attributes)

    assert list(df.columns) == list(exporters.BASE_HEADERS) + [a.name for a in attributes]
    assert len(df) == 5

    path = tmp_path / "export.xlsx"
    exporters.write_xlsx(records, attributes, path)
    back = pd.read_excel(path, sheet_name="Measurement Methods", engine="openpyxl", dtype=str)
    assert back.loc[2, "Enforcement Point"] == "Network Access Control"


@pytest.mark.parametrize(
    "kind, use_outcomes, expected",
    [
        ("json", False, "CTRL_PaRFait_Export.json"),
        ("csv", True, "CTRL_PaRFait_Outcomes_Export.csv"),
        ("xlsx", False, "CTRL_PaRFait_Methods_Export.xlsx"),
        ("slides", True, "CTRL_PaRFait_Outcomes_Slides.html"),
    ],
)
def test_default_filenames(kind: str, use_outcomes: bool, expected: str) -> None:
    assert exporters.default_filename(kind, use_outcomes) == expected


def test_write_text_round_trips_utf8(tmp_path: Path) -> None:
    path = tmp_path / "out.html"

    exporters.write_text(path, "Größe")

    assert path.read_text(encoding="utf-8") == "Größe"
