"""Renderers for the flat export records: JSON, CSV, printable HTML, slides and XLSX."""

from __future__ import annotations

import html
import json
from pathlib import Path
from typing import TYPE_CHECKING, Dict, List, Sequence, Union

import pandas as pd

from .models import Attribute, FlatRecord

if TYPE_CHECKING:
    from .store import FrameworkStore

FRAMEWORK_TITLE = "Control Performance and Reliability Framework (CTRL_PaRFait)"
FILE_PREFIX = "CTRL_PaRFait"

BASE_HEADERS = (
    "Control",
    "Safeguard",
    "Asset Type",
    "Asset Class",
    "Asset Subclass",
    "Enforcement Point",
)

METHODS_DESCRIPTION = (
    "A framework to maintain the Tools, Techniques, Procedures used to measure and "
    "monitor the performance and reliability of security controls."
)
OUTCOMES_DESCRIPTION = (
    "Sample output from point in time assessment of control performance and reliability "
    "demonstrating the outcome of the measurements taken using the TTPs defined in the framework."
)


def mode_title(use_outcomes: bool) -> str:
    return "Assessment Outcomes" if use_outcomes else "Measurement Methods"


def mode_description(use_outcomes: bool) -> str:
    return OUTCOMES_DESCRIPTION if use_outcomes else METHODS_DESCRIPTION


def default_filename(kind: str, use_outcomes: bool = False) -> str:
    """Suggested file name for an export of ``kind`` (json, csv, pdf, slides, xlsx)."""
    if kind == "json":
        return f"{FILE_PREFIX}_Export.json"
    mode = "Outcomes" if use_outcomes else "Methods"
    suffix = {"csv": "csv", "xlsx": "xlsx", "pdf": "html", "slides": "html"}[kind]
    label = "Slides" if kind == "slides" else "Export"
    return f"{FILE_PREFIX}_{mode}_{label}.{suffix}"


def _row_values(record: FlatRecord, attributes: Sequence[Attribute]) -> List[str]:
    return [
        record.control,
        record.safeguard,
        record.asset_type,
        record.asset_class,
        record.asset_subclass,
        record.enforcement_point,
    ] + [record.values.get(attr.name, "") for attr in attributes]


# ----- JSON / CSV -----
def to_json(store: "FrameworkStore") -> str:
    payload = {
        "methods": [r.as_dict() for r in store.project(use_outcomes=False)],
        "outcomes": [r.as_dict() for r in store.project(use_outcomes=True)],
    }
    return json.dumps(payload, indent=2, ensure_ascii=False)


def to_csv(records: Sequence[FlatRecord], attributes: Sequence[Attribute]) -> str:
    """Header row unquoted, every value double-quoted (embedded quotes doubled)."""
    lines = [",".join(list(BASE_HEADERS) + [attr.name for attr in attributes])]
    for record in records:
        lines.append(",".join(_quote(value) for value in _row_values(record, attributes)))
    return "\n".join(lines)


def _quote(value: str) -> str:
    return '"' + value.replace('"', '""') + '"'


# ----- HTML -----
def _esc(x: object) -> str:
    return html.escape("" if x is None else str(x))


_PAGE_CSS = """
    body { font-family: Arial, sans-serif; margin: 20px; }
    h1 { color: #333; }
    h2 { color: #555; margin-top: 30px; }
    table { border-collapse: collapse; width: 100%; margin-top: 20px; }
    th, td { border: 1px solid #ddd; padding: 8px; text-align: left; }
    th { background-color: #f2f2f2; }
    .description { color: #666; margin-bottom: 20px; }
    @media print { .no-print { display: none; } body { margin: 0; } }
"""

_SLIDES_CSS = """
    body { font-family: Arial, sans-serif; margin: 0; padding: 0; }
    .slide { page-break-after: always; height: 100vh; padding: 40px; box-sizing: border-box; display: flex; flex-direction: column; }
    .slide-title { font-size: 24px; margin-bottom: 20px; }
    table { border-collapse: collapse; width: 100%; margin-top: 10px; font-size: 14px; }
    th, td { border: 1px solid #ddd; padding: 6px; text-align: left; }
    th { background-color: #f2f2f2; }
    .title-slide { justify-content: center; align-items: center; text-align: center; }
    .title-slide h1 { font-size: 36px; margin-bottom: 20px; }
    .title-slide p { font-size: 18px; color: #666; max-width: 80%; line-height: 1.5; }
    .controls-slide li { font-size: 18px; margin-bottom: 10px; }
    .no-print { position: fixed; top: 10px; right: 10px; }
    @media print { .no-print { display: none; } }
"""

_PRINT_HINT = (
    '<div class="no-print">'
    '<button onclick="window.print()">Print as PDF</button>'
    "<p>To save as PDF, use your browser's print function and select "
    '"Save as PDF" as the destination.</p></div>'
)


def _document(title: str, css: str, body: str) -> str:
    return (
        "<!DOCTYPE html>\n<html>\n<head>\n<meta charset='utf-8'>\n"
        f"<title>{_esc(title)}</title>\n<style>{css}</style>\n</head>\n"
        f"<body>\n{body}\n</body>\n</html>\n"
    )


def _table(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
    head = "".join(f"<th>{_esc(h)}</th>" for h in headers)
    body = "".join(
        "<tr>" + "".join(f"<td>{_esc(cell)}</td>" for cell in row) + "</tr>\n" for row in rows
    )
    return f"<table>\n<thead><tr>{head}</tr></thead>\n<tbody>\n{body}</tbody>\n</table>"


def to_html_table(
    records: Sequence[FlatRecord],
    attributes: Sequence[Attribute],
    use_outcomes: bool = False,
) -> str:
    """Printable single-table page (the browser's print dialog produces the PDF)."""
    title = mode_title(use_outcomes)
    headers = list(BASE_HEADERS) + [attr.name for attr in attributes]
    body = "\n".join([
        _PRINT_HINT,
        f"<h1>{_esc(FRAMEWORK_TITLE)}</h1>",
        f'<p class="description">{_esc(mode_description(use_outcomes))}</p>',
        f"<h2>{_esc(title)}</h2>",
        _table(headers, [_row_values(r, attributes) for r in records]),
    ])
    return _document(f"{FILE_PREFIX} {title} Export", _PAGE_CSS, body)


def group_by_control(records: Sequence[FlatRecord]) -> Dict[str, List[FlatRecord]]:
    groups: Dict[str, List[FlatRecord]] = {}
    for record in records:
        groups.setdefault(record.control, []).append(record)
    return groups


def to_html_slides(
    records: Sequence[FlatRecord],
    attributes: Sequence[Attribute],
    use_outcomes: bool = False,
) -> str:
    """Slide deck: title, controls overview, one slide per control, attribute glossary."""
    title = mode_title(use_outcomes)
    groups = group_by_control(records)
    attr_names = [attr.name for attr in attributes]

    slides = [
        '<div class="slide title-slide">'
        f"<h1>{_esc(FRAMEWORK_TITLE)}</h1><h2>{_esc(title)}</h2>"
        f"<p>{_esc(mode_description(use_outcomes))}</p></div>",
        '<div class="slide controls-slide"><h2 class="slide-title">CIS Controls Overview</h2><ul>'
        + "".join(f"<li>{_esc(control)}</li>" for control in groups)
        + "</ul></div>",
    ]
    headers = ["Safeguard", "Asset Type", "Asset Class/Subclass", "Enforcement Point"] + attr_names
    for control, rows in groups.items():
        table_rows = [
            [
                r.safeguard,
                r.asset_type,
                _asset_cell(r),
                r.enforcement_point,
            ] + [r.values.get(name, "") for name in attr_names]
            for r in rows
        ]
        slides.append(
            f'<div class="slide"><h2 class="slide-title">{_esc(control)}</h2>'
            f"{_table(headers, table_rows)}</div>"
        )
    slides.append(
        '<div class="slide"><h2 class="slide-title">Attributes Explanation</h2>'
        + _table(["Attribute", "Description"], [[a.name, a.tooltip] for a in attributes])
        + "</div>"
    )
    return _document(f"{FILE_PREFIX} {title} Slides", _SLIDES_CSS, "\n".join([_PRINT_HINT] + slides))


def _asset_cell(record: FlatRecord) -> str:
    if record.asset_subclass and record.asset_class:
        return f"{record.asset_subclass} ({record.asset_class})"
    return record.asset_subclass or record.asset_class


# ----- spreadsheet -----
def to_dataframe(records: Sequence[FlatRecord], attributes: Sequence[Attribute]) -> pd.DataFrame:
    columns = list(BASE_HEADERS) + [attr.name for attr in attributes]
    return pd.DataFrame([_row_values(r, attributes) for r in records], columns=columns)


def write_xlsx(
    records: Sequence[FlatRecord],
    attributes: Sequence[Attribute],
    path: Union[str, Path],
    use_outcomes: bool = False,
) -> None:
    df = to_dataframe(records, attributes)
    df.to_excel(path, sheet_name=mode_title(use_outcomes), index=False, engine="openpyxl")


def write_text(path: Union[str, Path], text: str) -> None:
    with open(path, "w", encoding="utf-8") as f:
        f.write(text)
