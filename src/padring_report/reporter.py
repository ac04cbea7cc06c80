"""Pin assignment report for a resolved padring, plus an ASCII run summary."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import TextIO

from padring_report.geometry import ItemKind, PlacedItem, RingAssembly, Side, resolve_footprint
from padring_report.library import Diagnostic, Library, Severity

HEADER_LINES = (
    "Back to Index,",
    ",Pin Assignment ({design}),",
    ",",
    ",,,,,Pin Name,",
    ",List,Pin No.,Pin Assign,Association,I/O name,I/O Cell,-,Bond Name,Bond Cell,x,y,rotation,cx,cy,",
)


def _fmt(value: float) -> str:
    return f"{value:g}"


@dataclass
class ReportRow:
    seq: int
    side: Side
    assoc_instance: str
    assoc_cell: str
    bond_instance: str
    bond_cell: str
    x: float
    y: float
    location: str
    cx: float
    cy: float

    def to_csv(self) -> str:
        # Names are written verbatim; a comma in a name shifts the columns.
        fields = [
            "",
            self.side.value,
            str(self.seq),
            "I/O",
            "NONE",
            self.assoc_instance,
            self.assoc_cell,
            "-",
            self.bond_instance,
            self.bond_cell,
            _fmt(self.x),
            _fmt(self.y),
            self.location,
            _fmt(self.cx),
            _fmt(self.cy),
        ]
        return ",".join(fields) + ","


@dataclass
class PinReport:
    """Rows of one report run; the sequence counter never resets between sides."""

    design_name: str = "No Name"
    rows: list[ReportRow] = field(default_factory=list)
    counter: int = 0

    def resolve(self, ring: RingAssembly) -> None:
        for side, item in ring.walk():
            self.resolve_item(item, side)
        self.design_name = ring.design_name

    def resolve_item(self, item: PlacedItem, side: Side) -> ReportRow | None:
        if item.kind not in (ItemKind.CELL, ItemKind.BOND):
            return None

        footprint = resolve_footprint(item)

        if item.kind is ItemKind.CELL:
            if item.has_bond:
                # The paired bond item reports this pad.
                return None
            assoc = item
        else:
            assoc = item.ref if item.ref is not None else item

        self.counter += 1
        row = ReportRow(
            seq=self.counter,
            side=side,
            assoc_instance=assoc.instance,
            assoc_cell=assoc.cell_name,
            bond_instance=item.instance,
            bond_cell=item.cell_name,
            x=footprint.position.x,
            y=footprint.position.y,
            location=item.location,
            cx=footprint.centroid.x,
            cy=footprint.centroid.y,
        )
        self.rows.append(row)
        return row

    def header(self) -> str:
        return "".join(line.format(design=self.design_name) + "\n" for line in HEADER_LINES)

    def render(self) -> str:
        return self.header() + "".join(row.to_csv() + "\n" for row in self.rows)


class ReportWriter:
    """Write a pin report to ``stream`` when the ``with`` block ends.

    Rows are computed as soon as ``resolve`` is called, but the header
    (which names the design) is only known at the end, so nothing is
    written until exit. Nothing is written if the block raised.
    """

    def __init__(self, stream: TextIO) -> None:
        self.stream = stream
        self.report = PinReport()

    def resolve(self, ring: RingAssembly) -> None:
        self.report.resolve(ring)

    def __enter__(self) -> ReportWriter:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stream.flush()
        if exc_type is None:
            self.stream.write(self.report.render())


def write_report(ring: RingAssembly, path: str | Path) -> PinReport:
    """Resolve ``ring`` and write its report to ``path``."""
    with open(path, "w", newline="") as f, ReportWriter(f) as writer:
        writer.resolve(ring)
    return writer.report


def generate_summary(library: Library, report: PinReport, diagnostics: list[Diagnostic]) -> str:
    """Generates a short multi-line ASCII summary of a report run."""
    lines = [
        "--- Padring Report Summary ---",
        "",
        "** Library **",
        f"  - Cells: {len(library)}",
        f"  - Filler Cells: {len(library.fillers())}",
        f"  - Database Units: {_fmt(library.units_per_micron)} per micron",
        "",
        f"** Pin Assignment ({report.design_name}) **",
        f"  - Rows: {len(report.rows)}",
    ]

    per_side = Counter(row.side for row in report.rows)
    for side in Side:
        lines.append(f"  - {side.value.title()}: {per_side[side]}")
    lines.append("")

    severities = Counter(d.severity for d in diagnostics)
    lines.append("** Diagnostics **")
    lines.append(f"  - Errors: {severities[Severity.ERROR]}")
    lines.append(f"  - Warnings: {severities[Severity.WARNING]}")

    lines.append("\n--- End of Summary ---")
    return "\n".join(lines)
