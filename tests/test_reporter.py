import io

import pytest

from padring_report.geometry import ItemKind, PlacedItem, RingAssembly, Side
from padring_report.library import CellRecord, Diagnostic, Library, Severity
from padring_report.reporter import PinReport, ReportWriter, generate_summary, write_report

PAD = CellRecord(name="PAD_IN", width=2.0, height=1.0)
BOND = CellRecord(name="BOND", width=1.0, height=1.0)

HEADER = (
    "Back to Index,\n"
    ",Pin Assignment (chip),\n"
    ",\n"
    ",,,,,Pin Name,\n"
    ",List,Pin No.,Pin Assign,Association,I/O name,I/O Cell,-,Bond Name,Bond Cell,x,y,rotation,cx,cy,\n"
)


def _cell(name, location="S", x=0.0, y=0.0, kind=ItemKind.CELL):
    cell = BOND if kind is ItemKind.BOND else PAD
    return PlacedItem(kind=kind, location=location, x=x, y=y, cell=cell, instance=name, cell_name=cell.name)


def _bond(name, ref=None, location="S", x=0.0, y=0.0):
    item = _cell(name, location, x, y, kind=ItemKind.BOND)
    item.ref = ref
    return item


def test_single_cell_row():
    report = PinReport()
    row = report.resolve_item(_cell("u0"), Side.SOUTH)
    assert row.to_csv() == ",SOUTH,1,I/O,NONE,u0,PAD_IN,-,u0,PAD_IN,0,0,S,1,0.5,"


def test_north_row_uses_offset_position():
    report = PinReport()
    row = report.resolve_item(_cell("u0", location="N", x=10.0, y=100.0), Side.NORTH)
    assert row.to_csv() == ",NORTH,1,I/O,NONE,u0,PAD_IN,-,u0,PAD_IN,12,100,N,11,99.5,"


def test_non_reported_kinds_are_skipped():
    report = PinReport()
    for kind in (ItemKind.CORNER, ItemKind.FILLER, ItemKind.SPACE):
        assert report.resolve_item(_cell("x", kind=kind), Side.SOUTH) is None
    assert report.rows == []
    assert report.counter == 0


def test_sequence_numbers_never_reset_between_sides():
    def side(prefix, n):
        return [_cell(f"{prefix}{i}") for i in range(n)]

    ring = RingAssembly(design_name="chip", south=side("s", 2), east=side("e", 3), north=side("n", 1), west=side("w", 4))
    report = PinReport()
    report.resolve(ring)
    assert [r.seq for r in report.rows] == list(range(1, 11))
    assert [r.side for r in report.rows] == (
        [Side.SOUTH] * 2 + [Side.EAST] * 3 + [Side.NORTH] + [Side.WEST] * 4
    )


def test_rows_follow_perimeter_walk():
    ring = RingAssembly(
        design_name="chip",
        south=[_cell("a"), _cell("b")],
        east=[_cell("c")],
        north=[_cell("d"), _cell("e")],
        west=[_cell("f"), _cell("g"), _cell("h")],
    )
    report = PinReport()
    report.resolve(ring)
    assert [r.bond_instance for r in report.rows] == list("abcedhgf")


def test_cell_with_bond_is_reported_through_its_bond():
    pad = _cell("u_pad")
    pad.has_bond = True
    bond = _bond("b0", ref=pad, x=5.0)
    ring = RingAssembly(design_name="chip", south=[pad, bond])

    report = PinReport()
    report.resolve(ring)

    assert len(report.rows) == 1
    row = report.rows[0]
    assert (row.assoc_instance, row.assoc_cell) == ("u_pad", "PAD_IN")
    assert (row.bond_instance, row.bond_cell) == ("b0", "BOND")
    assert row.x == 5.0


def test_bond_without_ref_associates_with_itself():
    report = PinReport()
    row = report.resolve_item(_bond("b1"), Side.EAST)
    assert (row.assoc_instance, row.assoc_cell) == ("b1", "BOND")
    assert (row.bond_instance, row.bond_cell) == ("b1", "BOND")


def test_last_design_name_wins():
    report = PinReport()
    assert report.design_name == "No Name"
    report.resolve(RingAssembly(design_name="first", south=[_cell("a")]))
    report.resolve(RingAssembly(design_name="second", south=[_cell("b")]))
    assert report.design_name == "second"
    assert [r.seq for r in report.rows] == [1, 2]


def test_sessions_are_independent():
    ring = RingAssembly(design_name="chip", south=[_cell("a")])
    first, second = PinReport(), PinReport()
    first.resolve(ring)
    second.resolve(ring)
    assert first.rows[0].seq == second.rows[0].seq == 1


def test_writer_emits_header_before_rows_on_exit():
    stream = io.StringIO()
    with ReportWriter(stream) as writer:
        writer.resolve(RingAssembly(design_name="chip", south=[_cell("a")]))
        assert stream.getvalue() == ""

    assert stream.getvalue() == HEADER + ",SOUTH,1,I/O,NONE,a,PAD_IN,-,a,PAD_IN,0,0,S,1,0.5,\n"


def test_writer_without_ring_uses_default_name():
    stream = io.StringIO()
    with ReportWriter(stream):
        pass
    assert stream.getvalue().splitlines()[1] == ",Pin Assignment (No Name),"


def test_write_report_to_file(tmp_path):
    path = tmp_path / "pins.csv"
    ring = RingAssembly(design_name="chip", east=[_cell("a", location="E")], west=[_cell("b", location="W")])

    report = write_report(ring, path)

    lines = path.read_text().splitlines()
    assert len(lines) == 5 + 2
    assert lines[5] == ",EAST,1,I/O,NONE,a,PAD_IN,-,a,PAD_IN,0,0,E,-0.5,1,"
    assert lines[6] == ",WEST,2,I/O,NONE,b,PAD_IN,-,b,PAD_IN,0,2,W,0.5,1,"
    assert len(report.rows) == 2


def test_summary_counts():
    lib = Library(cells={"PAD_IN": PAD, "FILL": CellRecord(name="FILL", width=1, height=1, is_filler=True)})
    lib.units_per_micron = 1000.0
    report = PinReport()
    report.resolve(RingAssembly(design_name="chip", south=[_cell("a")], west=[_cell("b")]))
    diags = [Diagnostic(Severity.ERROR, "bad"), Diagnostic(Severity.WARNING, "meh"), Diagnostic(Severity.WARNING, "meh")]

    text = generate_summary(lib, report, diags)

    assert "  - Cells: 2" in text
    assert "  - Filler Cells: 1" in text
    assert "  - Database Units: 1000 per micron" in text
    assert "** Pin Assignment (chip) **" in text
    assert "  - Rows: 2" in text
    assert "  - South: 1" in text
    assert "  - East: 0" in text
    assert "  - West: 1" in text
    assert "  - Errors: 1" in text
    assert "  - Warnings: 2" in text


def test_writer_writes_nothing_when_block_raises():
    stream = io.StringIO()
    with pytest.raises(RuntimeError):
        with ReportWriter(stream) as writer:
            writer.resolve(RingAssembly(design_name="chip", south=[_cell("a")]))
            raise RuntimeError("placement failed")
    assert stream.getvalue() == ""


def test_unreported_kinds_need_no_cell():
    spacer = _cell("gap", kind=ItemKind.SPACE)
    spacer.cell = None
    report = PinReport()
    report.resolve(RingAssembly(design_name="chip", south=[spacer, _cell("a")]))
    assert [r.bond_instance for r in report.rows] == ["a"]
