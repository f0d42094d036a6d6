"""Tests for termsheet persistence: text codec and file save/load."""

from __future__ import annotations

from pathlib import Path

import pytest

import termsheet
from termsheet import IOStatus, Sheet, SheetConfig, deserialize, serialize
from termsheet._utils import rowcol_to_a1


def _make_sample() -> Sheet:
    """(0,0)=5, (3,2)==SUM(A1:A1)."""
    sheet = Sheet()
    sheet.set(0, 0, "5")
    sheet.set(3, 2, "=SUM(A1:A1)")
    return sheet


def _chain_text(length: int) -> str:
    """Row-major chain: each cell is the next one plus 1, the last holds 1."""
    coords = [(r, c) for r in range(100) for c in range(26)][:length]
    lines = [
        f"{r},{c},={rowcol_to_a1(nr, nc)}+1\n"
        for (r, c), (nr, nc) in zip(coords, coords[1:])
    ]
    last_r, last_c = coords[-1]
    lines.append(f"{last_r},{last_c},1\n")
    return "".join(lines)


class TestSerialize:
    def test_records_row_major(self) -> None:
        assert serialize(_make_sample()) == "0,0,5\n3,2,=SUM(A1:A1)\n"

    def test_empty_sheet(self) -> None:
        assert serialize(Sheet()) == ""

    def test_comma_in_content_written_verbatim(self) -> None:
        sheet = Sheet()
        sheet["A1"] = "a,b"
        assert serialize(sheet) == "0,0,a,b\n"


class TestDeserialize:
    def test_roundtrip(self) -> None:
        original = _make_sample()
        restored = Sheet()
        assert deserialize(serialize(original), restored) == 2
        assert restored.get(3, 2).cached_value == original.get(3, 2).cached_value == 5.0
        assert restored.get(0, 0).cached_value == 5.0
        assert restored.get(3, 2).content == "=SUM(A1:A1)"

    def test_formulas_evaluated_after_load(self) -> None:
        sheet = Sheet()
        deserialize("0,0,=B1*2\n0,1,21\n", sheet)
        cell = sheet.get(0, 0)
        assert cell.cached_value == 42.0
        assert cell.is_numeric
        assert not cell.dirty

    def test_comma_in_content_survives(self) -> None:
        sheet = Sheet()
        deserialize("0,0,a,b\n", sheet)
        assert sheet.content_of(0, 0) == "a,b"

    def test_malformed_lines_skipped_individually(self) -> None:
        text = "garbage\n1,1,7\nx,0,3\n0\n500,0,9\n2,2,=B2*2\n0,-1,4\n"
        sheet = Sheet()
        assert deserialize(text, sheet) == 2
        assert sheet.value_of(1, 1) == 7.0
        assert sheet.value_of(2, 2) == 14.0
        assert [(r, c) for r, c, _ in sheet.non_empty()] == [(1, 1), (2, 2)]

    @pytest.mark.parametrize("line", ["1_0,0,x", "+3,0,x", " 3,0,x", "3, 0,x", "-0,0,x"])
    def test_coordinates_must_be_plain_digits(self, line: str) -> None:
        sheet = Sheet()
        assert deserialize(line + "\n0,0,ok\n", sheet) == 1
        assert [(r, c) for r, c, _ in sheet.non_empty()] == [(0, 0)]

    def test_long_formula_chain(self) -> None:
        sheet = Sheet()
        assert deserialize(_chain_text(400), sheet) == 400
        assert sheet.value_of(0, 0) == 400.0
        assert sheet.display(0, 0) == "400.00"
        assert all(not cell.dirty for _, _, cell in sheet.iter_cells())

    def test_crlf_line_endings(self) -> None:
        sheet = Sheet()
        deserialize("0,0,5\r\n0,1,=A1+1\r\n", sheet)
        assert sheet.content_of(0, 0) == "5"
        assert sheet.value_of(0, 1) == 6.0

    def test_missing_trailing_newline(self) -> None:
        sheet = Sheet()
        deserialize("0,0,5", sheet)
        assert sheet.display(0, 0) == "5.00"

    def test_clears_existing_cells(self) -> None:
        sheet = Sheet()
        sheet["Z100"] = "old"
        deserialize("0,0,1\n", sheet)
        assert sheet.content_of(99, 25) == ""

    def test_later_record_wins(self) -> None:
        sheet = Sheet()
        deserialize("0,0,1\n0,0,2\n", sheet)
        assert sheet.value_of(0, 0) == 2.0

    def test_respects_grid_bounds(self) -> None:
        sheet = Sheet(SheetConfig(rows=2, cols=2))
        assert deserialize("1,1,x\n2,0,y\n0,2,z\n", sheet) == 1


class TestFileIO:
    def test_save_and_load(self, tmp_path: Path) -> None:
        path = tmp_path / "budget.sheet"
        status = _make_sample().save(path)
        assert status == IOStatus(True, f"Saved to {path}")
        assert path.read_text(encoding="utf-8") == "0,0,5\n3,2,=SUM(A1:A1)\n"

        restored = Sheet()
        status = restored.load(path)
        assert status.ok
        assert status.message == f"Loaded from {path}"
        assert restored.display(3, 2) == "5.00"

    def test_load_long_formula_chain(self, tmp_path: Path) -> None:
        path = tmp_path / "chain.sheet"
        path.write_text(_chain_text(400), encoding="utf-8")
        sheet = Sheet()
        status = sheet.load(path)
        assert status.ok
        assert sheet.value_of(0, 0) == 400.0
        assert sheet.value_of(15, 9) == 1.0

    def test_load_missing_file_keeps_state(self, tmp_path: Path) -> None:
        sheet = _make_sample()
        status = sheet.load(tmp_path / "missing.sheet")
        assert not status
        assert status.message == "Error: Could not load file!"
        assert sheet.content_of(0, 0) == "5"
        assert sheet.value_of(3, 2) == 5.0

    def test_load_undecodable_file(self, tmp_path: Path) -> None:
        path = tmp_path / "binary.sheet"
        path.write_bytes(b"\xff\xfe\x00garbage")
        sheet = _make_sample()
        assert not sheet.load(path).ok
        assert sheet.content_of(0, 0) == "5"

    def test_save_to_missing_directory(self, tmp_path: Path) -> None:
        path = tmp_path / "nope" / "out.sheet"
        status = _make_sample().save(path)
        assert status == IOStatus(False, "Error: Could not save file!")
        assert not path.exists()

    def test_load_failure_is_logged(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level("WARNING", logger="termsheet._codec"):
            Sheet().load(tmp_path / "missing.sheet")
        assert "Could not load" in caplog.text

    def test_load_sheet_helper(self, tmp_path: Path) -> None:
        path = tmp_path / "s.sheet"
        path.write_text("0,0,3\n1,0,=A1*A1\n", encoding="utf-8")
        sheet, status = termsheet.load_sheet(path)
        assert status.ok
        assert sheet.value_of(1, 0) == 9.0

    def test_load_sheet_helper_missing(self, tmp_path: Path) -> None:
        sheet, status = termsheet.load_sheet(tmp_path / "missing.sheet")
        assert not status.ok
        assert list(sheet.non_empty()) == []
