"""Tests for the terminal grade table."""

from __future__ import annotations

from rich.console import Console

from gradewatch.display import ansi_to_style, build_table, colour_for_letter, colour_for_percent, display_grades, \
    normalize_colors
from gradewatch.models import GradeRecord
from gradewatch.scale import GradeScaleTier

SCALE = [GradeScaleTier(90, "A", "green"), GradeScaleTier(80, "B"), GradeScaleTier(0, "F", "red")]

GRADES = [
    GradeRecord("Ada Student", 42, "Biology", 1, "93.5%", "A", None),
    GradeRecord("Ada Student", 42, "Algebra II", 2, "null%", "N/A", None),
]


def console() -> Console:
    return Console(record=True, width=120, force_terminal=False)


def test_colour_for_letter() -> None:
    assert colour_for_letter("A", SCALE) == "green"
    assert colour_for_letter("b", SCALE) == "cyan"
    assert colour_for_letter("D", []) == "magenta"
    assert colour_for_letter("N/A", SCALE) == "white"
    assert colour_for_letter(None, SCALE) == "white"


def test_colour_for_percent() -> None:
    assert colour_for_percent("93.5%", SCALE) == "green"
    assert colour_for_percent("85%", SCALE) == "cyan"
    assert colour_for_percent("12%", SCALE) == "red"
    assert colour_for_percent("null%", SCALE) == "white"
    assert colour_for_percent("98%", []) == "bright"
    assert colour_for_percent("40%", []) == "red"


def test_table_columns() -> None:
    table = build_table(GRADES, SCALE)
    assert [c.header for c in table.columns] == ["Student", "Course (Uses Nicknames)", "Grade", "Score"]
    assert table.row_count == 2

    table = build_table(GRADES, SCALE, show_names=False)
    assert [c.header for c in table.columns] == ["Course (Uses Nicknames)", "Grade", "Score"]


def test_display_grades() -> None:
    out = console()
    display_grades(GRADES, SCALE, term="Term 2", console=out)
    text = out.export_text()

    assert "Biology" in text
    assert "93.5%" in text
    assert "null%" in text
    assert "Ada Student" in text


def test_banner_when_names_are_hidden() -> None:
    out = console()
    display_grades(GRADES, SCALE, term="Term 2", show_names=False, console=out)
    assert out.export_text().startswith("Student: Ada Student")


def test_nothing_to_show() -> None:
    out = console()
    display_grades([], SCALE, term="Term 3", console=out)
    assert out.export_text().strip() == "No grades to display for Term 3."


def test_ansi_to_style() -> None:
    assert ansi_to_style("\x1b[32m") == "green"
    assert ansi_to_style("\\u001b[1;96m") == "bold bright_cyan"
    assert ansi_to_style("\x1b[0m") == "none"
    assert ansi_to_style("bold magenta") == "bold magenta"


def test_translated_colours_render() -> None:
    out = console()
    display_grades(GRADES, SCALE, term="Term 2", colors=normalize_colors({"green": "\x1b[32m"}), console=out)
    assert "93.5%" in out.export_text()
