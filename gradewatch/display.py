# gradewatch/display.py
from __future__ import annotations

import re
from typing import Any, Dict, Iterable, Optional, Sequence

from rich.console import Console
from rich.errors import StyleSyntaxError
from rich.style import Style
from rich.table import Table
from rich.text import Text

from gradewatch.models import GradeRecord
from gradewatch.scale import GradeScaleTier, NOT_AVAILABLE, sorted_scale, as_number

# Colour names used in config.json that rich spells differently.
STYLE_ALIASES: Dict[str, str] = {"gray": "bright_black", "bright": "bold"}

LETTER_DEFAULTS = (("A", "green"), ("B", "cyan"), ("C", "yellow"), ("D", "magenta"), ("F", "red"))
PERCENT_DEFAULTS = ((97, "bright"), (90, "green"), (80, "cyan"), (70, "yellow"), (60, "magenta"))

COURSE_HEADER = "Course (Uses Nicknames)"

# ESC may arrive decoded or as a literal escape written into config.json.
_ANSI = re.compile(r"(?:\x1b|\\u001b|\\x1b|\\033)\[([0-9;]*)m")
_SGR_COLOURS = ("black", "red", "green", "yellow", "blue", "magenta", "cyan", "white")


def colour_for_letter(letter: Optional[str], scale: Sequence[GradeScaleTier]) -> str:
    if not letter:
        return "white"
    normalized = str(letter).upper()
    for tier in scale:
        if tier.lettergrade and tier.lettergrade.upper().startswith(normalized) and tier.colour:
            return tier.colour
    for prefix, colour in LETTER_DEFAULTS:
        if normalized.startswith(prefix):
            return colour
    return "white"


def colour_for_percent(score: Optional[str], scale: Sequence[GradeScaleTier]) -> str:
    number = as_number(str(score).rstrip("%")) if score is not None else None
    if number is None:
        return "white"
    if scale:
        for tier in sorted_scale(scale):
            if number >= tier.minpercent:
                if tier.colour:
                    return tier.colour
                if tier.lettergrade:
                    return colour_for_letter(tier.lettergrade, scale)
        return "white"
    for threshold, colour in PERCENT_DEFAULTS:
        if number >= threshold:
            return colour
    return "red"


def ansi_to_style(value: str) -> str:
    """Rich style for an ANSI SGR sequence such as "\\u001b[1;32m".

    Values without an escape sequence are already style names and pass
    through unchanged.
    """
    matches = list(_ANSI.finditer(value))
    if not matches:
        return value
    words = []
    for m in matches:
        for code in (m.group(1) or "0").split(";"):
            n = int(code) if code.isdigit() else 0
            if n == 1:
                words.append("bold")
            elif 30 <= n <= 37:
                words.append(_SGR_COLOURS[n - 30])
            elif 90 <= n <= 97:
                words.append("bright_" + _SGR_COLOURS[n - 90])
    return " ".join(words) or "none"


def normalize_colors(raw: Dict[str, Any]) -> Dict[str, str]:
    """Map config colour names to rich styles, raising ValueError on anything unusable."""
    colors = {}
    for name, value in (raw or {}).items():
        if not isinstance(value, str):
            raise ValueError(f"colour {name!r} must be a string, got {value!r}")
        colors[name] = ansi_to_style(value)
    return colors


def resolve_style(colour: str, colors: Dict[str, str]) -> str:
    if colour in colors:
        return colors[colour]
    return STYLE_ALIASES.get(colour, colour)


def check_style(colour: str, colors: Dict[str, str]) -> None:
    try:
        Style.parse(resolve_style(colour, colors))
    except StyleSyntaxError as e:
        raise ValueError(f"unknown colour {colour!r}: {e}") from None


def build_table(
    grades: Sequence[GradeRecord],
    scale: Sequence[GradeScaleTier],
    colors: Optional[Dict[str, str]] = None,
    show_names: bool = True,
) -> Table:
    colors = colors or {}
    table = Table(show_lines=False)
    if show_names:
        table.add_column("Student")
    table.add_column(COURSE_HEADER)
    table.add_column("Grade")
    table.add_column("Score")

    for grade in grades:
        letter = grade.current_grade or NOT_AVAILABLE
        score = grade.current_score if grade.current_score is not None else NOT_AVAILABLE
        cells = [grade.student_name or ""] if show_names else []
        cells.append(grade.course_name or "")
        cells.append(Text(letter, style=resolve_style(colour_for_letter(grade.current_grade, scale), colors)))
        cells.append(Text(score, style=resolve_style(colour_for_percent(grade.current_score, scale), colors)))
        table.add_row(*cells)
    return table


def display_grades(
    grades: Iterable[GradeRecord],
    scale: Sequence[GradeScaleTier],
    term: str,
    colors: Optional[Dict[str, str]] = None,
    show_names: bool = True,
    console: Optional[Console] = None,
) -> None:
    console = console or Console()
    grades = list(grades)
    if not grades:
        console.print(f"No grades to display for {term}.", markup=False)
        return

    if not show_names:
        student = grades[0].student_name or "Unknown Student"
        console.print(Text(f"Student: {student}", style=resolve_style("cyan", colors or {})))
        console.print()

    console.print(build_table(grades, scale, colors, show_names))
