# gradewatch/scale.py
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

NOT_AVAILABLE = "N/A"


@dataclass(frozen=True)
class GradeScaleTier:
    minpercent: float
    lettergrade: str
    colour: Optional[str] = None


DEFAULT_SCALE: List[GradeScaleTier] = [
    GradeScaleTier(90, "A", "green"),
    GradeScaleTier(80, "B", "cyan"),
    GradeScaleTier(70, "C", "yellow"),
    GradeScaleTier(60, "D", "magenta"),
    GradeScaleTier(0, "F", "red"),
]


def as_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(number) else number


def parse_scale(raw: Iterable[Dict[str, Any]]) -> List[GradeScaleTier]:
    """Build tiers from config entries, dropping any without a numeric threshold."""
    tiers = []
    for entry in raw or []:
        if not isinstance(entry, dict):
            continue
        minpercent = as_number(entry.get("minpercent"))
        if minpercent is None:
            continue
        tiers.append(GradeScaleTier(minpercent, str(entry.get("lettergrade") or ""), entry.get("colour")))
    return tiers


def sorted_scale(scale: Iterable[GradeScaleTier]) -> List[GradeScaleTier]:
    """Highest threshold first."""
    return sorted(scale, key=lambda tier: tier.minpercent, reverse=True)


def find_tier(score: Any, scale: Iterable[GradeScaleTier]) -> Optional[GradeScaleTier]:
    number = as_number(score)
    if number is None:
        return None
    for tier in sorted_scale(scale):
        if number >= tier.minpercent:
            return tier
    return None


def letter_grade(score: Any, scale: Iterable[GradeScaleTier]) -> str:
    tier = find_tier(score, scale)
    return tier.lettergrade if tier else NOT_AVAILABLE
