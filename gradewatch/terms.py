# gradewatch/terms.py
"""Grading-period resolution.

Canvas grading-period data is dated inconsistently: bounds go missing, are
left over from earlier school years, or fail to parse. Resolution therefore
runs in tiers: exact title match, then date activity, then a configurable
static fallback. Unparseable dates are read as open bounds; nothing here
raises on bad dates.
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from utils.dates import parse_date_safe

logger = logging.getLogger(__name__)


class FallbackPolicy(str, enum.Enum):
    END_DATE = "end-date"
    NAME_SORT = "name-sort"


@dataclass(frozen=True)
class GradingPeriod:
    id: Any
    title: str
    start_date: Optional[str] = None
    end_date: Optional[str] = None

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> "GradingPeriod":
        return cls(
            id=raw.get("id"),
            title=raw.get("title") or "",
            start_date=raw.get("start_date"),
            end_date=raw.get("end_date"),
        )

    @property
    def window(self) -> "DateWindow":
        return DateWindow.parse(self.start_date, self.end_date)


@dataclass(frozen=True)
class DateWindow:
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    @classmethod
    def parse(cls, start: Any, end: Any) -> "DateWindow":
        return cls(parse_date_safe(start), parse_date_safe(end))

    def contains(self, now: datetime) -> bool:
        started = self.start is None or self.start <= now
        not_ended = self.end is None or self.end >= now
        return started and not_ended

    # Open bounds sort as the epoch.
    @property
    def start_ts(self) -> float:
        return self.start.timestamp() if self.start else 0.0

    @property
    def end_ts(self) -> float:
        return self.end.timestamp() if self.end else 0.0


def active_periods(periods: Iterable[GradingPeriod], now: datetime) -> List[GradingPeriod]:
    return [gp for gp in periods if gp.window.contains(now)]


def newest(periods: Sequence[GradingPeriod]) -> GradingPeriod:
    """Most recently started period, then most recently ending; first wins a full tie."""
    return sorted(periods, key=lambda gp: (-gp.window.start_ts, -gp.window.end_ts))[0]


def select_grading_period(
    periods: Sequence[GradingPeriod],
    term_label: str,
    now: datetime,
    policy: FallbackPolicy = FallbackPolicy.END_DATE,
) -> Optional[GradingPeriod]:
    matching = [gp for gp in periods if gp.title == term_label]
    if not matching:
        logger.debug("No grading periods titled %r", term_label)
        return None

    active = active_periods(matching, now)
    if active:
        chosen = newest(active)
        logger.info("Fetching & Processing Year Data for %s (date-prioritized)", chosen.title)
        return chosen

    if policy is FallbackPolicy.NAME_SORT:
        chosen = sorted(matching, key=lambda gp: (gp.title or "").casefold())[0]
    else:
        chosen = sorted(matching, key=lambda gp: -gp.window.end_ts)[0]
    logger.info("Fetching & Processing Year Data for %s (%s-fallback)", chosen.title, policy.value)
    logger.debug("Fallback selection: %s", chosen)
    return chosen


def detect_override(
    periods: Sequence[GradingPeriod],
    configured_label: str,
    now: datetime,
) -> Optional[str]:
    """Title of the newest date-active period of any name, or None."""
    active = active_periods(periods, now)
    if not active:
        return None
    chosen = newest(active)
    if chosen.title:
        logger.info(
            'Date-based override detected. Using grading term: "%s" instead of configured "%s".',
            chosen.title, configured_label,
        )
        logger.debug("Detected active grading period (used to set override): %s", chosen)
    return chosen.title or None


def resolve_course_term(
    periods: Sequence[GradingPeriod],
    override: Optional[str],
    configured_label: str,
    now: datetime,
    policy: FallbackPolicy = FallbackPolicy.END_DATE,
) -> Tuple[Optional[str], Optional[GradingPeriod]]:
    """One step of the per-course resolution.

    Returns the override to carry into the next course together with the
    period selected for this one. An override, once found, is passed
    through unchanged.
    """
    if not override and periods:
        override = detect_override(periods, configured_label, now)
    label = override or configured_label
    return override, select_grading_period(periods, label, now, policy)
