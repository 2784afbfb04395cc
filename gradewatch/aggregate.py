# gradewatch/aggregate.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Sequence

from gradewatch.models import GradeRecord, StudentProfile
from gradewatch.scale import GradeScaleTier, letter_grade
from gradewatch.terms import FallbackPolicy, GradingPeriod, resolve_course_term

logger = logging.getLogger(__name__)

FetchGradingPeriods = Callable[[Dict[str, Any]], Awaitable[Sequence[GradingPeriod]]]
FetchEnrollments = Callable[[Any, Any, Any], Awaitable[Sequence[Dict[str, Any]]]]

_ABSENT = object()


def format_score(grades: Dict[str, Any]) -> str:
    """Raw current_score with a "%" suffix.

    Missing and null scores are not special-cased: they come out as
    "undefined%" and "null%", matching snapshots already in the store.
    """
    score = grades.get("current_score", _ABSENT)
    if score is _ABSENT:
        return "undefined%"
    if score is None:
        return "null%"
    if isinstance(score, float) and score.is_integer():
        score = int(score)
    return f"{score}%"


def build_record(
    profile: StudentProfile,
    course: Dict[str, Any],
    enrollment: Dict[str, Any],
    scale: Iterable[GradeScaleTier],
) -> GradeRecord:
    grades = enrollment.get("grades")
    if not isinstance(grades, dict):
        grades = {}
    return GradeRecord(
        student_name=profile.name,
        student_id=profile.id,
        course_name=course.get("name"),
        course_id=course.get("id"),
        current_score=format_score(grades),
        current_grade=letter_grade(grades.get("current_score"), scale),
        last_activity=enrollment.get("last_activity_at"),
    )


async def aggregate_grades(
    courses: Iterable[Dict[str, Any]],
    fetch_enrollments: FetchEnrollments,
    fetch_grading_periods: FetchGradingPeriods,
    profile: StudentProfile,
    configured_label: str,
    scale: Sequence[GradeScaleTier],
    policy: FallbackPolicy,
    now: datetime,
) -> List[GradeRecord]:
    """One GradeRecord per course with an enrollment in the resolved period.

    Courses are fetched strictly one after another. Any fetch error aborts
    the whole run.
    """
    records: List[GradeRecord] = []
    override: Optional[str] = None

    for course in courses:
        periods = await fetch_grading_periods(course)
        override, period = resolve_course_term(periods, override, configured_label, now, policy)
        if period is None:
            logger.debug(
                'No grading periods found for course %s with title "%s".',
                course.get("id"), override or configured_label,
            )
            continue

        enrollments = await fetch_enrollments(course.get("id"), profile.id, period.id)
        if not enrollments:
            logger.debug("No enrollment for course %s in period %s", course.get("id"), period.id)
            continue
        records.append(build_record(profile, course, enrollments[0], scale))

    return records
