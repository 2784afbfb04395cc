"""Tests for per-course grade aggregation."""

from __future__ import annotations

import asyncio
import typing as t

import pytest
from conftest import period, utc

from gradewatch.aggregate import aggregate_grades, format_score
from gradewatch.models import GradeRecord, StudentProfile
from gradewatch.scale import GradeScaleTier
from gradewatch.terms import FallbackPolicy, GradingPeriod

SCALE = [GradeScaleTier(90, "A"), GradeScaleTier(80, "B"), GradeScaleTier(0, "F")]
NOW = utc(2024, 7, 1)


class FakeLms:
    """Canned grading periods and enrollments, keyed by course id."""

    def __init__(self, periods: dict[t.Any, list[GradingPeriod]], enrollments: dict[tuple, list[dict]]) -> None:
        self.periods = periods
        self.enrollment_map = enrollments
        self.calls: list[tuple] = []

    async def grading_periods(self, course: dict) -> list[GradingPeriod]:
        self.calls.append(("periods", course["id"]))
        return self.periods.get(course["id"], [])

    async def enrollments(self, course_id: t.Any, user_id: t.Any, grading_period_id: t.Any) -> list[dict]:
        self.calls.append(("enrollments", course_id, user_id, grading_period_id))
        return self.enrollment_map.get((course_id, grading_period_id), [])


def run(lms: FakeLms, courses: list[dict], profile: StudentProfile, label: str = "Term 2",
        policy: FallbackPolicy = FallbackPolicy.END_DATE) -> list[GradeRecord]:
    return asyncio.run(aggregate_grades(
        courses,
        fetch_enrollments=lms.enrollments,
        fetch_grading_periods=lms.grading_periods,
        profile=profile,
        configured_label=label,
        scale=SCALE,
        policy=policy,
        now=NOW,
    ))


def enrollment(score: t.Any, last_activity: str | None = "2024-06-30T10:00:00Z") -> dict:
    return {"grades": {"current_score": score}, "last_activity_at": last_activity}


@pytest.mark.parametrize(
    ("grades", "expected"),
    [
        ({"current_score": 92.5}, "92.5%"),
        ({"current_score": 92.0}, "92%"),
        ({"current_score": 88}, "88%"),
        ({"current_score": None}, "null%"),
        ({}, "undefined%"),
    ],
)
def test_format_score(grades: dict, expected: str) -> None:
    assert format_score(grades) == expected


def test_records_in_course_order(profile: StudentProfile) -> None:
    lms = FakeLms(
        periods={
            10: [period(100, "Term 2", "2024-06-01", "2024-12-31")],
            11: [period(110, "Term 2", "2024-06-01", "2024-12-31")],
        },
        enrollments={(10, 100): [enrollment(95)], (11, 110): [enrollment(81.25), enrollment(10)]},
    )
    courses = [{"id": 11, "name": "Biology"}, {"id": 10, "name": "Algebra"}]

    records = run(lms, courses, profile)

    assert [r.course_name for r in records] == ["Biology", "Algebra"]
    assert records[0] == GradeRecord(
        student_name="Ada Student",
        student_id=42,
        course_name="Biology",
        course_id=11,
        current_score="81.25%",
        current_grade="B",
        last_activity="2024-06-30T10:00:00Z",
    )
    assert records[1].current_grade == "A"


def test_courses_without_period_or_enrollment_are_skipped(profile: StudentProfile) -> None:
    lms = FakeLms(
        periods={
            1: [period(1, "Term 1", "2023-01-01", "2023-06-01")],
            2: [period(2, "Term 2", "2023-01-01", "2023-06-01")],
            3: [],
        },
        enrollments={},
    )
    records = run(lms, [{"id": 1, "name": "A"}, {"id": 2, "name": "B"}, {"id": 3, "name": "C"}], profile)

    assert records == []
    # only course 2 resolved a period, so only it asked for enrollments
    assert [c for c in lms.calls if c[0] == "enrollments"] == [("enrollments", 2, 42, 2)]


def test_null_score_quirk(profile: StudentProfile) -> None:
    lms = FakeLms(
        periods={1: [period(5, "Term 2", None, None)]},
        enrollments={(1, 5): [{"grades": {"current_score": None}}]},
    )
    [record] = run(lms, [{"id": 1, "name": "Art"}], profile)

    assert record.current_score == "null%"
    assert record.current_grade == "N/A"
    assert record.last_activity is None


def test_override_latches_for_the_rest_of_the_run(profile: StudentProfile) -> None:
    lms = FakeLms(
        periods={
            # nothing active: no override yet, configured label still used
            1: [period(11, "Term 2", "2023-01-01", "2023-06-01")],
            # "Term 3" is active here and becomes the override
            2: [period(21, "Term 2", "2023-01-01", "2023-06-01"), period(22, "Term 3", "2024-06-01", "2024-12-31")],
            # "Term 4" is also active but the override is already set
            3: [period(31, "Term 4", "2024-06-15", "2024-12-31"), period(32, "Term 3", "2024-06-01", "2024-12-31")],
        },
        enrollments={(1, 11): [enrollment(70)], (2, 22): [enrollment(91)], (3, 32): [enrollment(85)]},
    )
    records = run(lms, [{"id": 1, "name": "One"}, {"id": 2, "name": "Two"}, {"id": 3, "name": "Three"}], profile)

    assert [(r.course_id, r.current_score) for r in records] == [(1, "70%"), (2, "91%"), (3, "85%")]


def test_fetch_failure_aborts_the_run(profile: StudentProfile) -> None:
    class Boom(Exception):
        pass

    async def failing_periods(course: dict) -> list[GradingPeriod]:
        if course["id"] == 2:
            raise Boom("network down")
        return [period(1, "Term 2", None, None)]

    async def enrollments(course_id: t.Any, user_id: t.Any, grading_period_id: t.Any) -> list[dict]:
        return [enrollment(99)]

    with pytest.raises(Boom):
        asyncio.run(aggregate_grades(
            [{"id": 1, "name": "ok"}, {"id": 2, "name": "bad"}],
            fetch_enrollments=enrollments,
            fetch_grading_periods=failing_periods,
            profile=profile,
            configured_label="Term 2",
            scale=SCALE,
            policy=FallbackPolicy.END_DATE,
            now=NOW,
        ))


def test_to_dict_uses_stored_keys() -> None:
    record = GradeRecord("Ada", 1, "Art", 2, "90%", "A", None)
    assert record.to_dict() == {
        "studentName": "Ada",
        "studentId": 1,
        "courseName": "Art",
        "courseId": 2,
        "currentScore": "90%",
        "currentGrade": "A",
        "lastActivity": None,
    }


@pytest.mark.parametrize("grades", ["A-", [92], 7, None])
def test_grades_that_are_not_an_object(profile: StudentProfile, grades: t.Any) -> None:
    lms = FakeLms(
        periods={1: [period(5, "Term 2", None, None)]},
        enrollments={(1, 5): [{"grades": grades, "last_activity_at": None}]},
    )
    [record] = run(lms, [{"id": 1, "name": "Art"}], profile)

    assert record.current_score == "undefined%"
    assert record.current_grade == "N/A"
