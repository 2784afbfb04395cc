# gradewatch/work_flows/fetch_grades.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Tuple

from ..aggregate import aggregate_grades
from ..models import GradeRecord, StudentProfile
from ..portals import LmsClient
from ..settings import Settings

logger = logging.getLogger(__name__)


async def fetch_student_grades(client: LmsClient, settings: Settings, now: datetime) -> Tuple[StudentProfile, List[GradeRecord]]:
    """
    Orchestrate the full grade pull for the token's owner.

    Returns
    -------
    (profile, records) : the student and one GradeRecord per graded course,
                         in the order Canvas lists the courses
    """
    # 1. Who are we, and what are we enrolled in
    profile = await client.profile()
    courses = await client.active_courses()
    logger.info("Getting Data..")
    logger.debug("%d active courses for %s", len(courses), profile.name)

    # 2. Resolve a term per course and pull its enrollment grades
    records = await aggregate_grades(
        courses,
        fetch_enrollments=client.enrollments,
        fetch_grading_periods=client.grading_periods,
        profile=profile,
        configured_label=settings.grading_term,
        scale=settings.scale,
        policy=settings.fallback_policy,
        now=now,
    )
    return profile, records
