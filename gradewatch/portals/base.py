# gradewatch/portals/base.py
from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, Dict, List
from playwright.async_api import APIRequestContext

from gradewatch.models import StudentProfile
from gradewatch.terms import GradingPeriod


class LmsClient(ABC):
    """Interface every LMS client must implement."""

    def __init__(self, request: APIRequestContext, domain: str, token: str) -> None:
        self.request, self.domain, self.token = request, domain, token

    @abstractmethod
    async def profile(self) -> StudentProfile: ...

    @abstractmethod
    async def active_courses(self) -> List[Dict[str, Any]]: ...

    @abstractmethod
    async def grading_periods(self, course: Dict[str, Any]) -> List[GradingPeriod]: ...

    @abstractmethod
    async def enrollments(self, course_id: Any, user_id: Any, grading_period_id: Any) -> List[Dict[str, Any]]: ...

    # optional shared helpers ↓
    @property
    def headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}
