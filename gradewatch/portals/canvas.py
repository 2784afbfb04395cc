# gradewatch/portals/canvas.py
from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, List, Optional, Tuple

from playwright.async_api import APIResponse

from gradewatch.models import StudentProfile
from gradewatch.terms import GradingPeriod
from .base import LmsClient
from . import register_portal, LmsError, LoginError, MalformedResponseError

logger = logging.getLogger(__name__)

INVALID_TOKEN_MESSAGE = "Invalid access token."
PER_PAGE = 100

_NEXT_LINK = re.compile(r'<([^>]+)>\s*;\s*rel="?next"?')


def next_page_url(link_header: Optional[str]) -> Optional[str]:
    """Pull the rel="next" target out of a Canvas Link header."""
    if not link_header:
        return None
    for part in link_header.split(","):
        m = _NEXT_LINK.search(part)
        if m:
            return m.group(1)
    return None


def _token_rejected(body: Any) -> bool:
    if not isinstance(body, dict):
        return False
    errors = body.get("errors")
    if not isinstance(errors, list) or not errors or not isinstance(errors[0], dict):
        return False
    return errors[0].get("message") == INVALID_TOKEN_MESSAGE


@register_portal("canvas")
class Canvas(LmsClient):
    """Canvas LMS REST client (api/v1)."""

    @property
    def base_url(self) -> str:
        return f"https://{self.domain}/api/v1"

    # ---------------------- plumbing ----------------------
    async def _get(self, url: str, params: Optional[Dict[str, Any]] = None) -> Tuple[APIResponse, Any]:
        logger.debug("GET %s %s", url, params or "")
        resp = await self.request.get(url, headers=self.headers, params=params)
        text = await resp.text()
        try:
            body = json.loads(text) if text else None
        except json.JSONDecodeError:
            raise MalformedResponseError(
                f"Canvas returned a non-JSON response ({resp.status}) for {url}"
            ) from None
        if _token_rejected(body):
            raise LoginError("The Canvas API token is invalid.")
        return resp, body

    async def _get_list(self, url: str, params: Dict[str, Any], what: str) -> List[Any]:
        """GET a list endpoint, following pagination."""
        items: List[Any] = []
        next_url: Optional[str] = url
        page_params: Optional[Dict[str, Any]] = {**params, "per_page": PER_PAGE}
        while next_url:
            resp, body = await self._get(next_url, page_params)
            if not resp.ok or not isinstance(body, list):
                logger.error("Invalid response when fetching %s: %s", what, body)
                raise MalformedResponseError(f"Did not receive a valid list of {what}.")
            items.extend(body)
            next_url = next_page_url(resp.headers.get("link"))
            page_params = None  # the next link already carries the query
        return items

    # ---------------------- endpoints ----------------------
    async def profile(self) -> StudentProfile:
        resp, body = await self._get(f"{self.base_url}/users/self")
        if not resp.ok or not isinstance(body, dict) or not body.get("id"):
            logger.error("Error fetching user profile from Canvas: %s", body)
            raise LmsError("Could not fetch user profile from Canvas.")
        return StudentProfile(id=body["id"], name=body.get("name") or "")

    async def active_courses(self) -> List[Dict[str, Any]]:
        return await self._get_list(
            f"{self.base_url}/courses", {"enrollment_state": "active"}, "courses"
        )

    async def grading_periods(self, course: Dict[str, Any]) -> List[GradingPeriod]:
        _, body = await self._get(f"{self.base_url}/courses/{course['id']}/grading_periods")
        raw = body.get("grading_periods") if isinstance(body, dict) else None
        logger.debug("Grading periods for course %s: %s", course.get("id"), raw)
        if not isinstance(raw, list):
            return []
        return [GradingPeriod.from_api(gp) for gp in raw if isinstance(gp, dict)]

    async def enrollments(self, course_id: Any, user_id: Any, grading_period_id: Any) -> List[Dict[str, Any]]:
        return await self._get_list(
            f"{self.base_url}/courses/{course_id}/enrollments",
            {"user_id": str(user_id), "grading_period_id": str(grading_period_id)},
            "enrollments",
        )
