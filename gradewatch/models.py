# gradewatch/models.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class StudentProfile:
    id: Any
    name: str


@dataclass(frozen=True)
class GradeRecord:
    student_name: str
    student_id: Any
    course_name: str
    course_id: Any
    current_score: str
    current_grade: str
    last_activity: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Stored shape; the camelCase keys are what existing snapshots use."""
        return {
            "studentName": self.student_name,
            "studentId": self.student_id,
            "courseName": self.course_name,
            "courseId": self.course_id,
            "currentScore": self.current_score,
            "currentGrade": self.current_grade,
            "lastActivity": self.last_activity,
        }
