# gradewatch/work_flows/save_snapshot.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, Sequence

from gradewatch.models import GradeRecord
from gradewatch.storage import DocumentStore
from utils.dates import to_iso_z

logger = logging.getLogger(__name__)


def build_snapshot(records: Sequence[GradeRecord], now: datetime) -> Dict[str, Any]:
    return {
        "timestamp": to_iso_z(now),
        "grades": [record.to_dict() for record in records],
    }


async def save_snapshot(store: DocumentStore, student_name: str, records: Sequence[GradeRecord], now: datetime) -> Dict[str, Any]:
    """Append this run's grades to the student's history, keyed by display name."""
    snapshot = build_snapshot(records, now)
    await store.append(student_name, snapshot)
    logger.info("Saved %d grades for %s at %s", len(records), student_name, snapshot["timestamp"])
    return snapshot
