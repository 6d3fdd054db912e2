import asyncio
import collections
import logging
import uuid
from typing import Any, Dict, Iterable, List

import pydantic

from .errors import NotFoundError, ValidationError
from .schemas import Report, utc_timestamp
from .validation import REPORT_FIELDS, require_fields

logger = logging.getLogger("greenhome.reports")

# Identity resolution lives outside this service.
PLACEHOLDER_REPORTER = "Current User"


class ReportStore:
    """Process-local collection of citizen reports, oldest first."""

    def __init__(self, delay: float = 1.0, seed: Iterable[Report] = ()):
        self.delay = delay
        self._lock = asyncio.Lock()
        # REPORTS[report_id] = Report
        self._reports: collections.OrderedDict = collections.OrderedDict()
        for report in seed:
            self._reports[report.id] = report

    async def create(self, payload: Dict[str, Any]) -> Report:
        require_fields(payload, REPORT_FIELDS)

        await asyncio.sleep(self.delay)

        try:
            report = Report(
                id=uuid.uuid4().hex,
                title=payload["title"],
                description=payload["description"],
                category=payload["category"],
                location=payload["location"],
                priority=payload["priority"],
                reported_at=utc_timestamp(),
                reported_by=PLACEHOLDER_REPORTER,
                image_url=payload.get("imageUrl") or None,
            )
        except pydantic.ValidationError as exc:
            field = str(exc.errors()[0]["loc"][0])
            raise ValidationError(field, f"Invalid value for field: {field}") from exc

        async with self._lock:
            while report.id in self._reports:
                report.id = uuid.uuid4().hex
            self._reports[report.id] = report

        logger.info(f"Created report {report.id} ({report.category}, {report.priority})")
        return report

    async def list(self) -> List[Report]:
        async with self._lock:
            return list(self._reports.values())

    async def get(self, report_id: str) -> Report:
        async with self._lock:
            report = self._reports.get(report_id)
        if report is None:
            raise NotFoundError("Report not found")
        return report

    def __len__(self) -> int:
        return len(self._reports)
