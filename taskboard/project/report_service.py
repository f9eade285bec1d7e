"""Manager-only performance report built from the task history."""

import logging
from datetime import timedelta

from taskboard.constants import REPORT_WINDOW_DAYS
from taskboard.utils.clock import Clock, utc_now

from .guards import check_manager
from .models import PerformanceReport
from .schemas import PerformanceReportResponse
from .storage import Database

logger = logging.getLogger(__name__)

REPORT_NAME = "Performance Report"
REPORT_PERIOD = f"Last {REPORT_WINDOW_DAYS} days"


class ReportService:
    def __init__(self, db: Database, clock: Clock = utc_now):
        self.db = db
        self.clock = clock

    def generate_report(self, user_id: str) -> PerformanceReportResponse:
        """Summarize task completions recorded over the report window.

        A completion is a status change whose new value is the serialized
        completed status. The average is the number of completions per
        distinct user who completed something, rounded to two decimals.

        Raises:
            UserNotFoundError: If the acting user does not exist
            PermissionDeniedError: If the acting user is not a manager
        """
        now = self.clock()
        start = now - timedelta(days=REPORT_WINDOW_DAYS)

        with self.db.unit_of_work() as uow:
            check_manager(user_id, uow.users)
            completions = uow.tasks.get_completed_since(start)

        total = len(completions)
        if total == 0:
            report = PerformanceReport(
                report_name=REPORT_NAME,
                period=REPORT_PERIOD,
                generated_at=now,
                total_tasks_completed=0,
                distinct_users_who_completed_tasks=0,
                average_tasks_completed_per_user=0.0,
            )
        else:
            distinct_users = len({entry.user_id for entry in completions})
            report = PerformanceReport(
                report_name=REPORT_NAME,
                period=REPORT_PERIOD,
                generated_at=now,
                total_tasks_completed=total,
                distinct_users_who_completed_tasks=distinct_users,
                average_tasks_completed_per_user=round(total / distinct_users, 2),
            )

        logger.info(f"Generated performance report: {total} completions since {start.isoformat()}")
        return PerformanceReportResponse.from_report(report)
