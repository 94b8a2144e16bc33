import logging

from sqlalchemy import case, func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import NotFoundError
from app.models.project_statistic import ProjectStatistic
from app.models.task import COMPLETED, Task
from app.utils.timeutils import utcnow

logger = logging.getLogger(__name__)


def completion_percentage(completed, total):
    """Percentage of completed tasks, 0 when there are no tasks.

    Works on plain numbers and on SQL column expressions alike, so the same
    rule is used for in-memory recomputation and for atomic UPDATEs.
    """
    if isinstance(total, (int, float)):
        return (completed / total) * 100 if total > 0 else 0.0
    return case((total > 0, completed * 100.0 / total), else_=0.0)


class StatisticsService:
    """Per-project task rollup kept in step with task lifecycle events.

    Every event is a single UPDATE whose SET clauses are expressions over the
    current column values (``total_tasks = total_tasks + 1``), so two writers
    never overwrite each other's increment. Each event commits on its own.
    """

    def __init__(self, db: Session):
        self.db = db

    def _find(self, project_id: str):
        return (
            self.db.query(ProjectStatistic)
            .filter(ProjectStatistic.project_id == project_id)
            .first()
        )

    def _apply(self, project_id: str, total_delta: int, completed_delta: int) -> bool:
        total = ProjectStatistic.total_tasks + total_delta
        completed = ProjectStatistic.completed_tasks + completed_delta
        stmt = (
            update(ProjectStatistic)
            .where(ProjectStatistic.project_id == project_id)
            .values(
                total_tasks=total,
                completed_tasks=completed,
                completion_percentage=completion_percentage(completed, total),
                last_updated=utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        result = self.db.execute(stmt)
        self.db.commit()
        return result.rowcount > 0

    def on_task_created(self, project_id: str):
        if self._apply(project_id, 1, 0):
            return
        try:
            self.db.add(
                ProjectStatistic(
                    project_id=project_id,
                    total_tasks=1,
                    completed_tasks=0,
                    completion_percentage=0.0,
                    last_updated=utcnow(),
                )
            )
            self.db.commit()
        except IntegrityError:
            # Another request created the row first
            self.db.rollback()
            self._apply(project_id, 1, 0)
        logger.info(f"Statistics created for project {project_id}")

    def on_task_completed(self, project_id: str):
        if not self._apply(project_id, 0, 1):
            logger.warning(f"No project statistics found for project {project_id}")

    def on_task_reopened(self, project_id: str):
        if not self._apply(project_id, 0, -1):
            logger.warning(f"No project statistics found for project {project_id}")

    def on_task_deleted(self, project_id: str, was_completed: bool):
        if not self._apply(project_id, -1, -1 if was_completed else 0):
            logger.warning(f"No project statistics found for project {project_id}")

    def count_overdue(self, project_id: str) -> int:
        return (
            self.db.query(func.count(Task.id))
            .filter(
                Task.project_id == project_id,
                Task.deadline.isnot(None),
                Task.deadline < utcnow(),
                Task.status != COMPLETED,
            )
            .scalar()
        )

    def get_statistics(self, project_id: str) -> dict:
        stat = self._find(project_id)
        if stat is None:
            raise NotFoundError("No statistics found for this project")
        return {
            "project_id": stat.project_id,
            "total_tasks": stat.total_tasks,
            "completed_tasks": stat.completed_tasks,
            "overdue_tasks": self.count_overdue(project_id),
            "completion_percentage": stat.completion_percentage,
            "last_updated": stat.last_updated,
        }

    def reconcile(self, project_id: str) -> ProjectStatistic:
        """Recompute the rollup from a full scan of the project's tasks."""
        total = (
            self.db.query(func.count(Task.id))
            .filter(Task.project_id == project_id)
            .scalar()
        )
        completed = (
            self.db.query(func.count(Task.id))
            .filter(Task.project_id == project_id, Task.status == COMPLETED)
            .scalar()
        )
        overdue = self.count_overdue(project_id)

        stat = self._find(project_id)
        if stat is None:
            if total:
                logger.warning(
                    f"Project {project_id} had {total} tasks but no statistics row"
                )
            stat = ProjectStatistic(project_id=project_id)
            self.db.add(stat)

        for field, actual in (
            ("total_tasks", total),
            ("completed_tasks", completed),
        ):
            stored = getattr(stat, field)
            if stored is not None and stored != actual:
                logger.warning(
                    f"Statistics drift on project {project_id}: "
                    f"{field} stored={stored} actual={actual}"
                )
            setattr(stat, field, actual)

        stat.overdue_tasks = overdue
        stat.completion_percentage = completion_percentage(completed, total)
        stat.last_updated = utcnow()
        self.db.commit()
        self.db.refresh(stat)
        return stat
