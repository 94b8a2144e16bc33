import logging
from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from app.core.errors import (
    ConflictError,
    InvalidAssigneeError,
    InvalidInputError,
    NoChangeError,
    NotApprovedError,
    NotFoundError,
)
from app.models.project import Project
from app.models.task import COMPLETED, TODO, Task, TaskAssignee
from app.models.task_history import TaskHistory
from app.models.user import User
from app.services.statistics_service import StatisticsService
from app.utils.timeutils import as_naive_utc, to_utc, utcnow

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("title", "description", "priority", "deadline", "status")


def _unique(ids: Iterable[str]) -> List[str]:
    seen = []
    for value in ids:
        if value not in seen:
            seen.append(value)
    return seen


def _as_text(value) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


class TaskService:
    """Creates, edits and deletes tasks and feeds the statistics rollup.

    The task write is committed first; the statistics event runs afterwards
    and a failure there is logged without undoing the task change.
    """

    def __init__(self, db: Session, statistics: Optional[StatisticsService] = None):
        self.db = db
        self.statistics = statistics or StatisticsService(db)

    # helpers

    def _notify(self, event: str, project_id: str, *args):
        try:
            getattr(self.statistics, event)(project_id, *args)
        except Exception:
            self.db.rollback()
            logger.exception(
                f"Statistics update '{event}' failed for project {project_id}"
            )

    def _record(self, task: Task, user_id, action: str, old_value=None, new_value=None):
        self.db.add(
            TaskHistory(
                task_id=task.id,
                project_id=task.project_id,
                user_id=user_id,
                action=action,
                old_value=_as_text(old_value),
                new_value=_as_text(new_value),
                action_time=utcnow(),
            )
        )

    def _title_taken(self, project_id: str, title: str, exclude_id: Optional[str] = None) -> bool:
        query = self.db.query(Task.id).filter(
            Task.project_id == project_id, Task.title == title
        )
        if exclude_id is not None:
            query = query.filter(Task.id != exclude_id)
        return query.first() is not None

    def _check_users(self, user_ids: List[str]):
        if not user_ids:
            return
        found = {
            row[0] for row in self.db.query(User.id).filter(User.id.in_(user_ids)).all()
        }
        invalid = [uid for uid in user_ids if uid not in found]
        if invalid:
            raise InvalidAssigneeError(invalid)

    # commands

    def create(
        self,
        project_id: str,
        title: str,
        description: Optional[str],
        deadline: Optional[datetime],
        status: str,
        priority: str,
        creator_id: str,
        assignees: Optional[List[str]] = None,
        project_name: Optional[str] = None,
    ) -> Task:
        project = self.db.query(Project).filter(Project.id == project_id).first()
        if not project:
            raise NotFoundError("Project not found")
        if not project.is_approved:
            raise NotApprovedError("Project is not approved yet")

        if self._title_taken(project_id, title):
            raise ConflictError(
                "A task with this title already exists in the specified project"
            )

        assignee_ids = _unique(assignees or [])
        self._check_users(assignee_ids)

        now = utcnow()
        task = Task(
            project_id=project_id,
            title=title,
            description=description,
            deadline=to_utc(deadline),
            status=status or TODO,
            priority=priority,
            creator_id=creator_id,
            project_name=project_name or project.name,
            created_at=now,
            updated_at=now,
        )
        task.assignee_links = [
            TaskAssignee(user_id=uid, position=i, assigned_at=now)
            for i, uid in enumerate(assignee_ids)
        ]
        self.db.add(task)
        self.db.flush()
        self._record(task, creator_id, "created", None, title)
        self.db.commit()
        self.db.refresh(task)
        logger.info(f"Task {task.id} created in project {project_id}")

        created_completed = task.status == COMPLETED
        self._notify("on_task_created", project_id)
        if created_completed:
            self._notify("on_task_completed", project_id)
        return task

    def edit_details(self, task_id: str, changes: dict, actor_id: Optional[str] = None) -> Task:
        task = self.get(task_id)

        updates = {}
        for field in EDITABLE_FIELDS:
            new_value = changes.get(field)
            if new_value is None:
                continue
            current = getattr(task, field)
            if field == "deadline":
                new_value = to_utc(new_value)
                differs = as_naive_utc(new_value) != as_naive_utc(current)
            else:
                differs = new_value != current
            if differs:
                updates[field] = (current, new_value)

        if not updates:
            raise NoChangeError(
                "No changes detected. All provided values are the same as current values."
            )

        if "title" in updates and self._title_taken(
            task.project_id, updates["title"][1], exclude_id=task.id
        ):
            raise ConflictError(
                "A task with this title already exists in the specified project"
            )

        for field, (old_value, new_value) in updates.items():
            setattr(task, field, new_value)
            self._record(task, actor_id, f"{field}_changed", old_value, new_value)
        task.updated_at = utcnow()
        project_id = task.project_id
        self.db.commit()
        self.db.refresh(task)

        if "status" in updates:
            old_status, new_status = updates["status"]
            if new_status == COMPLETED:
                self._notify("on_task_completed", project_id)
            elif old_status == COMPLETED:
                self._notify("on_task_reopened", project_id)
        return task

    def delete(self, task_id: str, project_id: str, actor_id: Optional[str] = None):
        task = (
            self.db.query(Task)
            .filter(Task.id == task_id, Task.project_id == project_id)
            .first()
        )
        if not task:
            raise NotFoundError(
                "Task not found or does not belong to the specified project"
            )

        was_completed = task.is_completed
        self._record(task, actor_id, "deleted", task.title, None)
        self.db.delete(task)
        self.db.commit()
        logger.info(f"Task {task_id} deleted from project {project_id}")

        self._notify("on_task_deleted", project_id, was_completed)

    def add_assignees(self, task_id: str, assignee_ids: List[str], actor_id: Optional[str] = None) -> Task:
        if not assignee_ids:
            raise InvalidInputError("Assignee IDs are required and should be a non-empty list")

        task = self.get(task_id)
        requested = _unique(assignee_ids)
        self._check_users(requested)

        current = task.assignees
        added = [uid for uid in requested if uid not in current]
        if added:
            now = utcnow()
            start = len(task.assignee_links)
            if task.assignee_links:
                start = max(link.position for link in task.assignee_links) + 1
            for offset, uid in enumerate(added):
                task.assignee_links.append(
                    TaskAssignee(user_id=uid, position=start + offset, assigned_at=now)
                )
            self._record(task, actor_id, "assignees_added", None, ",".join(added))

        task.updated_at = utcnow()
        self.db.commit()
        self.db.refresh(task)
        return task

    # queries

    def get(self, task_id: str) -> Task:
        task = self.db.query(Task).filter(Task.id == task_id).first()
        if not task:
            raise NotFoundError("Task not found")
        return task

    def list_by_project(self, project_id: str) -> List[Task]:
        return (
            self.db.query(Task)
            .filter(Task.project_id == project_id)
            .order_by(Task.created_at.asc())
            .all()
        )

    def list_created_by(self, creator_id: str) -> List[Task]:
        return (
            self.db.query(Task)
            .filter(Task.creator_id == creator_id)
            .order_by(Task.created_at.asc())
            .all()
        )

    def list_assigned_to(self, user_id: str) -> List[Task]:
        return (
            self.db.query(Task)
            .join(TaskAssignee, TaskAssignee.task_id == Task.id)
            .filter(TaskAssignee.user_id == user_id)
            .order_by(Task.created_at.asc())
            .all()
        )

    def list_assigned_users(self, task_id: str) -> List[User]:
        task = self.get(task_id)
        ids = task.assignees
        if not ids:
            return []
        users = {u.id: u for u in self.db.query(User).filter(User.id.in_(ids)).all()}
        return [users[uid] for uid in ids if uid in users]

    def history(self, task_id: str) -> List[TaskHistory]:
        return (
            self.db.query(TaskHistory)
            .filter(TaskHistory.task_id == task_id)
            .order_by(TaskHistory.action_time.asc())
            .all()
        )
