import logging
from collections import defaultdict
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from app.core.errors import ConflictError, ForbiddenError, InvalidInputError, NotFoundError
from app.models.comment import Comment, CommentReaction
from app.models.project import Project
from app.models.project_approval import ProjectApproval
from app.models.project_statistic import ProjectStatistic
from app.models.project_tag import ProjectTag
from app.models.project_user import ProjectUser
from app.models.task import Task, TaskAssignee
from app.models.task_history import TaskHistory
from app.services.membership_service import MembershipService
from app.utils.timeutils import to_utc, utcnow

logger = logging.getLogger(__name__)


class ProjectService:
    def __init__(self, db: Session):
        self.db = db

    def get(self, project_id: str) -> Project:
        project = self.db.query(Project).filter(Project.id == project_id).first()
        if not project:
            raise NotFoundError("Project not found")
        return project

    def get_owned(self, project_id: str, user_id: str) -> Project:
        project = self.get(project_id)
        if project.creator_id != user_id:
            raise ForbiddenError("You are not the owner of this project")
        return project

    def create(
        self,
        creator_id: str,
        name: str,
        description: str,
        deadline: Optional[datetime] = None,
        priority: str = "medium",
        tags: Optional[List[str]] = None,
    ) -> Project:
        if self.db.query(Project.id).filter(Project.name == name).first():
            raise ConflictError("Project with same name already exists")

        now = utcnow()
        project = Project(
            name=name,
            description=description,
            deadline=to_utc(deadline),
            creator_id=creator_id,
            priority=priority,
            created_at=now,
            updated_at=now,
            noUsers=1,
        )
        self.db.add(project)
        self.db.flush()
        MembershipService(self.db).add_creator(project.id, creator_id)
        for tag in tags or []:
            self.db.add(ProjectTag(project_id=project.id, tag_name=tag, tagged_at=now))
        self.db.commit()
        self.db.refresh(project)
        logger.info(f"Project {project.id} created by user {creator_id}")
        return project

    def update(
        self,
        project_id: str,
        actor_id: str,
        description: Optional[str] = None,
        status: Optional[str] = None,
        deadline: Optional[datetime] = None,
    ) -> Project:
        if description is None and status is None and deadline is None:
            raise InvalidInputError(
                "At least one of 'deadline', 'status', or 'description' must be provided."
            )
        project = self.get_owned(project_id, actor_id)
        if description:
            project.description = description
        if status:
            project.status = status
        if deadline:
            project.deadline = to_utc(deadline)
        project.updated_at = utcnow()
        self.db.commit()
        self.db.refresh(project)
        return project

    def delete(self, project_id: str, actor_id: str):
        """Delete a project and every row that hangs off it, in one transaction."""
        self.get_owned(project_id, actor_id)

        task_ids = [
            row[0] for row in self.db.query(Task.id).filter(Task.project_id == project_id).all()
        ]
        comment_ids = [
            row[0]
            for row in self.db.query(Comment.id).filter(Comment.project_id == project_id).all()
        ]
        if task_ids:
            self.db.query(TaskAssignee).filter(TaskAssignee.task_id.in_(task_ids)).delete(
                synchronize_session=False
            )
        if comment_ids:
            self.db.query(CommentReaction).filter(
                CommentReaction.comment_id.in_(comment_ids)
            ).delete(synchronize_session=False)

        for model in (
            Comment,
            TaskHistory,
            Task,
            ProjectStatistic,
            ProjectTag,
            ProjectApproval,
            ProjectUser,
        ):
            self.db.query(model).filter(model.project_id == project_id).delete(
                synchronize_session=False
            )
        self.db.query(Project).filter(Project.id == project_id).delete(
            synchronize_session=False
        )
        self.db.commit()
        logger.info(
            f"Project {project_id} deleted with {len(task_ids)} tasks and {len(comment_ids)} comments"
        )

    def add_tags(self, project_id: str, tags: List[str]) -> List[str]:
        self.get(project_id)
        now = utcnow()
        for tag in tags:
            self.db.add(ProjectTag(project_id=project_id, tag_name=tag, tagged_at=now))
        self.db.commit()
        return self.tags(project_id)

    def tags(self, project_id: str) -> List[str]:
        return [
            row[0]
            for row in self.db.query(ProjectTag.tag_name)
            .filter(ProjectTag.project_id == project_id)
            .order_by(ProjectTag.tagged_at.asc())
            .all()
        ]

    def _tags_by_project(self, project_ids: List[str]) -> Dict[str, List[str]]:
        grouped = defaultdict(list)
        if project_ids:
            rows = (
                self.db.query(ProjectTag.project_id, ProjectTag.tag_name)
                .filter(ProjectTag.project_id.in_(project_ids))
                .order_by(ProjectTag.tagged_at.asc())
                .all()
            )
            for project_id, tag_name in rows:
                grouped[project_id].append(tag_name)
        return grouped

    def with_tags(self, projects: List[Project]) -> List[dict]:
        tags = self._tags_by_project([p.id for p in projects])
        return [
            {
                "id": p.id,
                "name": p.name,
                "description": p.description,
                "created_at": p.created_at,
                "updated_at": p.updated_at,
                "deadline": p.deadline,
                "creator_id": p.creator_id,
                "is_approved": p.is_approved,
                "status": p.status,
                "priority": p.priority,
                "noUsers": p.noUsers,
                "tags": tags.get(p.id, []),
            }
            for p in projects
        ]

    def list_created_by(self, user_id: str) -> List[dict]:
        projects = (
            self.db.query(Project)
            .filter(Project.creator_id == user_id)
            .order_by(Project.created_at.desc())
            .all()
        )
        return self.with_tags(projects)

    def list_assigned_to(self, user_id: str) -> List[dict]:
        projects = (
            self.db.query(Project)
            .join(ProjectUser, ProjectUser.project_id == Project.id)
            .filter(ProjectUser.user_id == user_id)
            .order_by(Project.created_at.desc())
            .all()
        )
        return self.with_tags(projects)

    def list_all(self) -> List[dict]:
        projects = self.db.query(Project).order_by(Project.created_at.desc()).all()
        return self.with_tags(projects)
