import logging
from typing import List

from sqlalchemy import update
from sqlalchemy.orm import Session

from app.core.errors import ConflictError, InvalidInputError, NotFoundError
from app.models.project import Project
from app.models.project_user import ProjectUser
from app.models.user import User
from app.utils.timeutils import utcnow

logger = logging.getLogger(__name__)


class MembershipService:
    """User-to-project membership and the denormalized ``noUsers`` counter."""

    def __init__(self, db: Session):
        self.db = db

    def _change_member_count(self, project_id: str, delta: int):
        self.db.execute(
            update(Project)
            .where(Project.id == project_id)
            .values(noUsers=Project.noUsers + delta)
            .execution_options(synchronize_session=False)
        )

    def is_member(self, project_id: str, user_id: str) -> bool:
        return (
            self.db.query(ProjectUser.id)
            .filter(ProjectUser.project_id == project_id, ProjectUser.user_id == user_id)
            .first()
            is not None
        )

    def add_members(self, project_id: str, user_ids: List[str]) -> List[str]:
        """Add a batch of users to a project, all or nothing.

        Every id is checked before anything is written. If any id is unknown
        or already a member the whole batch is rejected with one message per
        offending id.
        """
        if not user_ids:
            raise InvalidInputError("At least one user id is required")

        project = self.db.query(Project).filter(Project.id == project_id).first()
        if not project:
            raise NotFoundError("Project not found")

        missing, duplicates, to_add = [], [], []
        for user_id in user_ids:
            if user_id in to_add:
                continue
            if not self.db.query(User.id).filter(User.id == user_id).first():
                missing.append(f"User with id {user_id} does not exist")
                continue
            if self.is_member(project_id, user_id):
                duplicates.append(f"User with id {user_id} is already added to the project")
                continue
            to_add.append(user_id)

        if missing:
            raise InvalidInputError("Some users could not be added", errors=missing + duplicates)
        if duplicates:
            raise ConflictError("Some users could not be added", errors=duplicates)

        now = utcnow()
        for user_id in to_add:
            self.db.add(ProjectUser(project_id=project_id, user_id=user_id, joined_at=now))
        self._change_member_count(project_id, len(to_add))
        self.db.commit()
        logger.info(f"Added {len(to_add)} users to project {project_id}")
        return to_add

    def add_creator(self, project_id: str, user_id: str):
        # noUsers already starts at 1 for the creator, so no counter change
        self.db.add(ProjectUser(project_id=project_id, user_id=user_id, joined_at=utcnow()))

    def list_members(self, project_id: str) -> List[dict]:
        rows = (
            self.db.query(User, ProjectUser.joined_at)
            .join(ProjectUser, ProjectUser.user_id == User.id)
            .filter(ProjectUser.project_id == project_id)
            .order_by(ProjectUser.joined_at.asc())
            .all()
        )
        return [
            {
                "id": user.id,
                "name": user.name,
                "email": user.email,
                "created_at": user.created_at,
                "joined_at": joined_at,
            }
            for user, joined_at in rows
        ]

