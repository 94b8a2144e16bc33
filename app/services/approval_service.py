import logging
from typing import List

from sqlalchemy.orm import Session

from app.core.errors import ConflictError, InvalidInputError, NotFoundError
from app.models.project import Project
from app.models.project_approval import ProjectApproval
from app.utils.timeutils import utcnow

logger = logging.getLogger(__name__)

APPROVED = "approved"
REJECTED = "rejected"
DECISIONS = (APPROVED, REJECTED)


class ApprovalService:
    def __init__(self, db: Session):
        self.db = db

    def approve(self, project_id: str, admin_id: str, decision: str) -> ProjectApproval:
        """Record an admin decision and gate the project on it.

        Only an approval is final: a rejected project can be decided again.
        """
        if decision not in DECISIONS:
            raise InvalidInputError('Status must be either "approved" or "rejected"')

        project = self.db.query(Project).filter(Project.id == project_id).first()
        if not project:
            raise NotFoundError("Project not found")
        if project.is_approved:
            raise ConflictError("Project is already approved")

        approval = ProjectApproval(
            project_id=project_id,
            admin_id=admin_id,
            status=decision,
            approval_date=utcnow(),
        )
        self.db.add(approval)
        project.is_approved = decision == APPROVED
        self.db.commit()
        self.db.refresh(approval)
        logger.info(f"Project {project_id} {decision} by admin {admin_id}")
        return approval

    def history(self, project_id: str) -> List[ProjectApproval]:
        return (
            self.db.query(ProjectApproval)
            .filter(ProjectApproval.project_id == project_id)
            .order_by(ProjectApproval.approval_date.asc())
            .all()
        )
