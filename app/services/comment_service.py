import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from app.core.errors import ForbiddenError, InvalidInputError, NotFoundError
from app.models.comment import DISLIKE, LIKE, Comment, CommentReaction
from app.models.project import Project
from app.models.task import Task
from app.services.membership_service import MembershipService
from app.utils.timeutils import utcnow

logger = logging.getLogger(__name__)

NONE = "none"
LIKED = "liked"
DISLIKED = "disliked"

_STATE_OF = {None: NONE, LIKE: LIKED, DISLIKE: DISLIKED}


def next_reaction(current: Optional[str], like: bool) -> Optional[str]:
    """Reaction stored after a like/dislike click.

    Clicking the reaction you already have clears it, clicking the other one
    replaces it.
    """
    wanted = LIKE if like else DISLIKE
    return None if current == wanted else wanted


class CommentService:
    def __init__(self, db: Session):
        self.db = db

    def post(
        self,
        project_id: str,
        creator_id: str,
        content: Optional[str] = None,
        file: Optional[dict] = None,
        task_id: Optional[str] = None,
    ) -> str:
        if not content and not file:
            raise InvalidInputError("Either content or a file must be provided.")

        project = self.db.query(Project).filter(Project.id == project_id).first()
        if not project:
            raise NotFoundError("Project not found")
        if not MembershipService(self.db).is_member(project_id, creator_id):
            raise ForbiddenError("User is not part of this project")
        if task_id:
            task = (
                self.db.query(Task.id)
                .filter(Task.id == task_id, Task.project_id == project_id)
                .first()
            )
            if not task:
                raise NotFoundError("Task not found in this project")

        comment = Comment(
            project_id=project_id,
            task_id=task_id or None,
            creator_id=creator_id,
            content=content or None,
            created_at=utcnow(),
        )
        if file:
            comment.file_name = file["fileName"]
            comment.file_type = file["fileType"]
            comment.file_size = file["fileSize"]
            comment.file_data = file["data"]

        self.db.add(comment)
        self.db.commit()
        logger.info(f"Comment {comment.id} posted in project {project_id}")
        return comment.id

    def get(self, comment_id: str) -> Comment:
        comment = self.db.query(Comment).filter(Comment.id == comment_id).first()
        if not comment:
            raise NotFoundError("Comment not found")
        return comment

    def list_by_scope(self, project_id: str, task_id: Optional[str] = None) -> List[Comment]:
        query = self.db.query(Comment).filter(Comment.project_id == project_id)
        if task_id:
            query = query.filter(Comment.task_id == task_id)
        else:
            query = query.filter(Comment.task_id.is_(None))
        return query.order_by(Comment.created_at.asc()).all()

    def list_files_by_project(self, project_id: str) -> List[Comment]:
        return (
            self.db.query(Comment)
            .filter(Comment.project_id == project_id, Comment.file_data.isnot(None))
            .order_by(Comment.created_at.asc())
            .all()
        )

    def get_file(self, comment_id: str) -> Comment:
        comment = self.get(comment_id)
        if not comment.has_file:
            raise NotFoundError("No file attached to this comment")
        return comment

    def reaction_of(self, comment_id: str, user_id: str) -> str:
        row = self.db.get(CommentReaction, (comment_id, user_id))
        return _STATE_OF[row.reaction if row else None]

    def toggle_reaction(self, comment_id: str, user_id: str, like: bool) -> str:
        """Apply a like (``like=True``) or dislike click and return the new state."""
        self.get(comment_id)
        row = self.db.get(CommentReaction, (comment_id, user_id))
        reaction = next_reaction(row.reaction if row else None, like)

        if reaction is None:
            self.db.delete(row)
        elif row is None:
            self.db.add(
                CommentReaction(
                    comment_id=comment_id,
                    user_id=user_id,
                    reaction=reaction,
                    reacted_at=utcnow(),
                )
            )
        else:
            row.reaction = reaction
        self.db.commit()
        return _STATE_OF[reaction]
