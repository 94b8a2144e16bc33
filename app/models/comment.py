from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from app.core.database import Base
from app.utils.ids import new_id
from app.utils.timeutils import utcnow

LIKE = "like"
DISLIKE = "dislike"


class Comment(Base):
    __tablename__ = "comments"

    id = Column(String(36), primary_key=True, default=new_id)
    project_id = Column(String(36), ForeignKey("projects.id"), nullable=False, index=True)
    # NULL task_id means project-level chat
    task_id = Column(String(36), nullable=True, index=True)
    creator_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    content = Column(Text, nullable=True)
    file_name = Column(String(255), nullable=True)
    file_type = Column(String(255), nullable=True)
    file_size = Column(Integer, nullable=True)
    file_data = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    reactions = relationship(
        "CommentReaction", cascade="all, delete-orphan", lazy="selectin"
    )

    @property
    def has_file(self) -> bool:
        return self.file_data is not None

    @property
    def likes(self):
        return [r.user_id for r in self.reactions if r.reaction == LIKE]

    @property
    def dislike(self):
        return [r.user_id for r in self.reactions if r.reaction == DISLIKE]


class CommentReaction(Base):
    """One row per (comment, user); no row means no reaction."""

    __tablename__ = "comment_reactions"

    comment_id = Column(String(36), ForeignKey("comments.id"), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id"), primary_key=True)
    reaction = Column(String(8), nullable=False)
    reacted_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
