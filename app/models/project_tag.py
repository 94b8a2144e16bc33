from sqlalchemy import Column, DateTime, ForeignKey, String
from app.core.database import Base
from app.utils.ids import new_id
from app.utils.timeutils import utcnow


class ProjectTag(Base):
    __tablename__ = "project_tags"

    id = Column(String(36), primary_key=True, default=new_id)
    project_id = Column(String(36), ForeignKey("projects.id"), nullable=False, index=True)
    tag_name = Column(String(255), nullable=False)
    tagged_at = Column(DateTime(timezone=True), default=utcnow)
