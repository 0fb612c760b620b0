from sqlalchemy import Column, String, Integer, ForeignKey, Boolean, DateTime, UniqueConstraint

from app.core.dates import utc_now
from app.db.base import BaseModel


class DocumentCollaborator(BaseModel):
    __tablename__ = "document_collaborators"
    __table_args__ = (
        UniqueConstraint("document_id", "user_id", name="uq_document_collaborator"),
    )
    
    document_id = Column(Integer, ForeignKey("documents.id"), index=True, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    permission = Column(String(16), default="read", nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    joined_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    last_activity_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)


class DocumentActivity(BaseModel):
    __tablename__ = "document_activities"
    
    document_id = Column(Integer, ForeignKey("documents.id"), index=True, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    activity_type = Column(String(32), nullable=False)
    description = Column(String(500), default="", nullable=False)
