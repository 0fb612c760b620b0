from sqlalchemy import Column, String, Text, Integer, Boolean, DateTime, ForeignKey, UniqueConstraint

from app.core.dates import utc_now
from app.db.base import BaseModel


class Document(BaseModel):
    __tablename__ = "documents"
    
    title = Column(String(255), nullable=False)
    content = Column(Text, default="", nullable=False)
    owner_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    is_public = Column(Boolean, default=False, nullable=False)
    is_deleted = Column(Boolean, default=False, nullable=False)
    view_count = Column(Integer, default=0, nullable=False)
    like_count = Column(Integer, default=0, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)


class DocumentVersion(BaseModel):
    __tablename__ = "document_versions"
    __table_args__ = (
        UniqueConstraint("document_id", "version_number", name="uq_document_version_number"),
    )
    
    document_id = Column(Integer, ForeignKey("documents.id"), index=True, nullable=False)
    version_number = Column(Integer, nullable=False)
    title = Column(String(255), nullable=False)
    content = Column(Text, default="", nullable=False)
    change_description = Column(String(500), default="", nullable=False)
    author_id = Column(Integer, ForeignKey("users.id"), nullable=False)
