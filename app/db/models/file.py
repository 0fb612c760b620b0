from sqlalchemy import Column, String, Integer, BigInteger, ForeignKey

from app.db.base import BaseModel


class File(BaseModel):
    __tablename__ = "files"
    
    file_name = Column(String(255), unique=True, index=True, nullable=False)
    original_name = Column(String(255), nullable=False)
    file_type = Column(String(255), nullable=True)
    file_size = Column(BigInteger, nullable=False)
    storage_path = Column(String(1024), nullable=False)
    public_url = Column(String(1024), nullable=False)
    owner_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    document_id = Column(Integer, ForeignKey("documents.id"), index=True, nullable=True)
