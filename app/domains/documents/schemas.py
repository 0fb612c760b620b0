from pydantic import BaseModel, Field, field_validator, ConfigDict
from typing import Optional, List
from datetime import datetime

from app.domains.documents.entities import Document, DocumentVersion


class DocumentBase(BaseModel):
    """Базовая схема документа"""
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(default="", max_length=1000000)  # 1MB max content
    is_public: bool = False

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        if not v.strip():
            raise ValueError('Title cannot be empty')
        return v.strip()


class DocumentCreate(DocumentBase):
    """Схема для создания документа"""
    pass


class DocumentUpdate(BaseModel):
    """Схема для обновления документа"""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    content: Optional[str] = Field(None, max_length=1000000)
    is_public: Optional[bool] = None

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        if v is not None and not v.strip():
            raise ValueError('Title cannot be empty')
        return v.strip() if v else v


class DocumentResponse(DocumentBase):
    """Схема для ответа с данными документа"""
    id: int
    owner_id: int
    view_count: int
    like_count: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_entity(cls, document: Document) -> "DocumentResponse":
        return cls(
            id=document.id,
            title=document.title,
            content=document.content,
            is_public=document.is_public,
            owner_id=document.owner_id,
            view_count=document.view_count,
            like_count=document.like_count,
            created_at=document.created_at,
            updated_at=document.updated_at
        )


class DocumentListResponse(BaseModel):
    """Схема для списка документов"""
    documents: List[DocumentResponse]
    total: int


class VersionAuthor(BaseModel):
    id: int
    username: str


class DocumentVersionResponse(BaseModel):
    """Схема для ответа с данными версии документа"""
    id: int
    document_id: int
    version_number: int
    title: str
    content: str
    change_description: str
    author: VersionAuthor
    created_at: datetime

    @classmethod
    def from_entity(cls, version: DocumentVersion) -> "DocumentVersionResponse":
        author = version.author
        return cls(
            id=version.id,
            document_id=version.document_id,
            version_number=version.version_number,
            title=version.title,
            content=version.content,
            change_description=version.change_description,
            author=VersionAuthor(
                id=version.author_id,
                username=author.username if author else ""
            ),
            created_at=version.created_at
        )


class DocumentVersionCreate(BaseModel):
    """Схема для ручного снимка версии"""
    change_description: str = Field(default="", max_length=500)
