from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from app.core.auth import get_current_user, get_optional_user
from app.core.db import get_db
from app.domains.documents.schemas import (
    DocumentCreate, DocumentUpdate, DocumentResponse, DocumentListResponse
)
from app.domains.documents.services import DocumentService
from app.domains.identity.entities import User

router = APIRouter(prefix="/api/documents", tags=["documents"])


def _list_response(documents) -> DocumentListResponse:
    return DocumentListResponse(
        documents=[DocumentResponse.from_entity(doc) for doc in documents],
        total=len(documents)
    )


@router.post("", response_model=DocumentResponse, status_code=status.HTTP_201_CREATED)
async def create_document(
    document_data: DocumentCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Создание нового документа"""
    document_service = DocumentService(db)
    document = await document_service.create_document(document_data, current_user)
    return DocumentResponse.from_entity(document)


@router.get("", response_model=DocumentListResponse)
async def get_user_documents(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Документы текущего пользователя"""
    documents = await DocumentService(db).get_user_documents(current_user)
    return _list_response(documents)


@router.get("/public", response_model=DocumentListResponse)
async def get_public_documents(db: AsyncSession = Depends(get_db)):
    """Публичные документы, доступны без авторизации"""
    documents = await DocumentService(db).get_public_documents()
    return _list_response(documents)


@router.get("/search", response_model=DocumentListResponse)
async def search_documents(
    keyword: str = Query(..., min_length=1),
    current_user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db)
):
    """Поиск по заголовку: свои документы либо публичные для анонима"""
    documents = await DocumentService(db).search_documents(keyword, current_user)
    return _list_response(documents)


@router.get("/{document_id}", response_model=DocumentResponse)
async def get_document(
    document_id: int,
    current_user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db)
):
    """Получение документа по id"""
    document = await DocumentService(db).get_document(document_id, current_user)
    return DocumentResponse.from_entity(document)


@router.put("/{document_id}", response_model=DocumentResponse)
async def update_document(
    document_id: int,
    update_data: DocumentUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Обновление документа владельцем"""
    document = await DocumentService(db).update_document(document_id, update_data, current_user)
    return DocumentResponse.from_entity(document)


@router.delete("/{document_id}")
async def delete_document(
    document_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Мягкое удаление документа"""
    await DocumentService(db).delete_document(document_id, current_user)
    return {"message": "Document deleted successfully"}
