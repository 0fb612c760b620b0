from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from app.core.auth import get_current_user
from app.core.db import get_db
from app.domains.collaboration.ledger import ActivityLedger, VersionLedger
from app.domains.collaboration.schemas import (
    InviteRequest, PermissionUpdate, CollaboratorResponse, ActivityResponse
)
from app.domains.collaboration.services import CollaboratorRegistry
from app.domains.documents.schemas import (
    DocumentResponse, DocumentVersionCreate, DocumentVersionResponse
)
from app.domains.identity.entities import User

router = APIRouter(prefix="/api/documents", tags=["collaboration"])


@router.get("/{document_id}/collaborators", response_model=List[CollaboratorResponse])
async def get_collaborators(
    document_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Активные соавторы документа"""
    collaborators = await CollaboratorRegistry(db).list_collaborators(document_id, current_user)
    return [CollaboratorResponse.from_entity(c) for c in collaborators]


@router.post(
    "/{document_id}/invite",
    response_model=CollaboratorResponse,
    status_code=status.HTTP_201_CREATED
)
async def invite_collaborator(
    document_id: int,
    invite: InviteRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Приглашение соавтора по email"""
    collaborator = await CollaboratorRegistry(db).invite(
        document_id, current_user, invite.email, invite.permission
    )
    return CollaboratorResponse.from_entity(collaborator)


@router.put("/{document_id}/collaborators/{user_id}", response_model=CollaboratorResponse)
async def update_collaborator_permission(
    document_id: int,
    user_id: int,
    update: PermissionUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Смена прав соавтора владельцем"""
    collaborator = await CollaboratorRegistry(db).update_permission(
        document_id, current_user, user_id, update.permission
    )
    return CollaboratorResponse.from_entity(collaborator)


@router.get("/{document_id}/versions", response_model=List[DocumentVersionResponse])
async def get_versions(
    document_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """История версий, новые первыми"""
    versions = await VersionLedger(db).list_versions(document_id, current_user)
    return [DocumentVersionResponse.from_entity(v) for v in versions]


@router.post(
    "/{document_id}/versions",
    response_model=DocumentVersionResponse,
    status_code=status.HTTP_201_CREATED
)
async def create_version(
    document_id: int,
    version_data: DocumentVersionCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Ручной снимок текущего состояния"""
    version = await VersionLedger(db).create_snapshot(
        document_id, current_user, version_data.change_description
    )
    return DocumentVersionResponse.from_entity(version)


@router.post("/{document_id}/versions/{version_id}/restore", response_model=DocumentResponse)
async def restore_version(
    document_id: int,
    version_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Восстановление документа из версии"""
    document = await VersionLedger(db).restore_version(document_id, version_id, current_user)
    return DocumentResponse.from_entity(document)


@router.get("/{document_id}/activities", response_model=List[ActivityResponse])
async def get_activities(
    document_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Последние события документа"""
    activities = await ActivityLedger(db).get_activities(document_id, current_user)
    return [ActivityResponse.from_entity(a) for a in activities]
