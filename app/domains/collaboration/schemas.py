from pydantic import BaseModel, EmailStr
from datetime import datetime

from app.domains.collaboration.entities import ActivityType, DocumentActivity, DocumentCollaborator, Permission
from app.domains.identity.schemas import UserSummary


class InviteRequest(BaseModel):
    """Схема приглашения соавтора"""
    email: EmailStr
    permission: Permission = Permission.READ


class PermissionUpdate(BaseModel):
    permission: Permission


class CollaboratorResponse(BaseModel):
    """Активный соавтор с публичными данными пользователя"""
    id: int
    document_id: int
    user: UserSummary
    permission: Permission
    is_active: bool
    joined_at: datetime
    last_activity_at: datetime

    @classmethod
    def from_entity(cls, collaborator: DocumentCollaborator) -> "CollaboratorResponse":
        return cls(
            id=collaborator.id,
            document_id=collaborator.document_id,
            user=UserSummary(**collaborator.user.public_identity()),
            permission=collaborator.permission,
            is_active=collaborator.is_active,
            joined_at=collaborator.joined_at,
            last_activity_at=collaborator.last_activity_at
        )


class ActivityActor(BaseModel):
    id: int
    username: str


class ActivityResponse(BaseModel):
    """Запись журнала активности"""
    id: int
    document_id: int
    activity_type: ActivityType
    description: str
    user: ActivityActor
    created_at: datetime

    @classmethod
    def from_entity(cls, activity: DocumentActivity) -> "ActivityResponse":
        return cls(
            id=activity.id,
            document_id=activity.document_id,
            activity_type=activity.activity_type,
            description=activity.description,
            user=ActivityActor(
                id=activity.user_id,
                username=activity.user.username if activity.user else ""
            ),
            created_at=activity.created_at
        )
