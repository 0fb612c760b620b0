from app.domains.collaboration.entities import (
    Permission, ActivityType, DocumentCollaborator, DocumentActivity
)
from app.domains.collaboration.schemas import (
    InviteRequest, PermissionUpdate, CollaboratorResponse, ActivityActor, ActivityResponse
)

__all__ = [
    "Permission", "ActivityType", "DocumentCollaborator", "DocumentActivity",
    "InviteRequest", "PermissionUpdate", "CollaboratorResponse", "ActivityActor", "ActivityResponse"
]
