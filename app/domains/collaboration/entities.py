from datetime import datetime
from enum import Enum
from typing import Optional, TYPE_CHECKING

from app.core.dates import utc_now

if TYPE_CHECKING:
    from app.domains.identity.entities import User


class Permission(str, Enum):
    """Уровень прав соавтора"""
    READ = "read"
    EDIT = "edit"


class ActivityType(str, Enum):
    """Типы событий журнала активности"""
    USER_JOINED = "USER_JOINED"
    USER_LEFT = "USER_LEFT"
    COLLABORATOR_INVITED = "COLLABORATOR_INVITED"
    VERSION_RESTORED = "VERSION_RESTORED"
    CONTENT_EDITED = "CONTENT_EDITED"
    TITLE_CHANGED = "TITLE_CHANGED"


class DocumentCollaborator:
    """Запись присутствия соавтора в документе.

    Для пары (документ, пользователь) существует не более одной записи:
    повторный join реактивирует ее, leave только снимает флаг is_active.
    """

    def __init__(
        self,
        id: Optional[int],
        document_id: int,
        user_id: int,
        permission: Permission = Permission.READ,
        is_active: bool = True,
        joined_at: Optional[datetime] = None,
        last_activity_at: Optional[datetime] = None,
        user: Optional["User"] = None
    ):
        self.id = id
        self.document_id = document_id
        self.user_id = user_id
        self.permission = Permission(permission)
        self.is_active = is_active
        self.joined_at = joined_at or utc_now()
        self.last_activity_at = last_activity_at or utc_now()
        self.user = user

    def can_edit(self) -> bool:
        return self.is_active and self.permission == Permission.EDIT

    def reactivate(self) -> None:
        """Повторное присоединение к документу"""
        self.is_active = True
        self.update_activity()

    def deactivate(self) -> None:
        self.is_active = False

    def update_activity(self) -> None:
        """Обновление времени последней активности"""
        self.last_activity_at = utc_now()

    def __repr__(self) -> str:
        return (
            f"DocumentCollaborator(doc={self.document_id}, user={self.user_id}, "
            f"permission={self.permission.value}, active={self.is_active})"
        )


class DocumentActivity:
    """Запись журнала активности, только добавление"""

    def __init__(
        self,
        id: Optional[int],
        document_id: int,
        user_id: int,
        activity_type: ActivityType,
        description: str,
        created_at: Optional[datetime] = None,
        user: Optional["User"] = None
    ):
        self.id = id
        self.document_id = document_id
        self.user_id = user_id
        self.activity_type = ActivityType(activity_type)
        self.description = description
        self.created_at = created_at or utc_now()
        self.user = user

    def __repr__(self) -> str:
        return f"DocumentActivity(doc={self.document_id}, type={self.activity_type.value})"
