from datetime import datetime
from typing import Optional, TYPE_CHECKING

from app.core.dates import utc_now

if TYPE_CHECKING:
    from app.domains.collaboration.entities import DocumentCollaborator
    from app.domains.identity.entities import User


class Document:
    """Сущность документа домена Documents"""

    def __init__(
        self,
        id: Optional[int],
        title: str,
        content: str = "",
        owner_id: Optional[int] = None,
        is_public: bool = False,
        is_deleted: bool = False,
        view_count: int = 0,
        like_count: int = 0,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None
    ):
        self.id = id
        self.title = title
        self.content = content
        self.owner_id = owner_id
        self.is_public = is_public
        self.is_deleted = is_deleted
        self.view_count = view_count
        self.like_count = like_count
        self.created_at = created_at or utc_now()
        self.updated_at = updated_at or utc_now()

    def update_content(self, new_content: str) -> None:
        """Полная замена содержимого (last write wins)"""
        self.content = new_content
        self.touch()

    def update_title(self, new_title: str) -> None:
        """Обновление заголовка документа"""
        self.title = new_title
        self.touch()

    def touch(self) -> None:
        self.updated_at = utc_now()

    def register_view(self) -> None:
        """Счетчик просмотров; инкремент без изоляции"""
        self.view_count += 1

    def soft_delete(self) -> None:
        self.is_deleted = True

    @classmethod
    def create_document(
        cls,
        title: str,
        owner_id: int,
        content: str = "",
        is_public: bool = False
    ) -> "Document":
        """Создание нового документа"""
        return cls(
            id=None,
            title=title,
            content=content,
            owner_id=owner_id,
            is_public=is_public
        )

    def __eq__(self, other) -> bool:
        if not isinstance(other, Document):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(("document", self.id))

    def __repr__(self) -> str:
        return f"Document(id={self.id}, title={self.title}, owner_id={self.owner_id})"


class DocumentVersion:
    """Неизменяемый снимок документа"""

    def __init__(
        self,
        id: Optional[int],
        document_id: int,
        version_number: int,
        title: str,
        content: str,
        change_description: str,
        author_id: int,
        created_at: Optional[datetime] = None,
        author: Optional["User"] = None
    ):
        self.id = id
        self.document_id = document_id
        self.version_number = version_number
        self.title = title
        self.content = content
        self.change_description = change_description
        self.author_id = author_id
        self.created_at = created_at or utc_now()
        self.author = author

    @classmethod
    def snapshot_of(
        cls,
        document: Document,
        version_number: int,
        change_description: str,
        author_id: int
    ) -> "DocumentVersion":
        """Снимок текущего состояния документа"""
        return cls(
            id=None,
            document_id=document.id,
            version_number=version_number,
            title=document.title,
            content=document.content,
            change_description=change_description,
            author_id=author_id
        )

    def __eq__(self, other) -> bool:
        if not isinstance(other, DocumentVersion):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(("document_version", self.id))

    def __repr__(self) -> str:
        return f"DocumentVersion(id={self.id}, document_id={self.document_id}, version={self.version_number})"


def has_document_access(
    document: Document,
    user: "User",
    collaborator: Optional["DocumentCollaborator"]
) -> bool:
    """Владелец или активный соавтор с любым уровнем прав"""
    if user.id == document.owner_id:
        return True
    return (
        collaborator is not None
        and collaborator.document_id == document.id
        and collaborator.user_id == user.id
        and collaborator.is_active
    )


def has_edit_permission(
    document: Document,
    user: "User",
    collaborator: Optional["DocumentCollaborator"]
) -> bool:
    """Владелец или активный соавтор с правом edit"""
    if user.id == document.owner_id:
        return True
    return has_document_access(document, user, collaborator) and collaborator.can_edit()


class DocumentAccess:
    """Права пользователя на конкретный документ"""

    def __init__(
        self,
        document: Document,
        user: "User",
        collaborator: Optional["DocumentCollaborator"] = None
    ):
        self.document = document
        self.user = user
        self.collaborator = collaborator

    def is_owner(self) -> bool:
        """Проверка является ли пользователь владельцем"""
        return self.user.id == self.document.owner_id

    def can_access(self) -> bool:
        """Проверка доступа пользователя к документу"""
        return has_document_access(self.document, self.user, self.collaborator)

    def can_edit(self) -> bool:
        """Проверка прав на редактирование"""
        return has_edit_permission(self.document, self.user, self.collaborator)
