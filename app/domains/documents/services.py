import logging
from typing import Optional, List
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import unit_of_work
from app.core.exceptions import AccessDenied, NotFound
from app.db.repositories.collaboration_repository import DocumentCollaboratorRepository
from app.db.repositories.document_repository import DocumentRepository
from app.domains.documents.entities import Document, DocumentAccess
from app.domains.documents.schemas import DocumentCreate, DocumentUpdate
from app.domains.identity.entities import User

logger = logging.getLogger(__name__)


class DocumentService:
    """Сервис для работы с документами.

    Методы ``replace_content``/``rename``/``get_access`` не коммитят: их
    вызывают другие сервисы внутри своей транзакции. Остальные публичные
    методы сами открывают ``unit_of_work``.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.document_repository = DocumentRepository(session)
        self.collaborator_repository = DocumentCollaboratorRepository(session)

    async def require_document(self, document_id: int) -> Document:
        """Активный (не удаленный) документ или NotFound"""
        document = await self.document_repository.get_by_id(document_id)
        if not document:
            raise NotFound("Document not found", document_id=document_id)
        return document

    async def get_access(self, document: Document, user: User) -> DocumentAccess:
        """Права пользователя на документ"""
        collaborator = None
        if user.id != document.owner_id:
            collaborator = await self.collaborator_repository.get_by_document_and_user(document.id, user.id)
        return DocumentAccess(document, user, collaborator)

    async def require_access(self, document_id: int, user: User) -> Document:
        """Документ, к которому у пользователя есть доступ на чтение"""
        document = await self.require_document(document_id)
        access = await self.get_access(document, user)
        if not access.can_access():
            raise AccessDenied(document_id=document_id)
        return document

    async def require_readable(self, document_id: int, user: Optional[User] = None) -> Document:
        """Документ для чтения: публичный или с доступом пользователя"""
        document = await self.require_document(document_id)
        if not document.is_public:
            if user is None:
                raise AccessDenied(document_id=document_id)
            access = await self.get_access(document, user)
            if not access.can_access():
                raise AccessDenied(document_id=document_id)
        return document

    async def require_edit_permission(self, document_id: int, user: User) -> Document:
        """Документ, который пользователь может редактировать"""
        document = await self.require_document(document_id)
        access = await self.get_access(document, user)
        if not access.can_edit():
            raise AccessDenied(document_id=document_id)
        return document

    async def require_owner(self, document_id: int, user: User, action: str = "modify") -> Document:
        document = await self.require_document(document_id)
        if document.owner_id != user.id:
            raise AccessDenied(f"Only the owner can {action} this document", document_id=document_id)
        return document

    async def create_document(self, document_data: DocumentCreate, owner: User) -> Document:
        """Создание нового документа"""
        document = Document.create_document(
            title=document_data.title,
            owner_id=owner.id,
            content=document_data.content,
            is_public=document_data.is_public
        )

        async with unit_of_work(self.session):
            created = await self.document_repository.create(document)
        logger.info(f"Document {created.id} created by user {owner.id}")
        return created

    async def get_document(self, document_id: int, user: Optional[User] = None) -> Document:
        """Чтение документа с инкрементом счетчика просмотров.

        Читать могут: все для публичного документа, владелец и активные
        соавторы. Инкремент view_count не атомарен (read-modify-write),
        параллельные чтения могут терять приращения.
        """
        document = await self.require_readable(document_id, user)

        document.register_view()
        async with unit_of_work(self.session):
            await self.document_repository.update(document)
        return document

    async def update_document(
        self,
        document_id: int,
        update_data: DocumentUpdate,
        user: User
    ) -> Document:
        """Обновление документа владельцем"""
        document = await self.require_owner(document_id, user, "edit")

        if update_data.title is not None:
            document.title = update_data.title
        if update_data.content is not None:
            document.content = update_data.content
        if update_data.is_public is not None:
            document.is_public = update_data.is_public
        document.touch()

        async with unit_of_work(self.session):
            await self.document_repository.update(document)
        return document

    async def delete_document(self, document_id: int, user: User) -> None:
        """Мягкое удаление: запись остается в БД с is_deleted=True"""
        document = await self.require_owner(document_id, user, "delete")
        document.soft_delete()

        async with unit_of_work(self.session):
            await self.document_repository.update(document)
        logger.info(f"Document {document_id} soft-deleted by user {user.id}")

    async def get_user_documents(self, user: User) -> List[Document]:
        """Получение документов пользователя"""
        return await self.document_repository.get_by_owner(user.id)

    async def get_public_documents(self) -> List[Document]:
        return await self.document_repository.get_public()

    async def search_documents(self, keyword: str, user: Optional[User] = None) -> List[Document]:
        """Поиск по заголовку: свои документы для пользователя, публичные для анонима"""
        return await self.document_repository.search_by_title(
            keyword,
            owner_id=user.id if user else None
        )

    async def replace_content(self, document: Document, content: str) -> Document:
        """Полная замена содержимого без блокировок: выигрывает последняя запись"""
        document.update_content(content)
        return await self.document_repository.update(document)

    async def rename(self, document: Document, title: str) -> Document:
        document.update_title(title)
        return await self.document_repository.update(document)
