import logging
from typing import List
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import unit_of_work
from app.core.exceptions import AlreadyExists, NotFound, ValidationFailed
from app.db.repositories.collaboration_repository import DocumentCollaboratorRepository
from app.domains.collaboration.entities import ActivityType, DocumentCollaborator, Permission
from app.domains.collaboration.ledger import ActivityLedger
from app.domains.documents.entities import Document
from app.domains.documents.services import DocumentService
from app.domains.identity.entities import User
from app.domains.identity.services import IdentityService

logger = logging.getLogger(__name__)


class CollaboratorRegistry:
    """Реестр соавторов документа.

    ``join``/``leave``/``touch_activity`` не коммитят и вызываются
    realtime-движком внутри его транзакции.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.collaborator_repository = DocumentCollaboratorRepository(session)
        self.document_service = DocumentService(session)
        self.activity_ledger = ActivityLedger(session)

    async def join(
        self,
        document: Document,
        user: User,
        default_permission: Permission = Permission.READ
    ) -> DocumentCollaborator:
        """Upsert записи пары: создание с правами по умолчанию или реактивация"""
        collaborator = await self.collaborator_repository.get_by_document_and_user(document.id, user.id)

        if collaborator is None:
            collaborator = DocumentCollaborator(
                id=None,
                document_id=document.id,
                user_id=user.id,
                permission=default_permission,
                user=user
            )
            return await self.collaborator_repository.create(collaborator)

        collaborator.reactivate()
        collaborator.user = user
        return await self.collaborator_repository.update(collaborator)

    async def leave(self, document: Document, user: User) -> None:
        """Снятие присутствия; без записи ничего не делает"""
        collaborator = await self.collaborator_repository.get_by_document_and_user(document.id, user.id)
        if collaborator is None:
            return
        collaborator.deactivate()
        await self.collaborator_repository.update(collaborator)

    async def touch_activity(self, document: Document, user: User) -> None:
        """Обновление last_activity_at; у владельца записи нет"""
        collaborator = await self.collaborator_repository.get_by_document_and_user(document.id, user.id)
        if collaborator is None:
            return
        collaborator.update_activity()
        await self.collaborator_repository.update(collaborator)

    async def invite(
        self,
        document_id: int,
        inviter: User,
        invited_email: str,
        permission: Permission
    ) -> DocumentCollaborator:
        """Приглашение соавтора владельцем документа"""
        document = await self.document_service.require_owner(document_id, inviter, "invite collaborators to")
        invited_user = await IdentityService(self.session).require_user_by_email(invited_email)

        if invited_user.id == document.owner_id:
            raise ValidationFailed("Owner cannot be invited to own document", field="email")

        existing = await self.collaborator_repository.get_by_document_and_user(document.id, invited_user.id)
        if existing is not None and existing.is_active:
            raise AlreadyExists("User is already a collaborator", user_id=invited_user.id)

        async with unit_of_work(self.session):
            if existing is None:
                collaborator = await self.collaborator_repository.create(
                    DocumentCollaborator(
                        id=None,
                        document_id=document.id,
                        user_id=invited_user.id,
                        permission=permission,
                        user=invited_user
                    )
                )
            else:
                # одна запись на пару: неактивную реактивируем с новыми правами
                existing.permission = Permission(permission)
                existing.reactivate()
                existing.user = invited_user
                collaborator = await self.collaborator_repository.update(existing)

            await self.activity_ledger.record_activity(
                document,
                inviter,
                ActivityType.COLLABORATOR_INVITED,
                f"invited {invited_user.username} as a collaborator"
            )

        logger.info(
            f"User {inviter.id} invited user {invited_user.id} to document {document.id} "
            f"with permission {collaborator.permission.value}"
        )
        return collaborator

    async def update_permission(
        self,
        document_id: int,
        owner: User,
        collaborator_user_id: int,
        permission: Permission
    ) -> DocumentCollaborator:
        """Смена уровня прав активного соавтора владельцем"""
        document = await self.document_service.require_owner(document_id, owner, "change permissions on")
        collaborator = await self.collaborator_repository.get_by_document_and_user(document.id, collaborator_user_id)
        if collaborator is None or not collaborator.is_active:
            raise NotFound("Collaborator not found", user_id=collaborator_user_id)

        collaborator.permission = Permission(permission)
        async with unit_of_work(self.session):
            await self.collaborator_repository.update(collaborator)

        collaborator.user = await IdentityService(self.session).get_user_by_id(collaborator_user_id)
        logger.info(f"Permission of user {collaborator_user_id} on document {document.id} set to {collaborator.permission.value}")
        return collaborator

    async def list_collaborators(self, document_id: int, user: User) -> List[DocumentCollaborator]:
        """Активные соавторы с публичными данными пользователей"""
        document = await self.document_service.require_access(document_id, user)
        return await self.collaborator_repository.get_active_by_document(document.id)
