"""Журнал активности и история версий документа.

Обе последовательности только дополняются. Восстановление версии не
переписывает историю: текущее состояние сначала сохраняется новой версией.
"""
import logging
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.db import unit_of_work
from app.core.exceptions import NotFound, ValidationFailed
from app.db.repositories.collaboration_repository import DocumentActivityRepository
from app.db.repositories.document_repository import DocumentVersionRepository
from app.domains.collaboration.entities import ActivityType, DocumentActivity
from app.domains.documents.entities import Document, DocumentVersion
from app.domains.documents.services import DocumentService
from app.domains.identity.entities import User

logger = logging.getLogger(__name__)


class ActivityLedger:
    """Журнал активности документа"""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.activity_repository = DocumentActivityRepository(session)
        self.document_service = DocumentService(session)

    async def record_activity(
        self,
        document: Document,
        actor: User,
        activity_type: ActivityType,
        description: str
    ) -> DocumentActivity:
        """Добавление записи; вызывается внутри транзакции вызывающего"""
        activity = DocumentActivity(
            id=None,
            document_id=document.id,
            user_id=actor.id,
            activity_type=activity_type,
            description=description,
            user=actor
        )
        return await self.activity_repository.create(activity)

    async def list_recent_activities(
        self,
        document: Document,
        limit: Optional[int] = None
    ) -> List[DocumentActivity]:
        """Последние ``limit`` записей, новые первыми"""
        return await self.activity_repository.get_recent_by_document(
            document.id,
            limit=limit or settings.activity_feed_limit
        )

    async def get_activities(self, document_id: int, user: User) -> List[DocumentActivity]:
        """Лента активности для пользователя с доступом к документу"""
        document = await self.document_service.require_access(document_id, user)
        return await self.list_recent_activities(document)


class VersionLedger:
    """История версий документа"""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.version_repository = DocumentVersionRepository(session)
        self.document_service = DocumentService(session)
        self.activity_ledger = ActivityLedger(session)

    async def snapshot_version(
        self,
        document: Document,
        author: User,
        change_description: str
    ) -> DocumentVersion:
        """Снимок текущего title/content; номер = количество версий + 1"""
        version_number = await self.version_repository.count_by_document(document.id) + 1
        version = DocumentVersion.snapshot_of(
            document,
            version_number=version_number,
            change_description=change_description,
            author_id=author.id
        )
        version.author = author
        return await self.version_repository.create(version)

    async def create_snapshot(
        self,
        document_id: int,
        author: User,
        change_description: str = ""
    ) -> DocumentVersion:
        """Ручной снимок; требуется право на редактирование"""
        document = await self.document_service.require_edit_permission(document_id, author)
        async with unit_of_work(self.session):
            version = await self.snapshot_version(document, author, change_description)
        logger.info(f"Snapshot v{version.version_number} of document {document_id} by user {author.id}")
        return version

    async def list_versions(self, document_id: int, user: User) -> List[DocumentVersion]:
        """Все версии, новые первыми"""
        document = await self.document_service.require_access(document_id, user)
        return await self.version_repository.get_by_document(document.id)

    async def restore_version(self, document_id: int, target_version_id: int, actor: User) -> Document:
        """Восстановление документа из версии одной транзакцией.

        1. Проверка версии и ее принадлежности документу.
        2. Текущее состояние сохраняется новой версией.
        3. title/content документа перезаписываются из целевой версии.
        4. В журнал добавляется VERSION_RESTORED.
        """
        document = await self.document_service.require_access(document_id, actor)

        target = await self.version_repository.get_by_id(target_version_id)
        if not target:
            raise NotFound("Version not found", version_id=target_version_id)
        if target.document_id != document.id:
            raise ValidationFailed("Version does not belong to this document", field="version_id")

        description = f"restored to version {target.version_number}"
        async with unit_of_work(self.session):
            await self.snapshot_version(document, actor, description)

            document.title = target.title
            document.content = target.content
            document.touch()
            await self.document_service.document_repository.update(document)

            await self.activity_ledger.record_activity(
                document, actor, ActivityType.VERSION_RESTORED, description
            )

        logger.info(f"Document {document_id} restored to version {target.version_number} by user {actor.id}")
        return document
