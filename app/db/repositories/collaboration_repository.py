from typing import Optional, List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, and_

from app.core.dates import ensure_utc
from app.db.models.collaboration import (
    DocumentCollaborator as DocumentCollaboratorModel,
    DocumentActivity as DocumentActivityModel
)
from app.db.models.user import User as UserModel
from app.db.repositories.user_repository import UserRepository
from app.domains.collaboration.entities import DocumentCollaborator, DocumentActivity


class DocumentCollaboratorRepository:
    """Репозиторий записей присутствия соавторов"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, collaborator: DocumentCollaborator) -> DocumentCollaborator:
        """Создание записи соавтора"""
        db_collaborator = DocumentCollaboratorModel(
            document_id=collaborator.document_id,
            user_id=collaborator.user_id,
            permission=collaborator.permission.value,
            is_active=collaborator.is_active,
            joined_at=collaborator.joined_at,
            last_activity_at=collaborator.last_activity_at
        )

        self.session.add(db_collaborator)
        await self.session.flush()
        return self._to_domain(db_collaborator, user=collaborator.user)

    async def get_by_document_and_user(
        self,
        document_id: int,
        user_id: int
    ) -> Optional[DocumentCollaborator]:
        """Каноническая запись пары (документ, пользователь), активная или нет"""
        result = await self.session.execute(
            select(DocumentCollaboratorModel).where(
                and_(
                    DocumentCollaboratorModel.document_id == document_id,
                    DocumentCollaboratorModel.user_id == user_id
                )
            )
        )
        db_collaborator = result.scalar_one_or_none()
        return self._to_domain(db_collaborator) if db_collaborator else None

    async def get_active_by_document(self, document_id: int) -> List[DocumentCollaborator]:
        """Активные соавторы документа вместе с данными пользователя"""
        result = await self.session.execute(
            select(DocumentCollaboratorModel, UserModel)
            .join(UserModel, UserModel.id == DocumentCollaboratorModel.user_id)
            .where(
                and_(
                    DocumentCollaboratorModel.document_id == document_id,
                    DocumentCollaboratorModel.is_active.is_(True)
                )
            )
            .order_by(DocumentCollaboratorModel.joined_at.asc(), DocumentCollaboratorModel.id.asc())
        )
        return [
            self._to_domain(db_collaborator, user=UserRepository._to_domain(db_user))
            for db_collaborator, db_user in result.all()
        ]

    async def update(self, collaborator: DocumentCollaborator) -> DocumentCollaborator:
        """Обновление записи соавтора"""
        stmt = (
            update(DocumentCollaboratorModel)
            .where(DocumentCollaboratorModel.id == collaborator.id)
            .values(
                permission=collaborator.permission.value,
                is_active=collaborator.is_active,
                last_activity_at=collaborator.last_activity_at
            )
        )

        await self.session.execute(stmt)
        return collaborator

    @staticmethod
    def _to_domain(db_collaborator: DocumentCollaboratorModel, user=None) -> DocumentCollaborator:
        """Преобразование модели БД в доменную сущность"""
        return DocumentCollaborator(
            id=db_collaborator.id,
            document_id=db_collaborator.document_id,
            user_id=db_collaborator.user_id,
            permission=db_collaborator.permission,
            is_active=db_collaborator.is_active,
            joined_at=ensure_utc(db_collaborator.joined_at),
            last_activity_at=ensure_utc(db_collaborator.last_activity_at),
            user=user
        )


class DocumentActivityRepository:
    """Журнал активности: только вставка и чтение"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, activity: DocumentActivity) -> DocumentActivity:
        """Добавление записи в журнал"""
        db_activity = DocumentActivityModel(
            document_id=activity.document_id,
            user_id=activity.user_id,
            activity_type=activity.activity_type.value,
            description=activity.description,
            created_at=activity.created_at
        )

        self.session.add(db_activity)
        await self.session.flush()
        return self._to_domain(db_activity, user=activity.user)

    async def get_recent_by_document(self, document_id: int, limit: int = 10) -> List[DocumentActivity]:
        """Последние записи журнала документа, новые первыми"""
        result = await self.session.execute(
            select(DocumentActivityModel, UserModel)
            .join(UserModel, UserModel.id == DocumentActivityModel.user_id)
            .where(DocumentActivityModel.document_id == document_id)
            .order_by(DocumentActivityModel.created_at.desc(), DocumentActivityModel.id.desc())
            .limit(limit)
        )
        return [
            self._to_domain(db_activity, user=UserRepository._to_domain(db_user))
            for db_activity, db_user in result.all()
        ]

    @staticmethod
    def _to_domain(db_activity: DocumentActivityModel, user=None) -> DocumentActivity:
        """Преобразование модели БД в доменную сущность"""
        return DocumentActivity(
            id=db_activity.id,
            document_id=db_activity.document_id,
            user_id=db_activity.user_id,
            activity_type=db_activity.activity_type,
            description=db_activity.description or "",
            created_at=ensure_utc(db_activity.created_at),
            user=user
        )
