from typing import Optional, List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import Select, select, update, func

from app.core.dates import ensure_utc
from app.db.models.document import Document as DocumentModel, DocumentVersion as DocumentVersionModel
from app.db.models.user import User as UserModel
from app.db.repositories.user_repository import UserRepository
from app.domains.documents.entities import Document, DocumentVersion


def active_documents() -> Select:
    """Единственная точка фильтрации мягко удаленных документов"""
    return select(DocumentModel).where(DocumentModel.is_deleted.is_(False))


class DocumentRepository:
    """Репозиторий для работы с документами"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, document: Document) -> Document:
        """Создание нового документа"""
        db_document = DocumentModel(
            title=document.title,
            content=document.content,
            owner_id=document.owner_id,
            is_public=document.is_public,
            is_deleted=False,
            view_count=0,
            like_count=0,
            created_at=document.created_at,
            updated_at=document.updated_at
        )

        self.session.add(db_document)
        await self.session.flush()
        return self._to_domain(db_document)

    async def get_by_id(self, document_id: int, include_deleted: bool = False) -> Optional[Document]:
        """Получение документа по id; удаленные только по явному запросу"""
        query = select(DocumentModel) if include_deleted else active_documents()
        result = await self.session.execute(query.where(DocumentModel.id == document_id))
        db_document = result.scalar_one_or_none()
        return self._to_domain(db_document) if db_document else None

    async def get_by_owner(self, owner_id: int) -> List[Document]:
        """Получение документов по владельцу"""
        result = await self.session.execute(
            active_documents()
            .where(DocumentModel.owner_id == owner_id)
            .order_by(DocumentModel.updated_at.desc(), DocumentModel.id.desc())
        )
        return [self._to_domain(doc) for doc in result.scalars().all()]

    async def get_public(self) -> List[Document]:
        """Публичные документы"""
        result = await self.session.execute(
            active_documents()
            .where(DocumentModel.is_public.is_(True))
            .order_by(DocumentModel.updated_at.desc(), DocumentModel.id.desc())
        )
        return [self._to_domain(doc) for doc in result.scalars().all()]

    async def search_by_title(self, keyword: str, owner_id: Optional[int] = None) -> List[Document]:
        """Поиск по подстроке заголовка: среди своих документов или среди публичных"""
        query = active_documents().where(DocumentModel.title.contains(keyword, autoescape=True))

        if owner_id is not None:
            query = query.where(DocumentModel.owner_id == owner_id)
        else:
            query = query.where(DocumentModel.is_public.is_(True))

        result = await self.session.execute(
            query.order_by(DocumentModel.updated_at.desc(), DocumentModel.id.desc())
        )
        return [self._to_domain(doc) for doc in result.scalars().all()]

    async def update(self, document: Document) -> Document:
        """Обновление документа"""
        stmt = (
            update(DocumentModel)
            .where(DocumentModel.id == document.id)
            .values(
                title=document.title,
                content=document.content,
                is_public=document.is_public,
                is_deleted=document.is_deleted,
                view_count=document.view_count,
                like_count=document.like_count,
                updated_at=document.updated_at
            )
        )

        await self.session.execute(stmt)
        return document

    @staticmethod
    def _to_domain(db_document: DocumentModel) -> Document:
        """Преобразование модели БД в доменную сущность"""
        return Document(
            id=db_document.id,
            title=db_document.title,
            content=db_document.content or "",
            owner_id=db_document.owner_id,
            is_public=db_document.is_public,
            is_deleted=db_document.is_deleted,
            view_count=db_document.view_count,
            like_count=db_document.like_count,
            created_at=ensure_utc(db_document.created_at),
            updated_at=ensure_utc(db_document.updated_at)
        )


class DocumentVersionRepository:
    """Репозиторий для работы с версиями документов"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, version: DocumentVersion) -> DocumentVersion:
        """Создание новой версии документа"""
        db_version = DocumentVersionModel(
            document_id=version.document_id,
            version_number=version.version_number,
            title=version.title,
            content=version.content,
            change_description=version.change_description,
            author_id=version.author_id,
            created_at=version.created_at
        )

        self.session.add(db_version)
        await self.session.flush()
        return self._to_domain(db_version, author=version.author)

    async def get_by_id(self, version_id: int) -> Optional[DocumentVersion]:
        """Получение версии по id"""
        result = await self.session.execute(
            select(DocumentVersionModel, UserModel)
            .join(UserModel, UserModel.id == DocumentVersionModel.author_id)
            .where(DocumentVersionModel.id == version_id)
        )
        row = result.one_or_none()
        if not row:
            return None
        return self._to_domain(row[0], author=UserRepository._to_domain(row[1]))

    async def get_by_document(self, document_id: int) -> List[DocumentVersion]:
        """Все версии документа, новые первыми"""
        result = await self.session.execute(
            select(DocumentVersionModel, UserModel)
            .join(UserModel, UserModel.id == DocumentVersionModel.author_id)
            .where(DocumentVersionModel.document_id == document_id)
            .order_by(DocumentVersionModel.version_number.desc())
        )
        return [
            self._to_domain(db_version, author=UserRepository._to_domain(db_user))
            for db_version, db_user in result.all()
        ]

    async def count_by_document(self, document_id: int) -> int:
        """Подсчет количества версий документа"""
        result = await self.session.execute(
            select(func.count(DocumentVersionModel.id))
            .where(DocumentVersionModel.document_id == document_id)
        )
        return result.scalar() or 0

    @staticmethod
    def _to_domain(db_version: DocumentVersionModel, author=None) -> DocumentVersion:
        """Преобразование модели БД в доменную сущность"""
        return DocumentVersion(
            id=db_version.id,
            document_id=db_version.document_id,
            version_number=db_version.version_number,
            title=db_version.title,
            content=db_version.content or "",
            change_description=db_version.change_description or "",
            author_id=db_version.author_id,
            created_at=ensure_utc(db_version.created_at),
            author=author
        )
