from typing import Optional, List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete

from app.core.dates import ensure_utc
from app.db.models.file import File as FileModel
from app.domains.files.entities import File


class FileRepository:
    """Репозиторий метаданных вложений"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, file: File) -> File:
        db_file = FileModel(
            file_name=file.file_name,
            original_name=file.original_name,
            file_type=file.file_type,
            file_size=file.file_size,
            storage_path=file.storage_path,
            public_url=file.public_url,
            owner_id=file.owner_id,
            document_id=file.document_id,
            created_at=file.created_at
        )

        self.session.add(db_file)
        await self.session.flush()
        return self._to_domain(db_file)

    async def get_by_id(self, file_id: int) -> Optional[File]:
        result = await self.session.execute(select(FileModel).where(FileModel.id == file_id))
        db_file = result.scalar_one_or_none()
        return self._to_domain(db_file) if db_file else None

    async def get_by_file_name(self, file_name: str) -> Optional[File]:
        """Поиск по сгенерированному имени файла"""
        result = await self.session.execute(select(FileModel).where(FileModel.file_name == file_name))
        db_file = result.scalar_one_or_none()
        return self._to_domain(db_file) if db_file else None

    async def get_by_owner(self, owner_id: int) -> List[File]:
        result = await self.session.execute(
            select(FileModel)
            .where(FileModel.owner_id == owner_id)
            .order_by(FileModel.created_at.desc(), FileModel.id.desc())
        )
        return [self._to_domain(f) for f in result.scalars().all()]

    async def get_by_document(self, document_id: int) -> List[File]:
        result = await self.session.execute(
            select(FileModel)
            .where(FileModel.document_id == document_id)
            .order_by(FileModel.created_at.desc(), FileModel.id.desc())
        )
        return [self._to_domain(f) for f in result.scalars().all()]

    async def delete(self, file_id: int) -> bool:
        result = await self.session.execute(delete(FileModel).where(FileModel.id == file_id))
        return result.rowcount > 0

    @staticmethod
    def _to_domain(db_file: FileModel) -> File:
        """Преобразование модели БД в доменную сущность"""
        return File(
            id=db_file.id,
            file_name=db_file.file_name,
            original_name=db_file.original_name,
            file_type=db_file.file_type,
            file_size=db_file.file_size,
            storage_path=db_file.storage_path,
            public_url=db_file.public_url,
            owner_id=db_file.owner_id,
            document_id=db_file.document_id,
            created_at=ensure_utc(db_file.created_at)
        )
