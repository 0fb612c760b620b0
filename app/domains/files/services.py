import logging
from typing import List, Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import unit_of_work
from app.core.exceptions import AccessDenied, NotFound, StorageFailure, ValidationFailed
from app.db.repositories.file_repository import FileRepository
from app.domains.documents.services import DocumentService
from app.domains.files.entities import File
from app.domains.identity.entities import User
from app.infrastructure.storage.local import BlobStore, LocalBlobStore

logger = logging.getLogger(__name__)

DOWNLOAD_URL_PREFIX = "/api/files/download"


class FileService:
    """Вложения: запись в БД и blob в хранилище меняются согласованно.

    При загрузке blob пишется после проверки доступа и удаляется, если
    запись сохранить не удалось. При удалении запись удаляется в
    транзакции, затем blob; ошибка любого шага откатывает транзакцию.
    """

    def __init__(self, session: AsyncSession, blob_store: Optional[BlobStore] = None):
        self.session = session
        self.file_repository = FileRepository(session)
        self.document_service = DocumentService(session)
        self.blob_store = blob_store or LocalBlobStore()

    async def upload(
        self,
        owner: User,
        filename: Optional[str],
        content_type: Optional[str],
        data: bytes,
        document_id: Optional[int] = None
    ) -> File:
        """Загрузка файла, опционально с привязкой к документу"""
        if not data:
            raise ValidationFailed("Please select a file to upload", field="file")

        if document_id is not None:
            await self.document_service.require_access(document_id, owner)

        file_name = File.generate_file_name(filename)
        storage_path = await self.blob_store.put(file_name, data)

        file = File(
            id=None,
            file_name=file_name,
            original_name=filename or file_name,
            file_type=content_type,
            file_size=len(data),
            storage_path=storage_path,
            public_url=f"{DOWNLOAD_URL_PREFIX}/{file_name}",
            owner_id=owner.id,
            document_id=document_id
        )

        try:
            async with unit_of_work(self.session):
                created = await self.file_repository.create(file)
        except StorageFailure:
            # Компенсация: blob без записи не оставляем
            logger.error(f"Failed to save file record {file_name}, removing blob")
            await self.blob_store.delete(storage_path)
            raise

        logger.info(f"File {created.id} uploaded by user {owner.id}")
        return created

    async def list_mine(self, owner: User) -> List[File]:
        return await self.file_repository.get_by_owner(owner.id)

    async def list_for_document(self, document_id: int, user: User) -> List[File]:
        """Вложения документа; требуется доступ к документу"""
        document = await self.document_service.require_access(document_id, user)
        return await self.file_repository.get_by_document(document.id)

    async def download(self, file_name: str) -> Tuple[File, bytes]:
        file = await self.file_repository.get_by_file_name(file_name)
        if not file:
            raise NotFound("File not found", file_name=file_name)
        data = await self.blob_store.get(file.storage_path)
        return file, data

    async def delete(self, file_id: int, user: User) -> None:
        """Удаление владельцем файла или владельцем документа"""
        file = await self.file_repository.get_by_id(file_id)
        if not file:
            raise NotFound("File not found", file_id=file_id)

        if file.owner_id != user.id:
            document = None
            if file.document_id is not None:
                document = await self.document_service.document_repository.get_by_id(
                    file.document_id, include_deleted=True
                )
            if document is None or document.owner_id != user.id:
                raise AccessDenied(file_id=file_id)

        # Запись и blob в одной транзакции: ошибка blob-а откатывает удаление записи
        async with unit_of_work(self.session):
            await self.file_repository.delete(file.id)
            await self.blob_store.delete(file.storage_path)
        logger.info(f"File {file_id} deleted by user {user.id}")
