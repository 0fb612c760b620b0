import os
import uuid
from datetime import datetime
from typing import Optional

from app.core.dates import utc_now


class File:
    """Вложение: метаданные файла, сам файл лежит в blob-хранилище"""

    def __init__(
        self,
        id: Optional[int],
        file_name: str,
        original_name: str,
        file_type: Optional[str],
        file_size: int,
        storage_path: str,
        public_url: str,
        owner_id: int,
        document_id: Optional[int] = None,
        created_at: Optional[datetime] = None
    ):
        self.id = id
        self.file_name = file_name
        self.original_name = original_name
        self.file_type = file_type
        self.file_size = file_size
        self.storage_path = storage_path
        self.public_url = public_url
        self.owner_id = owner_id
        self.document_id = document_id
        self.created_at = created_at or utc_now()

    @staticmethod
    def generate_file_name(original_name: Optional[str]) -> str:
        """Уникальное имя: uuid + расширение исходного файла"""
        extension = os.path.splitext(original_name or "")[1]
        return f"{uuid.uuid4()}{extension}"

    def __repr__(self) -> str:
        return f"File(id={self.id}, file_name={self.file_name}, owner_id={self.owner_id})"
