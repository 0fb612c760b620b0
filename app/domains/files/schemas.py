from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class FileResponse(BaseModel):
    """Метаданные вложения"""
    id: int
    file_name: str
    original_name: str
    file_type: Optional[str] = None
    file_size: int
    public_url: str
    owner_id: int
    document_id: Optional[int] = None
    created_at: datetime

    model_config = {"from_attributes": True}
