from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from app.core.auth import get_current_user
from app.core.db import get_db
from app.domains.files.schemas import FileResponse
from app.domains.files.services import FileService
from app.domains.identity.entities import User

router = APIRouter(prefix="/api/files", tags=["files"])


@router.post("/upload", response_model=FileResponse)
async def upload_file(
    file: UploadFile = File(...),
    document_id: Optional[int] = Form(None, alias="documentId"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Загрузка файла, опционально с привязкой к документу"""
    data = await file.read()
    uploaded = await FileService(db).upload(
        current_user, file.filename, file.content_type, data, document_id
    )
    return FileResponse.model_validate(uploaded)


@router.get("/download/{file_name}")
async def download_file(file_name: str, db: AsyncSession = Depends(get_db)):
    """Скачивание файла по сгенерированному имени"""
    stored, data = await FileService(db).download(file_name)
    return Response(
        content=data,
        media_type=stored.file_type or "application/octet-stream",
        headers={"Content-Disposition": f'attachment; filename="{stored.original_name}"'}
    )


@router.get("/my", response_model=List[FileResponse])
async def get_my_files(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    files = await FileService(db).list_mine(current_user)
    return [FileResponse.model_validate(f) for f in files]


@router.get("/document/{document_id}", response_model=List[FileResponse])
async def get_document_files(
    document_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Вложения документа"""
    files = await FileService(db).list_for_document(document_id, current_user)
    return [FileResponse.model_validate(f) for f in files]


@router.delete("/{file_id}")
async def delete_file(
    file_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    await FileService(db).delete(file_id, current_user)
    return {"message": "File deleted successfully"}
