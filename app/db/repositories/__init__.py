from app.db.repositories.user_repository import UserRepository
from app.db.repositories.document_repository import (
    DocumentRepository, DocumentVersionRepository, active_documents
)
from app.db.repositories.collaboration_repository import (
    DocumentCollaboratorRepository, DocumentActivityRepository
)
from app.db.repositories.file_repository import FileRepository

__all__ = [
    "UserRepository",
    "DocumentRepository",
    "DocumentVersionRepository",
    "active_documents",
    "DocumentCollaboratorRepository",
    "DocumentActivityRepository",
    "FileRepository"
]
