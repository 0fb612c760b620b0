from app.domains.documents.entities import (
    Document, DocumentVersion, DocumentAccess, has_document_access, has_edit_permission
)
from app.domains.documents.schemas import (
    DocumentBase, DocumentCreate, DocumentUpdate, DocumentResponse,
    DocumentListResponse, DocumentVersionResponse, DocumentVersionCreate
)

__all__ = [
    "Document", "DocumentVersion", "DocumentAccess",
    "has_document_access", "has_edit_permission",
    "DocumentBase", "DocumentCreate", "DocumentUpdate", "DocumentResponse",
    "DocumentListResponse", "DocumentVersionResponse", "DocumentVersionCreate"
]
