from app.db.models.user import User
from app.db.models.document import Document, DocumentVersion
from app.db.models.collaboration import DocumentCollaborator, DocumentActivity
from app.db.models.file import File

__all__ = [
    "User",
    "Document", 
    "DocumentVersion",
    "DocumentCollaborator",
    "DocumentActivity",
    "File"
]
