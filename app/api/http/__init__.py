from app.api.http.health import router as health_router
from app.api.http.auth import router as auth_router
from app.api.http.documents import router as documents_router
from app.api.http.collaboration import router as collaboration_router
from app.api.http.files import router as files_router

__all__ = [
    "health_router",
    "auth_router",
    "documents_router",
    "collaboration_router",
    "files_router"
]
