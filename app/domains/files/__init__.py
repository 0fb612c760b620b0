from app.domains.files.entities import File
from app.domains.files.schemas import FileResponse

__all__ = ["File", "FileResponse"]
