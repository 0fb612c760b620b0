from typing import Any, Dict, Optional


class DocCollabError(Exception):
    """Базовое исключение приложения.

    HTTP-слой отображает наследников на коды ответа по ``status_code``,
    realtime-обработчики часть из них молча проглатывают.
    """

    status_code = 500

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(message)


class NotFound(DocCollabError):
    """Документ, версия, пользователь или файл не найден (или удален)"""

    status_code = 404

    def __init__(self, message: str = "Not found", **details: Any):
        super().__init__(message, "NOT_FOUND", details)


class AccessDenied(DocCollabError):
    """Недостаточно прав для операции"""

    status_code = 403

    def __init__(self, message: str = "Access denied", **details: Any):
        super().__init__(message, "ACCESS_DENIED", details)


class AlreadyExists(DocCollabError):
    status_code = 409

    def __init__(self, message: str, **details: Any):
        super().__init__(message, "ALREADY_EXISTS", details)


class ValidationFailed(DocCollabError):
    status_code = 422

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, "VALIDATION_ERROR", {"field": field} if field else {})


class StorageFailure(DocCollabError):
    """Ошибка БД или хранилища файлов"""

    status_code = 500

    def __init__(self, message: str, **details: Any):
        super().__init__(message, "STORAGE_FAILURE", details)
