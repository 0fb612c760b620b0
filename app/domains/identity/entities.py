from datetime import datetime
from typing import Optional, Dict, Any

from app.core.dates import utc_now
from app.core.security import verify_password, get_password_hash


class User:
    """Сущность пользователя домена Identity"""
    
    def __init__(
        self,
        id: Optional[int],
        email: str,
        username: str,
        password_hash: str = "",
        is_active: bool = True,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None
    ):
        self.id = id
        self.email = email
        self.username = username
        self.password_hash = password_hash
        self.is_active = is_active
        self.created_at = created_at or utc_now()
        self.updated_at = updated_at or utc_now()
    
    def authenticate(self, password: str) -> bool:
        """Проверка пароля пользователя"""
        return verify_password(password, self.password_hash)
    
    def public_identity(self) -> Dict[str, Any]:
        """Публичные данные пользователя (без секретов)"""
        return {"id": self.id, "username": self.username, "email": self.email}
    
    @classmethod
    def create_user(cls, email: str, username: str, password: str) -> "User":
        """Создание нового пользователя с хешированием пароля"""
        return cls(
            id=None,
            email=email,
            username=username,
            password_hash=get_password_hash(password)
        )
    
    def __eq__(self, other) -> bool:
        if not isinstance(other, User):
            return False
        return self.id == other.id
    
    def __hash__(self) -> int:
        return hash(("user", self.id))
    
    def __repr__(self) -> str:
        return f"User(id={self.id}, email={self.email}, username={self.username})"
