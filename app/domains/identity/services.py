import logging
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import unit_of_work
from app.core.exceptions import AlreadyExists, NotFound
from app.core.security import create_access_token
from app.db.repositories.user_repository import UserRepository
from app.domains.identity.entities import User
from app.domains.identity.schemas import UserCreate, UserLogin

logger = logging.getLogger(__name__)


class IdentityService:
    """Сервис для работы с идентификацией и аутентификацией пользователей"""
    
    def __init__(self, session: AsyncSession):
        self.session = session
        self.user_repository = UserRepository(session)
    
    async def register_user(self, user_data: UserCreate) -> User:
        """Регистрация нового пользователя"""
        if await self.user_repository.email_exists(user_data.email):
            raise AlreadyExists("Email already registered")
        
        if await self.user_repository.username_exists(user_data.username):
            raise AlreadyExists("Username already taken")
        
        user = User.create_user(
            email=user_data.email,
            username=user_data.username,
            password=user_data.password
        )
        
        async with unit_of_work(self.session):
            created = await self.user_repository.create(user)
        logger.info(f"Registered user {created.id} ({created.username})")
        return created
    
    async def authenticate_user(self, login_data: UserLogin) -> Optional[User]:
        """Аутентификация пользователя по username или email"""
        user = await self.user_repository.get_by_username(login_data.username)
        if not user:
            user = await self.user_repository.get_by_email(login_data.username)
        
        if not user or not user.is_active:
            return None
        
        if not user.authenticate(login_data.password):
            return None
        
        return user
    
    async def login_user(self, login_data: UserLogin) -> Optional[str]:
        """Вход пользователя и создание JWT токена"""
        user = await self.authenticate_user(login_data)
        
        if not user:
            return None
        
        token_data = {
            "sub": str(user.id),
            "username": user.username,
            "email": user.email
        }
        
        return create_access_token(data=token_data)
    
    async def get_user_by_id(self, user_id: int) -> Optional[User]:
        """Получение пользователя по id"""
        return await self.user_repository.get_by_id(user_id)
    
    async def require_user_by_email(self, email: str) -> User:
        """Пользователь по email или NotFound"""
        user = await self.user_repository.get_by_email(email)
        if not user:
            raise NotFound("User not found", email=email)
        return user
