from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from app.core.db import SessionLocal
from app.core.security import verify_token
from app.db.repositories.user_repository import UserRepository
from app.domains.identity.entities import User

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")
optional_oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


async def authenticate_token(token: Optional[str]) -> Optional[User]:
    """Пользователь по JWT токену или None"""
    if not token:
        return None

    payload = verify_token(token)
    if not payload or payload.get("sub") is None:
        return None

    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError):
        return None

    async with SessionLocal() as session:
        user = await UserRepository(session).get_by_id(user_id)

    if not user or not user.is_active:
        return None
    return user


async def get_current_user(token: str = Depends(oauth2_scheme)) -> User:
    user = await authenticate_token(token)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


async def get_optional_user(token: Optional[str] = Depends(optional_oauth2_scheme)) -> Optional[User]:
    """Аутентифицированный пользователь либо None для анонимного запроса"""
    return await authenticate_token(token)
