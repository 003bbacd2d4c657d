# auth.py

"""Проверка и выпуск JWT токенов доступа"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from taskboard.config import Settings, get_settings
from taskboard.core.errors import AuthenticationError

logger = logging.getLogger(__name__)


def create_access_token(
    user_id: str,
    settings: Optional[Settings] = None,
    expires_minutes: Optional[int] = None,
) -> str:
    """Выпустить токен для пользователя (для локальной разработки и тестов)"""
    settings = settings or get_settings()
    if expires_minutes is None:
        expires_minutes = settings.ACCESS_TOKEN_EXPIRE_MINUTES
    now = datetime.now(timezone.utc)
    payload = {
        "id": str(user_id),
        "iat": now,
        "exp": now + timedelta(minutes=expires_minutes),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str, settings: Optional[Settings] = None) -> str:
    """Вернуть id пользователя из токена или бросить AuthenticationError"""
    settings = settings or get_settings()
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except jwt.PyJWTError as e:
        logger.warning(f"⚠️ Отклонён токен: {e}")
        raise AuthenticationError("Not authorized, token failed") from e

    user_id = payload.get("id") or payload.get("sub")
    if not user_id:
        raise AuthenticationError("Not authorized, token failed")
    return str(user_id)
