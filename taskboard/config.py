#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Taskboard - Configuration
Конфигурация API задач с настройками для разных сред

Версия: 1.0.0
"""

import logging
import secrets
from functools import lru_cache
from pathlib import Path
from typing import List, Optional, Union

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from taskboard.utils.logger import setup_logger

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Настройки сервиса задач"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ===== ОСНОВНЫЕ НАСТРОЙКИ =====

    APP_NAME: str = Field(
        default="Taskboard API",
        description="Название приложения"
    )

    VERSION: str = Field(
        default="1.0.0",
        description="Версия API"
    )

    ENVIRONMENT: str = Field(
        default="development",
        description="Среда выполнения (development/production/testing/staging)"
    )

    DEBUG: bool = Field(
        default=True,
        description="Режим отладки"
    )

    # ===== СЕТЕВЫЕ НАСТРОЙКИ =====

    HOST: str = Field(
        default="0.0.0.0",
        description="Хост для запуска API"
    )

    PORT: int = Field(
        default=5000,
        description="Порт для запуска API"
    )

    # ===== CORS НАСТРОЙКИ =====

    ALLOWED_ORIGINS: Union[List[str], str] = Field(
        default=["http://localhost:3000"],
        description="Разрешенные источники для CORS"
    )

    # ===== БАЗА ДАННЫХ =====

    DATABASE_URL: str = Field(
        default="sqlite+aiosqlite:///./data/tasks.db",
        description="URL подключения к хранилищу задач (async драйвер)"
    )

    DB_ECHO: bool = Field(
        default=False,
        description="Логировать SQL запросы"
    )

    # ===== АВТОРИЗАЦИЯ =====

    SECRET_KEY: str = Field(
        default_factory=lambda: secrets.token_urlsafe(32),
        description="Секретный ключ для подписи JWT"
    )

    JWT_ALGORITHM: str = Field(
        default="HS256",
        description="Алгоритм подписи JWT"
    )

    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(
        default=60 * 24 * 7,
        description="Время жизни токена доступа в минутах"
    )

    # ===== ПАГИНАЦИЯ =====

    DEFAULT_PAGE_LIMIT: int = Field(
        default=10,
        description="Размер страницы по умолчанию"
    )

    MAX_PAGE_LIMIT: int = Field(
        default=100,
        description="Максимальный размер страницы"
    )

    # ===== ЛОГИРОВАНИЕ =====

    LOG_LEVEL: str = Field(
        default="INFO",
        description="Уровень логирования (DEBUG/INFO/WARNING/ERROR/CRITICAL)"
    )

    LOG_FORMAT: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Формат логов"
    )

    LOG_DATE_FORMAT: str = Field(
        default="%Y-%m-%d %H:%M:%S",
        description="Формат даты в логах"
    )

    LOGS_DIR: Optional[Path] = Field(
        default=Path("logs"),
        description="Директория логов (None - только консоль)"
    )

    LOG_FILE_MAX_BYTES: int = Field(
        default=10_000_000,
        description="Максимальный размер файла лога"
    )

    LOG_FILE_BACKUP_COUNT: int = Field(
        default=5,
        description="Количество архивных файлов лога"
    )

    # ===== ВАЛИДАТОРЫ =====

    @field_validator('ENVIRONMENT')
    @classmethod
    def validate_environment(cls, v):
        """Валидация среды выполнения"""
        allowed_envs = ['development', 'production', 'testing', 'staging']
        if v.lower() not in allowed_envs:
            raise ValueError(f"ENVIRONMENT must be one of {allowed_envs}")
        return v.lower()

    @field_validator('LOG_LEVEL')
    @classmethod
    def validate_log_level(cls, v):
        """Валидация уровня логирования"""
        allowed_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in allowed_levels:
            raise ValueError(f"LOG_LEVEL must be one of {allowed_levels}")
        return v.upper()

    @field_validator('PORT')
    @classmethod
    def validate_port(cls, v):
        """Валидация порта"""
        if not 1 <= v <= 65535:
            raise ValueError("PORT must be between 1 and 65535")
        return v

    @field_validator('ALLOWED_ORIGINS')
    @classmethod
    def validate_origins(cls, v):
        """Валидация CORS origins"""
        if isinstance(v, str):
            # Если передана строка, разделяем по запятой
            return [origin.strip() for origin in v.split(',') if origin.strip()]
        return v

    @field_validator('DEFAULT_PAGE_LIMIT', 'MAX_PAGE_LIMIT')
    @classmethod
    def validate_page_limits(cls, v):
        """Размер страницы должен быть положительным"""
        if v < 1:
            raise ValueError("page limits must be positive")
        return v

    @model_validator(mode='after')
    def validate_production_settings(self):
        """Валидация настроек для продакшена"""
        if self.ENVIRONMENT == 'production':
            # В продакшене отключаем DEBUG
            self.DEBUG = False
        if self.DEFAULT_PAGE_LIMIT > self.MAX_PAGE_LIMIT:
            raise ValueError("DEFAULT_PAGE_LIMIT cannot exceed MAX_PAGE_LIMIT")
        if "SECRET_KEY" not in self.model_fields_set and not self.is_testing:
            # Случайный ключ свой в каждом процессе: токены из `taskboard token`
            # и других воркеров не пройдут проверку
            logger.warning(
                "⚠️ SECRET_KEY не задан, используется случайный ключ этого процесса. "
                "Задайте SECRET_KEY в окружении или .env"
            )
        return self

    # ===== МЕТОДЫ КОНФИГУРАЦИИ =====

    @property
    def is_production(self) -> bool:
        """Проверка продакшен среды"""
        return self.ENVIRONMENT == "production"

    @property
    def is_testing(self) -> bool:
        """Проверка тестовой среды"""
        return self.ENVIRONMENT == "testing"

    @property
    def docs_enabled(self) -> bool:
        """Документация API доступна только в режиме отладки"""
        return self.DEBUG and not self.is_production

    def setup_logging(self) -> None:
        """Настройка логирования"""
        log_file = self.LOGS_DIR / "taskboard.log" if self.LOGS_DIR else None
        setup_logger(
            log_file=log_file,
            level=getattr(logging, self.LOG_LEVEL),
            fmt=self.LOG_FORMAT,
            datefmt=self.LOG_DATE_FORMAT,
            max_bytes=self.LOG_FILE_MAX_BYTES,
            backup_count=self.LOG_FILE_BACKUP_COUNT,
        )

        # Настройка логгеров внешних библиотек
        if not self.DEBUG:
            logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
        if not self.DB_ECHO:
            logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


@lru_cache()
def get_settings() -> Settings:
    """Получить экземпляр настроек (кэшируется)"""
    return Settings()

