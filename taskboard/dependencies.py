#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Taskboard - Dependencies
Провайдеры зависимостей для FastAPI приложения

Версия: 1.0.0
"""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from taskboard.auth import decode_access_token
from taskboard.config import Settings
from taskboard.core.database import Database
from taskboard.core.errors import AuthenticationError
from taskboard.core.query_engine import ListOptions, TaskQueryEngine
from taskboard.core.service import TaskService
from taskboard.core.store import TaskStore

# ===== ПРОВАЙДЕРЫ ЗАВИСИМОСТЕЙ =====


def get_settings(request: Request) -> Settings:
    """Настройки, с которыми создано приложение"""
    return request.app.state.settings


def get_database(request: Request) -> Database:
    """Дескриптор базы данных, открытый в lifespan"""
    return request.app.state.database


def get_task_store(database: Database = Depends(get_database)) -> TaskStore:
    return TaskStore(database)


def get_query_engine(store: TaskStore = Depends(get_task_store)) -> TaskQueryEngine:
    return TaskQueryEngine(store)


def get_task_service(store: TaskStore = Depends(get_task_store)) -> TaskService:
    return TaskService(store)


def get_list_options(request: Request, settings: Settings = Depends(get_settings)) -> ListOptions:
    """Параметры выборки из query string (нестрогий разбор)"""
    return ListOptions.from_params(
        request.query_params,
        default_limit=settings.DEFAULT_PAGE_LIMIT,
        max_limit=settings.MAX_PAGE_LIMIT,
    )


# ===== АВТОРИЗАЦИЯ =====

security = HTTPBearer(auto_error=False)


async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    settings: Settings = Depends(get_settings),
) -> str:
    """Требовать авторизации; возвращает id пользователя из токена"""
    if not credentials or not credentials.credentials:
        raise AuthenticationError()
    return decode_access_token(credentials.credentials, settings)
