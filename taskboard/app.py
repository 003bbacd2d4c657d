#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Taskboard API - FastAPI Application
REST API задач пользователя: CRUD, фильтрация, статистика

Версия: 1.0.0
"""

import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from taskboard.api import tasks
from taskboard.config import Settings, get_settings
from taskboard.core.database import Database
from taskboard.core.errors import TaskboardError
from taskboard.core.models import HealthCheck

logger = logging.getLogger(__name__)


def _field_name(loc) -> str:
    """('body', 'dueDate') -> 'dueDate'"""
    parts = [str(part) for part in loc if part not in ("body", "query", "path")]
    return ".".join(parts) or "body"


def register_exception_handlers(app: FastAPI) -> None:

    @app.exception_handler(TaskboardError)
    async def taskboard_error_handler(request: Request, exc: TaskboardError):
        """Доменные ошибки -> статус и JSON"""
        if exc.status_code >= 500:
            logger.error(f"❌ {request.method} {request.url.path}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        """Ошибки разбора тела запроса в том же формате, что и ValidationError"""
        errors = [
            {"field": _field_name(err.get("loc", ())), "message": err.get("msg", "Invalid value")}
            for err in exc.errors()
        ]
        return JSONResponse(
            status_code=400,
            content={"success": False, "message": "Validation failed", "errors": errors},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Обработчик HTTP исключений"""
        if exc.status_code == 404:
            message = f"Route {request.url.path} not found"
        else:
            message = str(exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": message},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def internal_error_handler(request: Request, exc: Exception):
        """Обработчик 500 ошибок: детали только в лог"""
        logger.exception(f"Internal server error: {exc}")
        return JSONResponse(
            status_code=500,
            content={"success": False, "message": "Server Error"},
        )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Фабрика для создания приложения"""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Управление жизненным циклом приложения"""
        if not settings.is_testing:
            settings.setup_logging()
        logger.info(f"🚀 Запуск {settings.APP_NAME} v{settings.VERSION} ({settings.ENVIRONMENT})")

        database = Database(settings.DATABASE_URL, echo=settings.DB_ECHO)
        await database.connect()
        app.state.database = database
        logger.info("✅ API готово к работе")

        try:
            yield
        finally:
            logger.info("🛑 Остановка API...")
            await database.close()

    app = FastAPI(
        title=settings.APP_NAME,
        description="REST API для управления личными задачами",
        version=settings.VERSION,
        docs_url="/api/docs" if settings.docs_enabled else None,
        redoc_url="/api/redoc" if settings.docs_enabled else None,
        openapi_url="/api/openapi.json" if settings.docs_enabled else None,
        lifespan=lifespan,
    )
    app.state.settings = settings

    # ===== MIDDLEWARE =====

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    @app.middleware("http")
    async def logging_middleware(request: Request, call_next):
        """Логирование запросов и времени обработки"""
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time

        client_ip = request.headers.get("X-Forwarded-For") or (request.client.host if request.client else "-")
        logger.info(
            f"{request.method} {request.url.path} "
            f"- {response.status_code} "
            f"- {process_time:.3f}s "
            f"- {client_ip}"
        )
        response.headers["X-Process-Time"] = f"{process_time:.6f}"
        return response

    register_exception_handlers(app)

    # ===== ROUTES =====

    @app.get("/health", response_model=HealthCheck)
    async def health_check():
        """Проверка работоспособности"""
        return HealthCheck(
            status="OK",
            message="Server is running",
            version=settings.VERSION,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )

    app.include_router(tasks.router)

    return app


app = create_app()
