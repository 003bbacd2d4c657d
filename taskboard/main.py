#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Taskboard - точка входа

    taskboard serve [--host H] [--port P] [--reload]
    taskboard token <user_id> [--expires-minutes N]
"""

import argparse
import sys
from typing import List, Optional

import uvicorn

from taskboard.auth import create_access_token
from taskboard.config import get_settings


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="taskboard", description="Taskboard REST API")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Запустить API сервер")
    serve.add_argument("--host", default=None, help="Хост (по умолчанию из настроек)")
    serve.add_argument("--port", type=int, default=None, help="Порт (по умолчанию из настроек)")
    serve.add_argument("--reload", action="store_true", help="Автоперезагрузка (разработка)")

    token = subparsers.add_parser(
        "token",
        help="Выпустить токен доступа для разработки (SECRET_KEY должен быть задан в окружении или .env)",
    )
    token.add_argument("user_id", help="ID пользователя")
    token.add_argument("--expires-minutes", type=int, default=None, help="Время жизни токена")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()

    if args.command == "token":
        print(create_access_token(args.user_id, settings, expires_minutes=args.expires_minutes))
        return 0

    settings.setup_logging()
    uvicorn.run(
        "taskboard.app:app",
        host=args.host or settings.HOST,
        port=args.port or settings.PORT,
        reload=args.reload,
        log_level=settings.LOG_LEVEL.lower(),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
