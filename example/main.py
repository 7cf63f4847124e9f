"""예제 API 서버 진입점"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

import yaml
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from common.logging import setup_logging
from crud import build_routes
from database.sqlite3 import SQLiteDatabase
from example.model import Item
from example.routes import item_config

logger = logging.getLogger(__name__)

CONFIG_DIR = Path(__file__).parent.parent / "config"


def load_config(config_dir: Path = CONFIG_DIR) -> dict:
    """설정 파일 로드 (app.yaml + database.yaml)"""
    with open(config_dir / "app.yaml", 'r', encoding='utf-8') as f:
        app_config = yaml.safe_load(f)

    with open(config_dir / "database.yaml", 'r', encoding='utf-8') as f:
        db_config = yaml.safe_load(f)

    return {**app_config, **db_config}


def create_app(config: dict | None = None) -> FastAPI:
    """FastAPI 앱 생성"""
    config = config or load_config()
    app_config = config.get('app', {})
    db_config = config.get('database', {})

    db = SQLiteDatabase(db_config.get('name', 'default'), db_config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await db.initialize()
        logger.info("Database initialized")

        yield

        await db.close()
        logger.info("Database closed")

    app = FastAPI(
        title="crud example",
        description="Item 리소스 CRUD API",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.db = db

    cors_config = app_config.get('cors', {})
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_config.get('origins', ['*']),
        allow_credentials=cors_config.get('allow_credentials', True),
        allow_methods=cors_config.get('allow_methods', ['*']),
        allow_headers=cors_config.get('allow_headers', ['*']),
        expose_headers=cors_config.get('expose_headers', ['X-Total-Count']),
    )

    items = db.collection('items', Item)
    app.include_router(
        build_routes(items, item_config(app_config.get('response_timeout'))),
        prefix=app_config.get('base_path', '/items'),
    )

    return app


if __name__ == "__main__":
    import uvicorn

    config = load_config()
    app_config = config.get('app', {})

    log_config = app_config.get('logging', {})
    setup_logging(
        level=log_config.get('level', 'INFO'),
        json_format=log_config.get('json_format', True),
        log_file=log_config.get('log_file'),
        levels=log_config.get('levels'),
    )

    uvicorn.run(
        create_app(config),
        host=app_config.get('host', '0.0.0.0'),
        port=app_config.get('port', 8080),
    )
