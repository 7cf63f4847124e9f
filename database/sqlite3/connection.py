"""
SQLite3 비동기 데이터베이스 모듈

aiosqlite + aiosql로 레코드를 JSON 문서 형태로 저장하는 컬렉션을 제공합니다.
"""

import asyncio
import json
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import aiosql
import aiosqlite
from aiosql.queries import Queries
from pydantic import BaseModel

from database.base import ID_FIELD, Collection
from database.exception import DataAccessError

logger = logging.getLogger(__name__)

SQL_PATH = Path(__file__).parent / 'sql' / 'documents.sql'


@dataclass
class SqliteOptions:
    """SQLite 연결 옵션"""
    busy_timeout: int = 5000
    journal_mode: str = 'WAL'
    synchronous: str = 'NORMAL'
    cache_size: int = -2000
    foreign_keys: bool = True


@contextmanager
def _sqlite_errors():
    """aiosqlite 예외를 DataAccessError로 변환"""
    try:
        yield
    except (aiosqlite.Error, json.JSONDecodeError) as e:
        logger.error(f"SQLite operation failed: {e}")
        raise DataAccessError(str(e)) from e


class SQLiteCollection(Collection):
    """documents 테이블의 collection 단위 컬렉션"""

    def __init__(self, db: 'SQLiteDatabase', name: str, model: type[BaseModel]):
        super().__init__(name, model)
        self._db = db

    @property
    def db(self) -> 'SQLiteDatabase':
        return self._db

    def _write_lock(self) -> asyncio.Lock:
        return self._db.write_lock(self.name)

    @staticmethod
    def _row_to_record(row) -> dict:
        """DB row를 레코드 dict로 변환"""
        return {ID_FIELD: row['id'], **json.loads(row['data'])}

    @staticmethod
    def _dump(record: dict) -> str:
        return json.dumps({k: v for k, v in record.items() if k != ID_FIELD})

    async def _load_all(self) -> list[dict]:
        with _sqlite_errors():
            rows = await self._db.queries.get_documents(
                self._db.connection, collection=self.name
            )
            return [self._row_to_record(row) for row in rows]

    async def _load(self, record_id: str) -> dict | None:
        with _sqlite_errors():
            row = await self._db.queries.get_document_by_id(
                self._db.connection, collection=self.name, id=record_id
            )
            return self._row_to_record(row) if row else None

    async def _insert(self, record: dict) -> None:
        with _sqlite_errors():
            await self._db.queries.insert_document(
                self._db.connection,
                id=record[ID_FIELD],
                collection=self.name,
                data=self._dump(record),
            )
            await self._db.connection.commit()

    async def _replace(self, record: dict) -> None:
        with _sqlite_errors():
            await self._db.queries.update_document(
                self._db.connection,
                id=record[ID_FIELD],
                collection=self.name,
                data=self._dump(record),
            )
            await self._db.connection.commit()

    async def _remove(self, record_ids: list[str]) -> None:
        with _sqlite_errors():
            for record_id in record_ids:
                await self._db.queries.delete_document(
                    self._db.connection, collection=self.name, id=record_id
                )
            await self._db.connection.commit()


class SQLiteDatabase:
    """
    SQLite 데이터베이스

    사용 예시:
        db = await SQLiteDatabase.create('default', config['database'])
        items = db.collection('items', Item)

        record = await items.create({"name": "widget"})
        await db.close()
    """

    def __init__(self, name: str, config: dict[str, Any]):
        self.name = name
        self._config = config
        self._connection: aiosqlite.Connection | None = None
        self._queries: Queries | None = None
        self._write_locks: dict[str, asyncio.Lock] = {}

    @classmethod
    async def create(cls, name: str, config: dict[str, Any]) -> 'SQLiteDatabase':
        """SQLiteDatabase 인스턴스 생성 및 초기화"""
        instance = cls(name, config)
        await instance.initialize()
        return instance

    async def initialize(self) -> None:
        """연결 생성, PRAGMA 적용, documents 테이블 생성"""
        if self._connection is not None:
            logger.warning(f"Database '{self.name}' already initialized")
            return

        opts = self._config.get('options', {})
        options = SqliteOptions(
            busy_timeout=opts.get('busy_timeout', 5000),
            journal_mode=opts.get('journal_mode', 'WAL'),
            synchronous=opts.get('synchronous', 'NORMAL'),
            cache_size=opts.get('cache_size', -2000),
            foreign_keys=opts.get('foreign_keys', True)
        )

        db_path = self._config.get('path', f'./data/{self.name}.db')
        if db_path != ':memory:':
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

        conn = await aiosqlite.connect(db_path, timeout=options.busy_timeout / 1000.0)
        conn.row_factory = aiosqlite.Row

        await conn.execute(f"PRAGMA busy_timeout={options.busy_timeout}")
        await conn.execute(f"PRAGMA journal_mode={options.journal_mode}")
        await conn.execute(f"PRAGMA synchronous={options.synchronous}")
        await conn.execute(f"PRAGMA cache_size={options.cache_size}")
        await conn.execute(f"PRAGMA foreign_keys={'ON' if options.foreign_keys else 'OFF'}")

        self._connection = conn
        self._queries = aiosql.from_path(str(SQL_PATH), "aiosqlite")

        await self._queries.create_documents_table(conn)
        await self._queries.create_documents_index(conn)
        await conn.commit()

        logger.info(f"SQLiteDatabase '{self.name}' initialized: {db_path}")

    @property
    def connection(self) -> aiosqlite.Connection:
        if self._connection is None:
            raise RuntimeError(f"Database '{self.name}' not initialized")
        return self._connection

    @property
    def queries(self) -> Queries:
        if self._queries is None:
            raise RuntimeError(f"Database '{self.name}' not initialized")
        return self._queries

    def write_lock(self, collection: str) -> asyncio.Lock:
        """collection 단위 쓰기 잠금 (같은 이름의 컬렉션 핸들은 같은 잠금 사용)"""
        return self._write_locks.setdefault(collection, asyncio.Lock())

    def collection(self, name: str, model: type[BaseModel]) -> SQLiteCollection:
        """이름으로 컬렉션 반환"""
        return SQLiteCollection(self, name, model)

    async def close(self) -> None:
        """데이터베이스 연결 종료"""
        if self._connection is not None:
            await self._connection.close()
            self._connection = None
        logger.info(f"SQLiteDatabase '{self.name}' closed")
