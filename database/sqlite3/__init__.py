"""
SQLite3 비동기 데이터베이스 패키지

사용 예시:
    from database.sqlite3 import SQLiteDatabase

    db = await SQLiteDatabase.create('default', {'path': './data/default.db'})
    items = db.collection('items', Item)
    await items.create({"name": "widget"})
"""

from database.sqlite3.connection import (
    SQLiteDatabase,
    SQLiteCollection,
    SqliteOptions,
)

__all__ = [
    'SQLiteDatabase',
    'SQLiteCollection',
    'SqliteOptions',
]
