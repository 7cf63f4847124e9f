"""데이터 접근 패키지 (리소스 컬렉션)"""

from database.base import (
    ID_FIELD,
    Collection,
    DeleteOutcome,
    Query,
    RecordId,
    is_valid_id,
    match_filter,
    new_id,
)
from database.exception import CastError, DataAccessError, RecordValidationError
from database.memory import MemoryCollection

__all__ = [
    'ID_FIELD',
    'Collection',
    'DeleteOutcome',
    'Query',
    'RecordId',
    'is_valid_id',
    'match_filter',
    'new_id',
    'CastError',
    'DataAccessError',
    'RecordValidationError',
    'MemoryCollection',
]
