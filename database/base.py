"""
데이터 접근 기본 모듈

리소스 라우트가 사용하는 컬렉션(DataHandle) 인터페이스와 공통 필터/정렬 로직을 제공합니다.

사용 예시:
    items = MemoryCollection(Item)

    record = await items.create({"name": "widget"})
    records = await items.find({"name": re.compile("wid", re.I)}).sort("name", 1).exec()
    outcome = await items.delete_by_filter({"id": record["id"]})
"""

import asyncio
import logging
import re
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ValidationError

from database.exception import CastError, DataAccessError, RecordValidationError

logger = logging.getLogger(__name__)

ID_FIELD = 'id'


@dataclass(frozen=True)
class RecordId:
    """레코드 식별자 참조 (필터 값)"""
    value: str

    def __str__(self) -> str:
        return self.value


class DeleteOutcome(BaseModel):
    """삭제 결과"""
    acknowledged: bool = True
    deleted_count: int = 0


def new_id() -> str:
    """새 레코드 식별자 생성 (uuid4 hex)"""
    return uuid.uuid4().hex


def is_valid_id(value: Any) -> bool:
    """레코드 식별자 형식인지 확인"""
    if isinstance(value, RecordId):
        value = value.value
    if not isinstance(value, str) or len(value) != 32:
        return False
    try:
        return uuid.UUID(hex=value).hex == value
    except ValueError:
        return False


def _match_value(value: Any, expected: Any) -> bool:
    if isinstance(expected, re.Pattern):
        return isinstance(value, str) and expected.search(value) is not None
    if isinstance(expected, RecordId):
        return value is not None and str(value) == expected.value
    if isinstance(expected, bool):
        return isinstance(value, bool) and value is expected
    if isinstance(expected, (int, float)):
        # bool은 int의 서브클래스이므로 제외
        return isinstance(value, (int, float)) and not isinstance(value, bool) and value == expected
    return value == expected


def match_filter(record: dict, filter: dict[str, Any]) -> bool:
    """레코드가 필터의 모든 조건을 만족하는지 확인"""
    return all(_match_value(record.get(field), expected) for field, expected in filter.items())


def _sort_key(value: Any) -> tuple[bool, Any]:
    # 값이 없는 레코드가 오름차순에서 먼저 온다
    return value is not None, value


class Query:
    """지연 실행 조회 (sort 후 exec)"""

    def __init__(self, collection: 'Collection', filter: dict[str, Any]):
        self._collection = collection
        self._filter = filter
        self._sort: list[tuple[str, int]] = []

    def sort(self, field: str, direction: int = 1) -> 'Query':
        """정렬 조건 추가 (1: 오름차순, -1: 내림차순)"""
        self._sort.append((field, direction))
        return self

    async def exec(self) -> list[dict]:
        """조회 실행"""
        records = [
            record for record in await self._collection._load_all()
            if match_filter(record, self._filter)
        ]

        # 마지막 조건부터 안정 정렬을 반복하면 첫 조건이 우선한다
        for field, direction in reversed(self._sort):
            try:
                records.sort(key=lambda r, f=field: _sort_key(r.get(f)), reverse=direction < 0)
            except TypeError as e:
                raise DataAccessError(f"Cannot sort by '{field}': {e}") from e

        logger.debug(f"Query on '{self._collection.name}' matched {len(records)} record(s)")
        return records

    def __await__(self):
        return self.exec().__await__()


class Collection(ABC):
    """
    레코드 컬렉션 기본 클래스

    레코드는 'id' 키와 스키마(pydantic 모델) 필드로 구성된 dict입니다.
    하위 클래스는 저장소 접근 메서드(_load_all, _load, _insert, _replace, _remove)만 구현합니다.
    """

    def __init__(self, name: str, model: type[BaseModel]):
        self.name = name
        self.model = model
        self._lock = asyncio.Lock()

    @property
    def fields(self) -> set[str]:
        """필터로 사용할 수 있는 필드 이름"""
        return {ID_FIELD, *self.model.model_fields}

    def is_valid_id(self, value: Any) -> bool:
        return is_valid_id(value)

    # ------------------------------------------------------------------
    # 저장소 접근 (하위 클래스 구현)
    # ------------------------------------------------------------------

    @abstractmethod
    async def _load_all(self) -> list[dict]:
        """저장 순서대로 모든 레코드 조회 (사본 반환)"""
        pass

    @abstractmethod
    async def _load(self, record_id: str) -> dict | None:
        pass

    @abstractmethod
    async def _insert(self, record: dict) -> None:
        pass

    @abstractmethod
    async def _replace(self, record: dict) -> None:
        pass

    @abstractmethod
    async def _remove(self, record_ids: list[str]) -> None:
        pass

    def _write_lock(self) -> asyncio.Lock:
        """읽기-병합-쓰기 구간을 직렬화하는 잠금 (같은 저장소를 보는 핸들끼리 공유해야 함)"""
        return self._lock

    # ------------------------------------------------------------------
    # DataHandle 인터페이스
    # ------------------------------------------------------------------

    def find(self, filter: dict[str, Any] | None = None) -> Query:
        """필터 조건으로 조회 (지연 실행)"""
        return Query(self, self._cast_filter(filter or {}))

    async def find_one(self, filter: dict[str, Any]) -> dict | None:
        """필터 조건의 첫 레코드 조회 (없으면 None)"""
        records = await self.find(filter).exec()
        return records[0] if records else None

    async def find_by_id_and_update(
        self,
        record_id: Any,
        patch: dict[str, Any],
        *,
        new: bool = True,
        run_validators: bool = True,
    ) -> dict | None:
        """
        식별자로 레코드 부분 수정

        Args:
            record_id: 레코드 식별자
            patch: 변경할 필드 (스키마에 없는 필드는 무시)
            new: True면 수정 후 레코드, False면 수정 전 레코드 반환
            run_validators: 수정 결과에 스키마 유효성 검사 적용

        Returns:
            레코드 (식별자에 해당하는 레코드가 없으면 None)
        """
        record_id = self._cast_id(record_id)
        changes = {k: v for k, v in patch.items() if k in self.model.model_fields}

        # 동시 수정이 서로의 변경을 덮어쓰지 않도록 읽기부터 쓰기까지 잠금
        async with self._write_lock():
            current = await self._load(record_id)
            if current is None:
                return None

            fields = {k: v for k, v in current.items() if k != ID_FIELD}
            fields.update(changes)
            if run_validators:
                fields = self._validate(fields)

            updated = {ID_FIELD: record_id, **fields}
            await self._replace(updated)

        logger.debug(f"Updated record in '{self.name}': id={record_id}, fields={list(changes)}")
        return updated if new else current

    async def create(self, fields: dict[str, Any]) -> dict:
        """새 레코드 생성 (식별자는 서버에서 부여)"""
        record = {ID_FIELD: new_id(), **self._validate(fields)}
        await self._insert(record)
        logger.debug(f"Created record in '{self.name}': id={record[ID_FIELD]}")
        return record

    async def delete_by_filter(self, filter: dict[str, Any]) -> DeleteOutcome:
        """필터 조건에 맞는 모든 레코드 삭제"""
        query = self.find(filter)
        async with self._write_lock():
            record_ids = [record[ID_FIELD] for record in await query.exec()]
            if record_ids:
                await self._remove(record_ids)
        logger.debug(f"Deleted {len(record_ids)} record(s) from '{self.name}'")
        return DeleteOutcome(deleted_count=len(record_ids))

    # ------------------------------------------------------------------
    # 내부 유틸
    # ------------------------------------------------------------------

    def _validate(self, fields: dict[str, Any]) -> dict[str, Any]:
        try:
            instance = self.model.model_validate(fields)
        except ValidationError as e:
            raise RecordValidationError(
                f"{self.model.__name__} validation failed: {e}"
            ) from e
        return instance.model_dump(mode='json')

    def _cast_id(self, value: Any) -> str:
        if not self.is_valid_id(value):
            raise CastError(value)
        return str(value)

    def _cast_filter(self, filter: dict[str, Any]) -> dict[str, Any]:
        cast = dict(filter)
        if ID_FIELD in cast and not isinstance(cast[ID_FIELD], re.Pattern):
            cast[ID_FIELD] = RecordId(self._cast_id(cast[ID_FIELD]))
        return cast
