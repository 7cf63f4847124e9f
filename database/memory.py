"""In-process 컬렉션 (테스트/예제용)"""

import copy

from pydantic import BaseModel

from database.base import ID_FIELD, Collection


class MemoryCollection(Collection):
    """dict 기반 메모리 컬렉션 (삽입 순서 유지)"""

    def __init__(self, model: type[BaseModel], name: str | None = None):
        super().__init__(name or model.__name__.lower(), model)
        self._records: dict[str, dict] = {}

    async def _load_all(self) -> list[dict]:
        return [copy.deepcopy(record) for record in self._records.values()]

    async def _load(self, record_id: str) -> dict | None:
        record = self._records.get(record_id)
        return copy.deepcopy(record) if record is not None else None

    async def _insert(self, record: dict) -> None:
        self._records[record[ID_FIELD]] = copy.deepcopy(record)

    async def _replace(self, record: dict) -> None:
        self._records[record[ID_FIELD]] = copy.deepcopy(record)

    async def _remove(self, record_ids: list[str]) -> None:
        for record_id in record_ids:
            self._records.pop(record_id, None)

    def __len__(self) -> int:
        return len(self._records)
