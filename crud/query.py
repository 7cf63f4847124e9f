"""
목록 조회용 쿼리 파라미터 처리

필터 값의 타입은 아래 순서로 결정합니다.
    1. 숫자로 해석되면 숫자 (정수면 int, 아니면 float)
    2. 'true'/'false' (대소문자 무시)면 bool
    3. 컬렉션의 식별자 형식이면 RecordId
    4. 그 외에는 대소문자를 무시하는 부분 문자열 패턴
"""

import math
import re
from collections.abc import Mapping
from typing import Any

from database import Collection, RecordId

START_PARAM = '_start'
END_PARAM = '_end'
SORT_PARAM = '_sort'
ORDER_PARAM = '_order'

RESERVED_PARAMS = frozenset({START_PARAM, END_PARAM, SORT_PARAM, ORDER_PARAM})


# ASCII 10진수만 허용 ("1_000", 전각 숫자, "inf", "nan"은 숫자가 아님)
_NUMBER = re.compile(r'\s*[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?\s*')


def _parse_number(value: str) -> int | float | None:
    if not _NUMBER.fullmatch(value):
        return None
    try:
        return int(value)
    except ValueError:
        return float(value)


def infer_filter_value(value: str, collection: Collection) -> Any:
    """쿼리 파라미터 값 하나를 필터 값으로 변환"""
    number = _parse_number(value)
    if number is not None:
        return number

    lowered = value.lower()
    if lowered in ('true', 'false'):
        return lowered == 'true'

    if collection.is_valid_id(value):
        return RecordId(value)

    return re.compile(re.escape(value), re.IGNORECASE)


def build_filter(params: Mapping[str, str], collection: Collection) -> dict[str, Any]:
    """컬렉션 필드와 이름이 같은 쿼리 파라미터로 필터 생성"""
    fields = collection.fields
    return {
        name: infer_filter_value(value, collection)
        for name, value in params.items()
        if name in fields and name not in RESERVED_PARAMS
    }


def sort_direction(order: str | None) -> int | None:
    """_order 값을 정렬 방향으로 변환 (ASC: 1, DESC: -1, 그 외: None)"""
    if order == 'ASC':
        return 1
    if order == 'DESC':
        return -1
    return None


def _parse_bound(value: str) -> float:
    # 빈 값은 0으로 취급
    if not value.strip():
        return 0.0
    number = _parse_number(value)
    return math.nan if number is None else float(number)


def paginate(records: list, start: str | None, end: str | None) -> list:
    """
    _start, _end 인덱스 구간(양 끝 포함)으로 자르기

    둘 중 하나라도 없으면 자르지 않습니다. 빈 값은 0, 숫자가 아닌 값은 어떤 인덱스와도 일치하지 않습니다.
    """
    if start is None or end is None:
        return records

    lower = _parse_bound(start)
    upper = _parse_bound(end)
    return [record for i, record in enumerate(records) if lower <= i <= upper]
