"""라우트 선언(Route)과 유효성 검사"""

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from crud.exception import InvalidRouteError

_EXPRESS_PARAM = re.compile(r':([A-Za-z_][A-Za-z0-9_]*)')


class HttpMethod(str, Enum):
    """리소스 라우트에서 허용하는 HTTP 메서드"""
    GET = "get"
    POST = "post"
    PUT = "put"
    DELETE = "delete"


ALLOWED_METHODS = frozenset(m.value for m in HttpMethod)


def method_value(method: Any) -> str | None:
    """HttpMethod 또는 문자열을 메서드 값으로 변환 (허용되지 않으면 None)"""
    if isinstance(method, HttpMethod):
        return method.value
    if isinstance(method, str) and method in ALLOWED_METHODS:
        return method
    return None


def normalize_path(path: str) -> str:
    """'/single/:id' 형태의 파라미터를 '/single/{id}'로 변환"""
    return _EXPRESS_PARAM.sub(r'{\1}', path)


@dataclass(frozen=True)
class Route:
    """
    커스텀 라우트 또는 before/after 미들웨어 선언

    Args:
        method: get, post, put, delete 중 하나
        path: 리소스 기준 경로 (예: '/all', '/single/{id}', '/custom-route')
        handler: handler(request, response, call_next) 형태의 함수 (sync/async)
    """
    method: HttpMethod | str
    path: str
    handler: Callable[..., Any]

    def __post_init__(self):
        if isinstance(self.path, str):
            object.__setattr__(self, 'path', normalize_path(self.path))


def validate_routes(routes: Sequence[Route]) -> None:
    """Route 목록의 구조 확인 (첫 번째 잘못된 선언에서 중단)"""
    for route in routes:
        method = getattr(route, 'method', None)
        path = getattr(route, 'path', None)
        handler = getattr(route, 'handler', None)

        if method_value(method) is None:
            raise InvalidRouteError(route, f"unsupported method {method!r}")
        if not isinstance(path, str):
            raise InvalidRouteError(route, f"path must be a string, got {type(path).__name__}")
        if not callable(handler):
            raise InvalidRouteError(route, "handler is not callable")
