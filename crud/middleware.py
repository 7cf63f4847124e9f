"""before/after 미들웨어 조회와 기본 액션 결과 전달"""

from collections.abc import Sequence
from typing import Any

from fastapi import Request

from crud.context import ChainResponse, Handler, set_pending_result
from crud.route import HttpMethod, Route, method_value, normalize_path


def empty_middleware(request: Request, response: ChainResponse, call_next):
    """아무 것도 하지 않고 다음 단계로 넘기는 미들웨어"""
    return call_next()


def extract_middleware(routes: Sequence[Route], method: HttpMethod | str, path: str) -> Handler:
    """
    method와 path가 일치하는 첫 번째 Route의 핸들러 반환

    일치하는 Route가 없으면 empty_middleware를 반환하므로 체인은 항상 3단계가 됩니다.
    """
    method = method_value(method)
    path = normalize_path(path)
    for route in routes:
        if method_value(route.method) == method and route.path == path:
            return route.handler
    return empty_middleware


def send_result(
    after_middleware: Handler | None,
    data: Any,
    request: Request,
    response: ChainResponse,
    call_next,
) -> None:
    """
    기본 액션 결과 전달

    after 미들웨어가 없으면 결과를 바로 전송하고,
    있으면 요청 컨텍스트에 저장한 뒤 after 미들웨어로 넘깁니다.
    """
    if after_middleware is None or after_middleware is empty_middleware:
        response.send(data)
        return

    set_pending_result(request, data)
    call_next()
