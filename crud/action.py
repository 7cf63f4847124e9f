"""
기본 CRUD 액션

각 함수는 컬렉션에 바인딩된 체인 핸들러를 만듭니다.
데이터 접근 에러는 400 ResourceError로 체인을 종료하고 after 핸들러는 실행되지 않습니다.
"""

import inspect
import json
from collections.abc import Callable
from typing import Any

from fastapi import Request

from crud.context import ChainResponse, Handler
from crud.exception import ResourceError
from crud.middleware import send_result
from crud.query import END_PARAM, ORDER_PARAM, SORT_PARAM, START_PARAM, build_filter, paginate, sort_direction
from database import ID_FIELD, Collection, DataAccessError

TOTAL_COUNT_HEADER = 'X-Total-Count'

ResourceModifier = Callable[[Collection, Request, ChainResponse], Any]


async def resolve_collection(
    resource: Collection,
    resource_modifier: ResourceModifier | None,
    request: Request,
    response: ChainResponse,
) -> Collection:
    """요청 단위 컬렉션 결정 (resource_modifier가 있으면 적용)"""
    if resource_modifier is None:
        return resource
    collection = resource_modifier(resource, request, response)
    if inspect.isawaitable(collection):
        collection = await collection
    return collection


async def read_body(request: Request) -> dict[str, Any]:
    """JSON 객체 본문 읽기 (본문이 없으면 빈 dict)"""
    raw = await request.body()
    if not raw:
        return {}
    try:
        body = json.loads(raw)
    except ValueError:
        raise ResourceError(400, "Request body is not valid JSON")
    if not isinstance(body, dict):
        raise ResourceError(400, "Request body must be a JSON object")
    return body


def list_action(
    resource: Collection,
    after: Handler,
    resource_modifier: ResourceModifier | None = None,
) -> Handler:
    """
    GET /all

    Accepted params:
        _start, _end  = 인덱스 구간 (둘 다 있을 때만 적용, 양 끝 포함)
        _sort         = 정렬 필드
        _order        = ASC | DESC
        field         = value (컬렉션 필드만 필터로 사용)
    """
    async def handle(request: Request, response: ChainResponse, call_next):
        collection = await resolve_collection(resource, resource_modifier, request, response)
        params = request.query_params

        try:
            query = collection.find(build_filter(params, collection))
            direction = sort_direction(params.get(ORDER_PARAM))
            if params.get(SORT_PARAM) and direction is not None:
                query.sort(params[SORT_PARAM], direction)
            data = await query.exec()
        except DataAccessError as e:
            call_next(ResourceError(400, e.message))
            return

        # 전체 개수는 페이지 자르기 전에 계산
        response.header(TOTAL_COUNT_HEADER, len(data))
        data = paginate(data, params.get(START_PARAM), params.get(END_PARAM))

        send_result(after, data, request, response, call_next)

    return handle


def get_one_action(
    resource: Collection,
    after: Handler,
    resource_modifier: ResourceModifier | None = None,
) -> Handler:
    """GET /single/{id} (없는 레코드는 빈 결과)"""
    async def handle(request: Request, response: ChainResponse, call_next):
        collection = await resolve_collection(resource, resource_modifier, request, response)
        try:
            data = await collection.find_one({ID_FIELD: request.path_params['id']})
        except DataAccessError as e:
            call_next(ResourceError(400, e.message))
            return
        send_result(after, data, request, response, call_next)

    return handle


def update_action(
    resource: Collection,
    after: Handler,
    resource_modifier: ResourceModifier | None = None,
) -> Handler:
    """PUT /{id} (본문에 있는 필드만 수정)"""
    async def handle(request: Request, response: ChainResponse, call_next):
        collection = await resolve_collection(resource, resource_modifier, request, response)
        body = await read_body(request)
        try:
            data = await collection.find_by_id_and_update(
                request.path_params['id'], body, new=True, run_validators=True
            )
        except DataAccessError as e:
            call_next(ResourceError(400, e.message))
            return
        send_result(after, data, request, response, call_next)

    return handle


def create_action(
    resource: Collection,
    after: Handler,
    resource_modifier: ResourceModifier | None = None,
) -> Handler:
    """POST /"""
    async def handle(request: Request, response: ChainResponse, call_next):
        collection = await resolve_collection(resource, resource_modifier, request, response)
        body = await read_body(request)
        try:
            data = await collection.create(body)
        except DataAccessError as e:
            call_next(ResourceError(400, e.message))
            return
        send_result(after, data, request, response, call_next)

    return handle


def delete_action(
    resource: Collection,
    after: Handler,
    resource_modifier: ResourceModifier | None = None,
) -> Handler:
    """DELETE /{id} (식별자 필터에 맞는 레코드 모두 삭제)"""
    async def handle(request: Request, response: ChainResponse, call_next):
        collection = await resolve_collection(resource, resource_modifier, request, response)
        try:
            data = await collection.delete_by_filter({ID_FIELD: request.path_params['id']})
        except DataAccessError as e:
            call_next(ResourceError(400, e.message))
            return
        send_result(after, data, request, response, call_next)

    return handle
