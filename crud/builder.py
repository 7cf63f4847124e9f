"""
리소스 라우트 빌더

하나의 컬렉션에 대해 기본 CRUD 라우트 5개와 커스텀 라우트를 FastAPI APIRouter로 생성합니다.

생성되는 라우트:
    GET     /all
    GET     /single/{id}
    PUT     /{id}
    POST    /
    DELETE  /{id}

사용 예시:
    router = build_routes(items, ResourceConfig(
        extensions=[Route('get', '/custom-route', custom_handler)],
        before=[Route('get', '/all', check_permission)],
        after=[Route('get', '/all', decorate_items)],
    ))
    app.include_router(router, prefix='/items')
"""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from fastapi import APIRouter, Request

from crud.action import (
    ResourceModifier,
    create_action,
    delete_action,
    get_one_action,
    list_action,
    update_action,
)
from crud.context import Handler, HandlerChain
from crud.middleware import extract_middleware
from crud.route import HttpMethod, Route, method_value, validate_routes
from database import Collection

logger = logging.getLogger(__name__)


@dataclass
class ResourceConfig:
    """
    리소스 라우트 설정

    Attributes:
        extensions: 커스텀 라우트 (기본 라우트보다 먼저 등록되어 덮어쓰기 가능)
        before: 기본/커스텀 액션 전에 실행되는 미들웨어
        after: 기본/커스텀 액션 후에 실행되는 미들웨어 (응답 전송 책임)
        resource_modifier: 요청마다 컬렉션을 바꿔주는 함수 (collection, request, response) -> collection
        response_timeout: 응답 대기 제한 시간(초), None이면 제한 없음
    """
    extensions: Sequence[Route] = field(default_factory=list)
    before: Sequence[Route] = field(default_factory=list)
    after: Sequence[Route] = field(default_factory=list)
    resource_modifier: ResourceModifier | None = None
    response_timeout: float | None = None


# (method, path, 액션 팩토리) 기본 라우트 슬롯
DEFAULT_SLOTS: tuple[tuple[HttpMethod, str, Callable[..., Handler]], ...] = (
    (HttpMethod.GET, '/all', list_action),
    (HttpMethod.GET, '/single/{id}', get_one_action),
    (HttpMethod.PUT, '/{id}', update_action),
    (HttpMethod.POST, '/', create_action),
    (HttpMethod.DELETE, '/{id}', delete_action),
)


def _register_route(
    router: APIRouter,
    method: str,
    path: str,
    handlers: Sequence[Handler],
    response_timeout: float | None,
) -> None:
    """handlers를 순서대로 실행하는 엔드포인트 등록"""
    handlers = tuple(handlers)

    async def endpoint(request: Request):
        return await HandlerChain(handlers, request, response_timeout).run()

    router.add_api_route(
        path,
        endpoint,
        methods=[method.upper()],
        name=f"{method}:{path}",
        include_in_schema=False,
    )
    logger.debug(f"Registered route: {method.upper()} {path}")


def build_routes(
    resource: Collection,
    config: ResourceConfig | dict[str, Any] | None = None,
) -> APIRouter:
    """
    리소스의 모든 라우트 생성

    Args:
        resource: 컬렉션 (DataHandle)
        config: ResourceConfig 또는 같은 키를 가진 dict

    Returns:
        include_router로 마운트할 APIRouter

    Raises:
        InvalidRouteError: extensions/before/after에 잘못된 Route가 있을 때 (아무 라우트도 등록되지 않음)
    """
    if config is None:
        config = ResourceConfig()
    elif isinstance(config, dict):
        config = ResourceConfig(**config)

    validate_routes(config.extensions)
    validate_routes(config.before)
    validate_routes(config.after)

    router = APIRouter()

    # 커스텀 라우트를 먼저 등록해야 기본 라우트를 덮어쓸 수 있다
    for ex in config.extensions:
        method = method_value(ex.method)
        _register_route(
            router,
            method,
            ex.path,
            (
                extract_middleware(config.before, method, ex.path),
                ex.handler,
                extract_middleware(config.after, method, ex.path),
            ),
            config.response_timeout,
        )

    for method, path, action in DEFAULT_SLOTS:
        after = extract_middleware(config.after, method, path)
        _register_route(
            router,
            method.value,
            path,
            (
                extract_middleware(config.before, method, path),
                action(resource, after, config.resource_modifier),
                after,
            ),
            config.response_timeout,
        )

    logger.info(
        f"Built routes for '{getattr(resource, 'name', type(resource).__name__)}': "
        f"{len(config.extensions)} extension(s), {len(DEFAULT_SLOTS)} default route(s)"
    )
    return router
