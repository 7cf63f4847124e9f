"""
리소스 CRUD 라우트 생성 패키지

사용 예시:
    from crud import Route, build_routes

    app.include_router(build_routes(items, {
        'extensions': [Route('get', '/custom-route', custom_handler)],
        'after': [Route('get', '/all', decorate_items)],
    }), prefix='/items')
"""

from crud.builder import DEFAULT_SLOTS, ResourceConfig, build_routes
from crud.context import ChainResponse, HandlerChain, get_pending_result, set_pending_result
from crud.exception import (
    ConfigurationError,
    CrudError,
    InvalidRouteError,
    ResourceError,
    ResponseAlreadySentError,
)
from crud.middleware import empty_middleware, extract_middleware, send_result
from crud.route import HttpMethod, Route, validate_routes

__all__ = [
    'DEFAULT_SLOTS',
    'ResourceConfig',
    'build_routes',
    'ChainResponse',
    'HandlerChain',
    'get_pending_result',
    'set_pending_result',
    'ConfigurationError',
    'CrudError',
    'InvalidRouteError',
    'ResourceError',
    'ResponseAlreadySentError',
    'empty_middleware',
    'extract_middleware',
    'send_result',
    'HttpMethod',
    'Route',
    'validate_routes',
]
