"""Item 리소스 라우트 구성"""

import logging

from fastapi import Request

from crud import ChainResponse, ResourceConfig, Route, get_pending_result
from database.sqlite3 import SQLiteCollection

logger = logging.getLogger(__name__)

MODIFIED_PROP = "this prop is modified"


def custom_route(request: Request, response: ChainResponse, call_next):
    response.send("This is a custom route")


def scope_collection(resource: SQLiteCollection, request: Request, response: ChainResponse):
    """요청마다 새 컬렉션 핸들 생성 (요청 범위)"""
    request.state.resource_scoped = True
    return resource.db.collection(resource.name, resource.model)


def _log_and_continue(message: str):
    def handler(request: Request, response: ChainResponse, call_next):
        logger.info(message)
        call_next()
    return handler


def _send_pending(message: str):
    def handler(request: Request, response: ChainResponse, call_next):
        logger.info(message)
        response.send(get_pending_result(request))
    return handler


def after_get_all(request: Request, response: ChainResponse, call_next):
    logger.info('after all')
    response.send([
        {**record, 'modifiedProp': MODIFIED_PROP}
        for record in get_pending_result(request, [])
    ])


def item_config(response_timeout: float | None = None) -> ResourceConfig:
    """Item 리소스 설정 (before/after 미들웨어와 커스텀 라우트)"""
    return ResourceConfig(
        extensions=[
            Route('get', '/custom-route', custom_route),
        ],
        resource_modifier=scope_collection,
        before=[
            Route('get', '/all', _log_and_continue('before get all')),
            Route('get', '/single/:id', _log_and_continue('before get single')),
            Route('put', '/:id', _log_and_continue('before put')),
            Route('delete', '/:id', _log_and_continue('before delete')),
            Route('post', '/', _log_and_continue('before post')),
        ],
        after=[
            Route('get', '/all', after_get_all),
            Route('get', '/single/:id', _send_pending('after get single')),
            Route('put', '/:id', _send_pending('after put')),
            Route('delete', '/:id', _send_pending('after delete')),
            Route('post', '/', _send_pending('after post')),
        ],
        response_timeout=response_timeout,
    )
