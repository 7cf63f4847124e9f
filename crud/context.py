"""
요청 컨텍스트와 핸들러 체인

before -> 액션 -> after 핸들러를 Express 방식(handler(request, response, call_next))으로 실행합니다.
"""

import asyncio
import inspect
import logging
from collections.abc import Callable, Sequence
from typing import Any

from fastapi import HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from crud.exception import ResourceError, ResponseAlreadySentError

logger = logging.getLogger(__name__)

PENDING_RESULT_KEY = 'resource_result'

Handler = Callable[..., Any]


def set_pending_result(request: Request, data: Any) -> None:
    """after 핸들러가 사용할 결과를 요청 컨텍스트에 저장"""
    setattr(request.state, PENDING_RESULT_KEY, data)


def get_pending_result(request: Request, default: Any = None) -> Any:
    """기본 액션이 저장한 결과 조회"""
    return getattr(request.state, PENDING_RESULT_KEY, default)


class ChainResponse:
    """핸들러 체인에서 사용하는 응답 객체 (한 번만 전송 가능)"""

    def __init__(self, done: asyncio.Event | None = None):
        self.status_code = 200
        self.headers: dict[str, str] = {}
        self._response: Response | None = None
        self._done = done

    @property
    def sent(self) -> bool:
        return self._response is not None

    def status(self, code: int) -> 'ChainResponse':
        self.status_code = code
        return self

    def header(self, name: str, value: Any) -> 'ChainResponse':
        self.headers[name] = str(value)
        return self

    def send(self, data: Any = None) -> None:
        """
        응답 전송

        None은 빈 본문, str은 text/plain, Response는 그대로, 그 외는 JSON으로 전송합니다.
        """
        if isinstance(data, Response):
            data.headers.update(self.headers)
            self._finish(data)
        elif data is None:
            self._finish(Response(status_code=self.status_code, headers=self.headers))
        elif isinstance(data, str):
            self._finish(PlainTextResponse(data, status_code=self.status_code, headers=self.headers))
        else:
            self.json(data)

    def json(self, data: Any) -> None:
        """JSON 응답 전송"""
        self._finish(JSONResponse(
            jsonable_encoder(data), status_code=self.status_code, headers=self.headers
        ))

    def _finish(self, response: Response) -> None:
        if self.sent:
            raise ResponseAlreadySentError()
        self._response = response
        if self._done is not None:
            self._done.set()

    def to_response(self) -> Response:
        if self._response is None:
            raise RuntimeError("Response has not been sent")
        return self._response


def _completed() -> asyncio.Future:
    future = asyncio.get_running_loop().create_future()
    future.set_result(None)
    return future


def to_http_exception(error: BaseException) -> HTTPException:
    """체인 에러를 FastAPI HTTPException으로 변환"""
    if isinstance(error, HTTPException):
        return error
    if isinstance(error, ResourceError):
        return HTTPException(status_code=error.status, detail=error.message)
    return HTTPException(status_code=500, detail=str(error) or error.__class__.__name__)


class HandlerChain:
    """
    요청 하나에 대한 핸들러 체인

    각 핸들러는 handler(request, response, call_next)로 호출됩니다.
    call_next()는 다음 단계를 실행하고 await 가능한 객체를 반환하며,
    call_next(error)는 체인을 중단하고 에러 응답으로 넘어갑니다.
    응답이 전송되거나 에러가 발생할 때까지 run()이 대기합니다.
    """

    def __init__(
        self,
        handlers: Sequence[Handler],
        request: Request,
        response_timeout: float | None = None,
    ):
        self._handlers = list(handlers)
        self._request = request
        self._timeout = response_timeout
        self._finished = asyncio.Event()
        self._response = ChainResponse(self._finished)
        self._error: BaseException | None = None
        self._tasks: set[asyncio.Task] = set()

    @property
    def response(self) -> ChainResponse:
        return self._response

    async def run(self) -> Response:
        """체인 실행 후 응답 반환 (에러는 HTTPException으로 전달)"""
        self._schedule(0)

        try:
            await asyncio.wait_for(self._finished.wait(), timeout=self._timeout)
        except asyncio.TimeoutError:
            logger.error(
                f"No response within {self._timeout}s: "
                f"{self._request.method} {self._request.url.path}"
            )
            raise HTTPException(status_code=504, detail="Handler chain did not send a response")

        if self._error is not None:
            raise to_http_exception(self._error)
        return self._response.to_response()

    def _schedule(self, index: int) -> asyncio.Task:
        task = asyncio.create_task(self._invoke(index))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _invoke(self, index: int) -> None:
        if self._finished.is_set():
            return
        if index >= len(self._handlers):
            self._fail(ResourceError(404, "Not Found"))
            return

        def call_next(error: BaseException | None = None) -> asyncio.Future:
            if error is not None:
                self._fail(error)
                return _completed()
            return self._schedule(index + 1)

        handler = self._handlers[index]
        try:
            result = handler(self._request, self._response, call_next)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            self._fail(e)

    def _fail(self, error: BaseException) -> None:
        if not isinstance(error, (ResourceError, HTTPException)):
            logger.error(
                f"Unhandled error in {self._request.method} {self._request.url.path}: {error}",
                exc_info=error,
            )
        if self._finished.is_set():
            return
        self._error = error
        self._finished.set()
