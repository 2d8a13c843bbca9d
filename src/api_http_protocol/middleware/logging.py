"""Logging middlewares — request curl lines and truncated response bodies."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

from ..constants import RESPONSE_BODY_LOG_MAX_LEN

if TYPE_CHECKING:
    from ..message import RequestMessage, ResponseMessage


class RequestLoggingMiddleware:
    """Logs the replayed request as a curl command once the chain returns."""

    async def __call__(self, message: RequestMessage) -> None:
        start = time.perf_counter()
        try:
            await message.next()
        except Exception:
            elapsed = (time.perf_counter() - start) * 1000
            message.logger.exception(
                "request %s %s failed after %.2fms (request_id=%s)",
                message.method,
                message.url,
                elapsed,
                message.request_id,
            )
            raise
        duplicate, exists = message.get_duplicate_request()
        if not exists or duplicate is None:
            return
        message.logger.info(
            "url:%s, request_id:%s, curl: %s",
            duplicate.url,
            message.request_id,
            message.curl_command(),
        )


class ResponseLoggingMiddleware:
    """Logs status and (truncated) body, or the error being answered."""

    def __init__(self, max_body_len: int = RESPONSE_BODY_LOG_MAX_LEN) -> None:
        self.max_body_len = max_body_len

    async def __call__(self, message: ResponseMessage) -> None:
        start = time.perf_counter()
        await message.next()
        elapsed = (time.perf_counter() - start) * 1000
        if message.error is not None:
            message.logger.error(
                "request_id:%s, response error:%s", message.request_id, message.error
            )
            return
        duplicate, exists = message.get_duplicate_response()
        if not exists or duplicate is None:
            return
        body = duplicate.content[: self.max_body_len]
        url = ""
        if message.request is not None:
            url = message.request.url
        message.logger.info(
            "request_id:%s, url:%s, response http_code:%d, body:%s (%.2fms)",
            message.request_id,
            url,
            duplicate.status_code,
            body.decode("utf-8", errors="replace"),
            elapsed,
        )


def use_logger(log: logging.Logger | logging.LoggerAdapter[Any]) -> Any:
    """Middleware factory that routes a message's log lines to *log*."""

    async def _use_logger(message: Any) -> None:
        message.use_logger(log)
        await message.next()

    return _use_logger
