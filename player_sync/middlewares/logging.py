import json
import logging
import time
import uuid
from typing import Callable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("player_sync.access")

REDACTED_FIELDS = {"password"}


def _redact(body: str | None):
    if not body:
        return None
    try:
        data = json.loads(body)
    except ValueError:
        return body
    if isinstance(data, dict):
        return {k: "***" if k in REDACTED_FIELDS else v for k, v in data.items()}
    return data


class LoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable):
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        start_time = time.time()

        try:
            body_bytes = await request.body()
            request_body = body_bytes.decode("utf-8") if body_bytes else None
        except Exception:
            request_body = None

        try:
            response = await call_next(request)
        except Exception:
            # ответ 500 отдаст обработчик ошибок уровнем выше
            self._log_access(request, request_id, start_time, 500, request_body, None)
            raise

        response_body = None

        if hasattr(response, "body_iterator"):
            body_chunks = []
            async for chunk in response.body_iterator:
                body_chunks.append(chunk)
            response_body_bytes = b"".join(body_chunks)

            async def async_iterator(data: bytes):
                yield data

            response.body_iterator = async_iterator(response_body_bytes)

            try:
                response_body = response_body_bytes.decode("utf-8")
                try:
                    response_body = json.loads(response_body)
                except ValueError:
                    pass
            except UnicodeDecodeError:
                response_body = str(response_body_bytes)

        self._log_access(
            request,
            request_id,
            start_time,
            response.status_code,
            request_body,
            response_body,
        )

        response.headers["X-Request-ID"] = request_id
        return response

    @staticmethod
    def _log_access(
        request: Request,
        request_id: str,
        start_time: float,
        status_code: int,
        request_body: str | None,
        response_body,
    ) -> None:
        duration_ms = (time.time() - start_time) * 1000

        log_data = {
            "timestamp": time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime()),
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "status_code": status_code,
            "duration_ms": round(duration_ms, 2),
            "request_body": _redact(request_body),
            "response_body": response_body,
        }

        logger.info(json.dumps(log_data, ensure_ascii=False, default=str))
