from __future__ import annotations

import json
import logging
import time
import uuid
from typing import Any, Dict, Iterable, List, Optional, Tuple
from urllib.parse import parse_qsl

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from presley_site.config import env_bool, env_int

logger = logging.getLogger("presley_site.api.http")


_SENSITIVE_KEYS = {
    "authorization",
    "cookie",
    "set-cookie",
    "password",
    "usercredentials",
    "secret",
    "token",
}


def _redact(value: Any) -> Any:
    if isinstance(value, dict):
        out: Dict[str, Any] = {}
        for k, v in value.items():
            if str(k).lower() in _SENSITIVE_KEYS:
                out[k] = "***"
            else:
                out[k] = _redact(v)
        return out
    if isinstance(value, list):
        return [_redact(v) for v in value]
    return value


def _decode_headers(headers: Optional[Iterable[Tuple[bytes, bytes]]]) -> Dict[str, str]:
    out: Dict[str, str] = {}
    for k, v in headers or []:
        key = k.decode("latin-1").lower()
        out[key] = "***" if key in _SENSITIVE_KEYS else v.decode("latin-1")
    return out


def _content_type(headers: Optional[Iterable[Tuple[bytes, bytes]]]) -> str:
    for k, v in headers or []:
        if k.lower() == b"content-type":
            return v.decode("latin-1")
    return ""


def _parse_body(content_type: str, body: bytes) -> Any:
    ct = (content_type or "").lower()
    text = body.decode("utf-8", errors="replace")
    if "application/x-www-form-urlencoded" in ct:
        # Login and design forms post here; never log field values such as passwords.
        return _redact(dict(parse_qsl(text, keep_blank_values=True)))
    if "application/json" in ct:
        try:
            return _redact(json.loads(text))
        except ValueError:
            return text
    if "multipart/form-data" in ct:
        return "<multipart>"
    if ct.startswith("text/html"):
        return f"<html {len(body)} bytes>"
    if ct.startswith("text/"):
        return text
    if not body:
        return ""
    return "<binary>"


def _get_request_id(scope: Scope) -> Optional[str]:
    for k, v in scope.get("headers") or []:
        if k.lower() == b"x-request-id":
            return v.decode("latin-1")
    return None


class HttpLoggingMiddleware:
    """ASGI middleware writing one JSON line per HTTP request/response pair."""

    def __init__(self, app: ASGIApp, *, log_headers: bool, max_body_bytes: int) -> None:
        self.app = app
        self.log_headers = log_headers
        self.max_body_bytes = max(0, max_body_bytes)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        started_at = time.perf_counter()
        request_id = _get_request_id(scope) or uuid.uuid4().hex[:12]

        req_headers_list: List[Tuple[bytes, bytes]] = list(scope.get("headers") or [])
        req_ct = _content_type(req_headers_list)
        req_body = bytearray()
        res_headers_list: List[Tuple[bytes, bytes]] = []
        res_status: Optional[int] = None
        res_body = bytearray()

        def _capture(buf: bytearray, chunk: bytes) -> None:
            remaining = self.max_body_bytes - len(buf)
            if chunk and remaining > 0:
                buf.extend(chunk[:remaining])

        async def receive_wrapped() -> Message:
            message = await receive()
            if message.get("type") == "http.request":
                _capture(req_body, message.get("body") or b"")
            return message

        async def send_wrapped(message: Message) -> None:
            nonlocal res_status, res_headers_list
            if message.get("type") == "http.response.start":
                res_status = int(message.get("status") or 0)
                res_headers_list = list(message.get("headers") or [])
            elif message.get("type") == "http.response.body":
                _capture(res_body, message.get("body") or b"")
            await send(message)

        err: Optional[BaseException] = None
        try:
            await self.app(scope, receive_wrapped, send_wrapped)
        except BaseException as e:  # noqa: BLE001 - log then re-raise
            err = e
            raise
        finally:
            res_ct = _content_type(res_headers_list)
            record: Dict[str, Any] = {
                "id": request_id,
                "method": str(scope.get("method") or "").upper(),
                "path": str(scope.get("path") or ""),
                "query": (scope.get("query_string") or b"").decode("latin-1", errors="ignore"),
                "status": res_status,
                "dur_ms": int((time.perf_counter() - started_at) * 1000),
                "request": {
                    "content_type": req_ct,
                    "headers": _decode_headers(req_headers_list) if self.log_headers else {},
                    "body": _parse_body(req_ct, bytes(req_body)) if self.max_body_bytes else "",
                },
                "response": {
                    "content_type": res_ct,
                    "headers": _decode_headers(res_headers_list) if self.log_headers else {},
                    "body": _parse_body(res_ct, bytes(res_body)) if self.max_body_bytes else "",
                },
            }
            if err is not None:
                record["error"] = {"type": type(err).__name__, "message": str(err)}
            logger.info(json.dumps(record, ensure_ascii=False, separators=(",", ":")))


def install_http_logging(app: Any) -> bool:
    """
    Enable request/response logging via env vars.

    - `SITE_HTTP_LOG=1` enables middleware
    - `SITE_HTTP_LOG_HEADERS=1` logs request/response headers (redacted)
    - `SITE_HTTP_LOG_BODY_MAX_BYTES=4096` caps body bytes captured per request/response
    """
    if not env_bool("SITE_HTTP_LOG", default=False):
        return False
    log_headers = env_bool("SITE_HTTP_LOG_HEADERS", default=False)
    max_body_bytes = env_int("SITE_HTTP_LOG_BODY_MAX_BYTES", default=4096)
    app.add_middleware(HttpLoggingMiddleware, log_headers=log_headers, max_body_bytes=max_body_bytes)
    return True
