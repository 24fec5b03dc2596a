# SPDX-License-Identifier: Apache-2.0
"""
Capture pipeline: turns one inbound request into a Record and hands it to the sinks.
"""

import asyncio
import logging
import string
from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime, timezone
from typing import Any

from fastapi import Request, Response
from starlette.concurrency import run_in_threadpool
from starlette.requests import ClientDisconnect

from http_request_logger.protocol import ACK_BODY, ACK_CONTENT_TYPE, ErrorKind, Record
from http_request_logger.sinks import Sink
from http_request_logger.utils import IdGenerator

logger = logging.getLogger(__name__)

DEFAULT_READ_TIMEOUT = 10.0

_TOKEN_CHARS = frozenset(string.ascii_letters + string.digits + "!#$%&'*+-.^_`|~")


def canonical_header_key(name: str) -> str:
    """Canonicalize a header name the MIME way (``x-test`` -> ``X-Test``).

    Names containing characters outside the HTTP token set are returned unchanged.
    """
    if not name or any(c not in _TOKEN_CHARS for c in name):
        return name
    return "-".join(part[:1].upper() + part[1:].lower() for part in name.split("-"))


def collect_headers(raw_headers: Iterable[tuple[bytes, bytes]]) -> dict[str, tuple[str, ...]]:
    """Group raw ASGI header pairs by canonical name, keeping value order."""
    grouped: dict[str, list[str]] = {}
    for raw_name, raw_value in raw_headers:
        name = canonical_header_key(raw_name.decode("latin-1"))
        grouped.setdefault(name, []).append(raw_value.decode("latin-1"))
    return {name: tuple(values) for name, values in grouped.items()}


def declared_content_length(headers: Mapping[str, Sequence[str]]) -> int:
    """Body size declared by the client.

    -1 when the length is unknown (chunked transfer or an unparseable value),
    0 when no body is declared at all.
    """
    transfer_encoding = ",".join(headers.get("Transfer-Encoding", ())).lower()
    if "chunked" in transfer_encoding:
        return -1
    values = headers.get("Content-Length")
    if not values:
        return 0
    try:
        return int(values[0].strip())
    except ValueError:
        return -1


def format_protocol(scope: Mapping[str, Any]) -> str:
    return f"HTTP/{scope.get('http_version', '1.1')}"


def format_url(scope: Mapping[str, Any]) -> str:
    """Request target as received: raw path plus query string."""
    raw_path = scope.get("raw_path")
    if raw_path:
        path = raw_path.split(b"?", 1)[0].decode("latin-1")
    else:
        path = scope.get("path", "/")
    query = scope.get("query_string", b"")
    if query:
        return f"{path}?{query.decode('latin-1')}"
    return path


def format_client_address(scope: Mapping[str, Any]) -> str:
    client = scope.get("client")
    if not client:
        return ""
    host, port = client[0], client[1]
    if ":" in host:
        return f"[{host}]:{port}"
    return f"{host}:{port}"


def ack_response() -> Response:
    """The fixed acknowledgement every captured request receives."""
    return Response(content=ACK_BODY, status_code=200, media_type=ACK_CONTENT_TYPE)


class CapturePipeline:
    """Builds a Record per request and dispatches it to every sink.

    Dependencies are injected once at construction; nothing ambient is read
    while a request is being handled.
    """

    def __init__(
        self,
        id_generator: IdGenerator,
        sinks: Sequence[Sink],
        read_timeout: float | None = DEFAULT_READ_TIMEOUT,
    ):
        self.id_generator = id_generator
        self.sinks = list(sinks)
        self.read_timeout = read_timeout

    async def read_body(self, request_id: str, request: Request) -> str:
        """Read the full body; any failure is logged and yields an empty body."""
        try:
            body_bytes = await asyncio.wait_for(request.body(), timeout=self.read_timeout)
        except ClientDisconnect:
            logger.warning(
                f"[{ErrorKind.TRANSPORT.value}] {request_id}\t"
                "Error reading request body: client disconnected"
            )
            return ""
        except asyncio.TimeoutError:
            logger.warning(
                f"[{ErrorKind.TRANSPORT.value}] {request_id}\t"
                f"Error reading request body: timed out after {self.read_timeout}s"
            )
            return ""
        except Exception as e:
            logger.warning(
                f"[{ErrorKind.TRANSPORT.value}] {request_id}\tError reading request body: {e!r}"
            )
            return ""
        return body_bytes.decode("utf-8", errors="replace")

    def dispatch(self, record: Record) -> None:
        for sink in self.sinks:
            try:
                sink.emit(record)
            except Exception as e:
                logger.error(
                    f"[{ErrorKind.SINK_WRITE.value}] {record.id}\t"
                    f"{type(sink).__name__} failed: {e!r}"
                )

    async def handle(self, request: Request) -> tuple[Record, Response]:
        request_id = self.id_generator.generate()

        scope = request.scope
        headers = collect_headers(scope.get("headers", []))
        protocol = format_protocol(scope)
        method = scope.get("method", "")
        url = format_url(scope)
        content_length = declared_content_length(headers)
        client_address = format_client_address(scope)

        body = await self.read_body(request_id, request)

        record = Record(
            id=request_id,
            timestamp=datetime.now(timezone.utc),
            protocol=protocol,
            method=method,
            url=url,
            content_length=content_length,
            client_address=client_address,
            headers=headers,
            body=body,
        )
        # sink writes may block on a slow writer; keep them off the event loop
        await run_in_threadpool(self.dispatch, record)
        return record, ack_response()
