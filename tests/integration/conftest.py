# SPDX-License-Identifier: Apache-2.0
"""
Pytest configuration and fixtures for integration tests.
"""

import io
import json
import logging
from collections.abc import AsyncGenerator
from typing import Any

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport

from http_request_logger.capture import CapturePipeline
from http_request_logger.config import Settings
from http_request_logger.main import create_app
from http_request_logger.sinks import JsonEmitterSink, StructuredLoggerSink
from http_request_logger.utils import IdGenerator

CLIENT_ADDRESS = ("203.0.113.5", 54321)


class ListHandler(logging.Handler):
    """Collects formatted messages of the request logger."""

    def __init__(self) -> None:
        super().__init__()
        self.lines: list[str] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.lines.append(record.getMessage())


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Create test settings."""
    return Settings(
        host="127.0.0.1",
        port=8888,
        log_file="DISCARD",
        read_timeout=5.0,
        favicon_path=str(tmp_path / "favicon.ico"),
    )


@pytest.fixture
def json_stream() -> io.StringIO:
    """Stand-in for standard output."""
    return io.StringIO()


@pytest.fixture
def log_handler() -> ListHandler:
    return ListHandler()


@pytest.fixture
def request_logger(log_handler: ListHandler) -> logging.Logger:
    logger = logging.getLogger("test.integration.requests")
    logger.setLevel(logging.INFO)
    logger.propagate = False
    logger.handlers = [log_handler]
    yield logger
    logger.handlers = []


@pytest.fixture
def pipeline(
    test_settings: Settings, request_logger: logging.Logger, json_stream: io.StringIO
) -> CapturePipeline:
    return CapturePipeline(
        IdGenerator(),
        [StructuredLoggerSink(request_logger), JsonEmitterSink(json_stream)],
        read_timeout=test_settings.read_timeout,
    )


@pytest_asyncio.fixture
async def app(test_settings: Settings, pipeline: CapturePipeline) -> FastAPI:
    """Create FastAPI application with test settings."""
    return create_app(test_settings, pipeline)


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[httpx.AsyncClient, None]:
    """Create async HTTP client for testing."""
    transport = ASGITransport(app=app, client=CLIENT_ADDRESS)
    async with httpx.AsyncClient(
        transport=transport, base_url="http://test"
    ) as client:
        yield client


@pytest.fixture
def emitted(json_stream: io.StringIO):
    """Parse every JSON line written so far."""

    def parse() -> list[dict[str, Any]]:
        return [json.loads(line) for line in json_stream.getvalue().splitlines()]

    return parse
