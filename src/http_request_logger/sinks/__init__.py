# SPDX-License-Identifier: Apache-2.0
"""Record sinks for http_request_logger."""

from typing import Protocol

from http_request_logger.protocol import Record

from .json_emitter import JsonEmitterSink
from .structured import REQUEST_LOGGER_NAME, StructuredLoggerSink


class Sink(Protocol):
    """Anything that consumes a finished Record."""

    def emit(self, record: Record) -> None: ...


__all__ = ["Sink", "JsonEmitterSink", "StructuredLoggerSink", "REQUEST_LOGGER_NAME"]
