# SPDX-License-Identifier: Apache-2.0
"""Emits each Record as a single JSON line on standard output."""

import logging
import sys
import threading
from typing import TextIO

from pydantic_core import PydanticSerializationError

from http_request_logger.protocol import ErrorKind, Record

logger = logging.getLogger(__name__)


class JsonEmitterSink:
    """One ``write`` plus ``flush`` per record, serialized by a lock held for that write only."""

    def __init__(self, stream: TextIO | None = None):
        self._stream = stream
        self._lock = threading.Lock()

    @property
    def stream(self) -> TextIO:
        # resolved lazily so a redirected sys.stdout is honoured
        return self._stream if self._stream is not None else sys.stdout

    def emit(self, record: Record) -> None:
        try:
            line = record.to_json()
        except (PydanticSerializationError, ValueError, TypeError) as e:
            logger.error(
                f"[{ErrorKind.SERIALIZATION.value}] {record.id}\tJSON serialization failed, "
                f"emission skipped: {e}"
            )
            return

        stream = self.stream
        with self._lock:
            stream.write(line + "\n")
            stream.flush()
