# SPDX-License-Identifier: Apache-2.0
"""Human-readable, multi-line rendering of a Record to the configured log writer."""

import logging

from http_request_logger.protocol import Record

REQUEST_LOGGER_NAME = "http_request_logger.requests"


class StructuredLoggerSink:
    """Writes one log line per call so handlers never tear a line."""

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or logging.getLogger(REQUEST_LOGGER_NAME)

    def render(self, record: Record) -> list[str]:
        """Build the lines emitted for a record, in order."""
        lines = [
            f"## ----- New Request {record.id} ----- ##",
            f"{record.id}\tRequest : \t'{record.method} {record.url}', "
            f"{record.content_length} bytes, from {record.client_address}",
            "Headers:",
        ]
        lines.extend(f"\t{name}: {value}" for name, value in record.header_lines())
        if record.body:
            lines.append(f"{record.id}\tBody: {record.body}")
        lines.append(f"## ----- End Request {record.id} ----- ##")
        return lines

    def emit(self, record: Record) -> None:
        for line in self.render(record):
            self.logger.info(line)
