# SPDX-License-Identifier: Apache-2.0
"""Request capture for http_request_logger."""

from .pipeline import (
    DEFAULT_READ_TIMEOUT,
    CapturePipeline,
    ack_response,
    canonical_header_key,
    collect_headers,
    declared_content_length,
    format_client_address,
    format_protocol,
    format_url,
)

__all__ = [
    "DEFAULT_READ_TIMEOUT",
    "CapturePipeline",
    "ack_response",
    "canonical_header_key",
    "collect_headers",
    "declared_content_length",
    "format_client_address",
    "format_protocol",
    "format_url",
]
