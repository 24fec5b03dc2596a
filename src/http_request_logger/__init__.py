# SPDX-License-Identifier: Apache-2.0
"""
http-request-logger: A diagnostic HTTP server that records every request it receives.
"""

__version__ = "0.1.0"
APP_NAME = "http-request-logger"

from http_request_logger.protocol import (
    ACK_BODY,
    ACK_CONTENT_TYPE,
    ConfigurationError,
    ErrorKind,
    Record,
    RequestLoggerError,
)

__all__ = [
    "__version__",
    "APP_NAME",
    "ACK_BODY",
    "ACK_CONTENT_TYPE",
    "ConfigurationError",
    "ErrorKind",
    "Record",
    "RequestLoggerError",
]
