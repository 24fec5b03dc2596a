# SPDX-License-Identifier: Apache-2.0
"""
Main entry point for the http-request-logger server.
"""

import argparse
import logging
import sys

import uvicorn
from fastapi import FastAPI, Request

from http_request_logger import APP_NAME, __version__
from http_request_logger.capture import CapturePipeline, ack_response
from http_request_logger.config import (
    LOG_DISCARD,
    LOG_STDERR,
    LOG_STDOUT,
    Settings,
    get_settings,
)
from http_request_logger.protocol import ConfigurationError
from http_request_logger.router import router
from http_request_logger.sinks import (
    REQUEST_LOGGER_NAME,
    JsonEmitterSink,
    StructuredLoggerSink,
)
from http_request_logger.utils import IdGenerator

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def create_log_handler(log_file: str) -> logging.Handler:
    """Build the handler writing to the configured log destination.

    Args:
        log_file: "stdout", "stderr", "DISCARD" or a file path (appended to, created if missing)

    Raises:
        ConfigurationError: if the file cannot be opened
    """
    if log_file == LOG_STDOUT:
        return logging.StreamHandler(sys.stdout)
    if log_file == LOG_STDERR:
        return logging.StreamHandler(sys.stderr)
    if log_file == LOG_DISCARD:
        return logging.NullHandler()
    try:
        return logging.FileHandler(log_file, mode="a", encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"LOG_FILE {log_file!r} could not be opened: {e}") from e


def setup_logging(log_level: str, log_file: str = LOG_STDERR) -> None:
    """Route all logging, request dumps included, to the configured writer.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Log destination, see create_log_handler
    """
    handler = create_log_handler(log_file)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper()))
    # request dumps are written whatever the level
    logging.getLogger(REQUEST_LOGGER_NAME).setLevel(logging.INFO)

    # Clear existing handlers
    root_logger.handlers = [handler]


def create_pipeline(settings: Settings) -> CapturePipeline:
    return CapturePipeline(
        id_generator=IdGenerator(),
        sinks=[StructuredLoggerSink(), JsonEmitterSink()],
        read_timeout=settings.read_timeout,
    )


def create_app(
    settings: Settings | None = None,
    pipeline: CapturePipeline | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    if settings is None:
        settings = get_settings()
    if pipeline is None:
        pipeline = create_pipeline(settings)

    # docs routes would shadow captured paths
    app = FastAPI(
        title=APP_NAME,
        description="A diagnostic server that logs every HTTP request it receives",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    app.state.settings = settings
    app.state.pipeline = pipeline

    app.include_router(router)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Log unexpected exceptions; the client still gets the acknowledgement."""
        logging.exception("Unhandled exception")
        return ack_response()

    return app


def run_foreground(settings: Settings) -> None:
    """Run server in foreground mode (blocking)."""
    try:
        setup_logging(settings.log_level, settings.log_file)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    logger = logging.getLogger(APP_NAME)
    logger.info(f"Starting App: {APP_NAME}, version: {__version__}")

    app = create_app(settings)

    logger.info(f"Server starting on {settings.listen_address}")
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        log_config=None,  # uvicorn loggers propagate to our handler
        access_log=False,
        http="h11",  # httptools rejects methods it does not know
        timeout_keep_alive=int(settings.idle_timeout),
        timeout_graceful_shutdown=int(settings.write_timeout),
    )


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="A diagnostic HTTP server that logs every request it receives",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment:
  PORT          listen port (default: 8888)
  LISTEN_HOST   listen host (default: localhost)
  LOG_FILE      stdout, stderr, DISCARD or a file path (default: stderr)
  LOG_LEVEL     logging level (default: INFO); request dumps are always logged

write_timeout only bounds graceful shutdown; uvicorn has no per-response
write deadline.
        """.strip(),
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--host",
        default=None,
        help="Server host (default: localhost)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Server port (default: 8888)",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Log destination: stdout, stderr, DISCARD or a file path (default: stderr)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["debug", "info", "warning", "error"],
        help="Logging level (default: info)",
    )

    args = parser.parse_args()

    try:
        if any(v is not None for v in (args.host, args.port, args.log_file, args.log_level)):
            settings = Settings.load(
                host=args.host,
                port=args.port,
                log_file=args.log_file,
                log_level=args.log_level,
            )
        else:
            settings = get_settings()
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    run_foreground(settings)


if __name__ == "__main__":
    main()
