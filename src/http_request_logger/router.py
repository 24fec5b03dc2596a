# SPDX-License-Identifier: Apache-2.0
"""
FastAPI router: the favicon route and the catch-all capture route.
"""

from pathlib import Path

from fastapi import APIRouter, Depends, Request
from fastapi.responses import FileResponse, PlainTextResponse, Response
from starlette.types import Receive, Scope, Send

from http_request_logger.capture import CapturePipeline
from http_request_logger.config import Settings, get_settings

router = APIRouter()

__all__ = [
    "router",
    "get_request_settings",
    "get_request_pipeline",
    "favicon",
    "CaptureEndpoint",
]


def get_request_settings(request: Request) -> Settings:
    """Resolve Settings from the running app when available.

    This allows tests (and embedders) to pass an explicit Settings instance via
    `create_app(settings=...)` without requiring environment variables.
    """
    state = getattr(getattr(request, "app", None), "state", None)
    if state is not None and hasattr(state, "settings"):
        return state.settings  # type: ignore[return-value]
    return get_settings()


def get_request_pipeline(request: Request) -> CapturePipeline:
    """The CapturePipeline built by create_app for this application."""
    return request.app.state.pipeline


@router.get("/favicon.ico", include_in_schema=False)
async def favicon(settings: Settings = Depends(get_request_settings)) -> Response:
    """Serve the static favicon from the working directory."""
    path = Path(settings.favicon_path)
    if not path.is_file():
        return PlainTextResponse("404 page not found\n", status_code=404)
    return FileResponse(path, media_type="image/x-icon")


class CaptureEndpoint:
    """Raw ASGI endpoint so the route accepts any method, standard or not."""

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        request = Request(scope, receive)
        pipeline = get_request_pipeline(request)
        _, response = await pipeline.handle(request)
        await response(scope, receive, send)


# registered last: every other method and path is captured
router.add_route(
    "/{full_path:path}",
    CaptureEndpoint(),
    name="capture",
    include_in_schema=False,
)
