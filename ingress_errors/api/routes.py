from __future__ import annotations

from fastapi import APIRouter, Request, Response
from starlette.concurrency import run_in_threadpool
from starlette.types import Receive, Scope, Send

from ..config import Settings
from ..domain.signals import CODE_HEADER, FORMAT_HEADER
from ..service import responder

router = APIRouter()


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def serve_template(request: Request) -> Response:
    """Serve the pre-rendered page selected by X-Code / X-Format."""
    settings = get_settings(request)
    outcome = responder.respond(
        templates_dir=settings.templates_dir,
        path=request.url.path,
        code_header=request.headers.get(CODE_HEADER),
        format_header=request.headers.get(FORMAT_HEADER),
    )
    # No media_type: the body goes out without a Content-Type header.
    return Response(content=outcome.body, status_code=outcome.status_code)


class DefaultBackend:
    """ASGI endpoint answering every HTTP method, extension methods included.

    Starlette only leaves a route's methods unrestricted when its endpoint is
    a plain ASGI app rather than a function.
    """

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        request = Request(scope, receive)
        # The template read blocks, so it runs in the threadpool.
        response = await run_in_threadpool(serve_template, request)
        await response(scope, receive, send)


router.add_route("/{full_path:path}", DefaultBackend(), include_in_schema=False)
