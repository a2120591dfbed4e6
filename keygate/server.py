"""aiohttp application: /auth, /healthz endpoints and the API key middleware."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from aiohttp import web

from keygate.auth import SCHEME, AuthHeaderError, get_api_key

log = logging.getLogger(__name__)

KEY_SUFFIX_HEADER = "X-Keygate-Key-Suffix"

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


def _mask_key(raw_key: str) -> str:
    """Return a suffix of the key for debugging, never more than half of it."""
    visible = min(6, len(raw_key) // 2)
    if not visible:
        return ""
    return raw_key[-visible:]


def _unauthorized(exc: AuthHeaderError) -> web.Response:
    return web.Response(
        status=401,
        text=str(exc),
        headers={"WWW-Authenticate": SCHEME},
    )


def _exempt_paths(config: dict[str, Any]) -> frozenset[str]:
    paths = config.get("auth", {}).get("exempt_paths") or []
    # Env overrides arrive as a single comma-separated string
    if isinstance(paths, str):
        paths = [p.strip() for p in paths.split(",") if p.strip()]
    return frozenset(paths)


@web.middleware
async def api_key_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
    """Reject requests without a well-formed ApiKey header; stash the key otherwise."""
    if request.path in request.app["exempt_paths"]:
        return await handler(request)
    try:
        key = get_api_key(request.headers)
    except AuthHeaderError as exc:
        log.debug("Rejected %s %s: %s", request.method, request.path, exc.kind.name)
        return _unauthorized(exc)
    request["api_key"] = key
    return await handler(request)


async def healthz(request: web.Request) -> web.Response:
    return web.Response(text="ok")


async def auth(request: web.Request) -> web.Response:
    # Guarded by api_key_middleware unless /auth itself is exempt
    try:
        key = request["api_key"] if "api_key" in request else get_api_key(request.headers)
    except AuthHeaderError as exc:
        log.debug("Auth check failed: %s", exc.kind.name)
        return _unauthorized(exc)
    log.debug("Auth check passed for key ...%s", _mask_key(key))
    return web.Response(
        status=200, text="ok", headers={KEY_SUFFIX_HEADER: _mask_key(key)}
    )


def create_app(config: dict[str, Any]) -> web.Application:
    app = web.Application(middlewares=[api_key_middleware])
    app["config"] = config
    app["exempt_paths"] = _exempt_paths(config)

    app.router.add_get("/auth", auth)
    app.router.add_get("/healthz", healthz)
    return app
