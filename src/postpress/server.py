"""aiohttp preview server for Postpress.

Renders posts on demand at ``/posts/{slug}``. Only slugs enumerated from the
posts directory are served; everything else is a 404.
"""

import logging
from hashlib import md5

from aiohttp import web

from postpress.app_keys import page_key
from postpress.config import Config
from postpress.posts import PostPage

logger = logging.getLogger(__name__)

NOT_FOUND_HTML = (
    "<!DOCTYPE html>\n<html lang=\"en\"><head><meta charset=\"utf-8\">"
    "<title>404: This page could not be found</title></head>"
    "<body><h1>404</h1><p>This page could not be found.</p></body></html>\n"
)


def create_post_routes() -> list[web.RouteDef]:
    return [
        web.get("/posts/{slug}", get_post),
    ]


async def get_post(request: web.Request) -> web.Response:
    slug = request.match_info["slug"]
    page = request.app[page_key]

    try:
        static_paths = page.get_static_paths()
    except FileNotFoundError:
        logger.warning(f"Posts directory not found: {page.source_dir}")
        return _not_found()

    # Fallback is disabled: only pre-enumerated slugs are served
    if slug not in static_paths:
        return _not_found()

    try:
        rendered = await page.build_page(slug)
    except FileNotFoundError:
        return _not_found()

    etag = _compute_etag(rendered.html)
    if request.headers.get("If-None-Match") == etag:
        return web.Response(status=304)

    return web.Response(
        text=rendered.html,
        content_type="text/html",
        headers={"ETag": etag, "Cache-Control": "no-cache"},
    )


def _not_found() -> web.Response:
    return web.Response(status=404, text=NOT_FOUND_HTML, content_type="text/html")


def _compute_etag(content: str) -> str:
    # First 16 hex chars (64 bits) are enough for cache validation
    content_hash = md5(content.encode("utf-8"), usedforsecurity=False).hexdigest()[:16]
    return f'"{content_hash}"'


def create_app(config: Config) -> web.Application:
    """Create aiohttp application.

    Args:
        config: Application configuration

    Returns:
        Configured aiohttp application
    """
    app = web.Application()

    page = PostPage.from_config(config, live_reload=config.live_reload.enabled)
    app[page_key] = page

    app.router.add_routes(create_post_routes())

    if config.live_reload.enabled:
        from postpress.live import LiveReloadManager
        from postpress.live.reload import create_live_reload_routes

        manager = LiveReloadManager(
            config.posts.source_dir,
            extension=config.posts.extension,
            cache=page.cache,
        )
        app["live_reload_manager"] = manager
        app.router.add_routes(create_live_reload_routes(manager))
        app.on_startup.append(_start_live_reload)
        app.on_cleanup.append(_stop_live_reload)

    return app


async def _start_live_reload(app: web.Application) -> None:
    """Start live reload on application startup."""
    from postpress.live import LiveReloadManager

    manager: LiveReloadManager = app["live_reload_manager"]
    await manager.start()


async def _stop_live_reload(app: web.Application) -> None:
    """Stop live reload on application cleanup."""
    from postpress.live import LiveReloadManager

    manager: LiveReloadManager = app["live_reload_manager"]
    await manager.stop()


def run_server(config: Config) -> None:
    """Run the preview server.

    Args:
        config: Application configuration
    """
    app = create_app(config)
    web.run_app(app, host=config.server.host, port=config.server.port)
