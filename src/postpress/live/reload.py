"""WebSocket-based live reload for the preview server.

Monitors post sources for changes and notifies connected clients
via WebSocket to trigger page reloads.
"""

import asyncio
import contextlib
import json
import logging
import weakref
from pathlib import Path

from aiohttp import WSMsgType, web
from watchfiles import Change, awatch

from postpress.core.cache import FileCache
from postpress.core.paths import DEFAULT_EXTENSION, slug_from_filename, slug_to_route

logger = logging.getLogger(__name__)


class LiveReloadManager:
    """Manages WebSocket connections and file watching for live reload."""

    def __init__(
        self,
        source_dir: Path,
        *,
        extension: str = DEFAULT_EXTENSION,
        cache: FileCache | None = None,
    ) -> None:
        """Initialize the live reload manager.

        Args:
            source_dir: Posts directory to watch
            extension: Source file extension to react to
            cache: Serialized source cache to invalidate on change
        """
        self._source_dir = source_dir
        self._extension = extension
        self._cache = cache
        self._connections: weakref.WeakSet[web.WebSocketResponse] = weakref.WeakSet()
        self._watch_task: asyncio.Task[None] | None = None

    async def start(self) -> None:
        """Start watching the posts directory."""
        if self._watch_task is not None:
            return
        logger.info(f"Watching {self._source_dir} for *{self._extension} changes")
        self._watch_task = asyncio.create_task(self._watch_files())

    async def stop(self) -> None:
        """Stop the watcher and disconnect every client."""
        if self._watch_task is not None:
            self._watch_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._watch_task
            self._watch_task = None

        clients = list(self._connections)
        await asyncio.gather(*(ws.close(message=b"server shutdown") for ws in clients))

    async def handle_websocket(self, request: web.Request) -> web.WebSocketResponse:
        """Keep a client connection open until it disconnects.

        Clients only listen; incoming messages are ignored.
        """
        ws = web.WebSocketResponse()
        await ws.prepare(request)
        self._connections.add(ws)
        logger.debug(f"Live reload client connected ({len(self._connections)} open)")

        try:
            async for msg in ws:
                if msg.type == WSMsgType.ERROR:
                    logger.debug(f"Live reload connection error: {ws.exception()}")
                    break
        finally:
            self._connections.discard(ws)

        return ws

    async def _watch_files(self) -> None:
        """Turn each batch of filesystem changes into one reload per post."""
        async for changes in awatch(self._source_dir):
            routes = {
                route
                for change_type, path_str in changes
                if (route := self.handle_change(change_type, Path(path_str))) is not None
            }
            for route in sorted(routes):
                await self.broadcast_reload(route)

    def handle_change(self, change_type: Change, path: Path) -> str | None:
        """Invalidate the cache for a changed post.

        Args:
            change_type: Kind of filesystem change
            path: Changed file

        Returns:
            Route to reload, or None if the change is not a post edit
        """
        if path.parent.resolve() != self._source_dir.resolve() or not path.name.endswith(self._extension):
            return None

        slug = slug_from_filename(path.name, self._extension)
        if self._cache is not None:
            self._cache.invalidate(slug)

        if change_type == Change.deleted:
            return None

        logger.info(f"Post changed: {path.name}")
        return slug_to_route(slug)

    async def broadcast_reload(self, route: str) -> int:
        """Tell connected clients that a post changed.

        Args:
            route: Route of the changed post, e.g. ``/posts/hello-world``

        Returns:
            Number of clients the message reached
        """
        clients = [ws for ws in self._connections if not ws.closed]
        if not clients:
            return 0

        message = json.dumps({"type": "reload", "path": route})
        results = await asyncio.gather(
            *(ws.send_str(message) for ws in clients),
            return_exceptions=True,
        )
        # Clients that dropped mid-send leave the WeakSet on their own
        for result in results:
            if isinstance(result, BaseException) and not isinstance(result, ConnectionResetError):
                raise result
        delivered = sum(1 for result in results if result is None)
        logger.debug(f"Reload {route} sent to {delivered} client(s)")
        return delivered


def create_live_reload_routes(manager: LiveReloadManager) -> list[web.RouteDef]:
    """Create routes for live reload WebSocket."""
    return [web.get("/ws/live-reload", manager.handle_websocket)]
