"""Live reload for the preview server."""

from postpress.live.reload import LiveReloadManager

__all__ = ["LiveReloadManager"]
