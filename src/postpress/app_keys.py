"""Application keys for type-safe app configuration access."""

from aiohttp import web

from postpress.posts import PostPage

page_key = web.AppKey("page", PostPage)
