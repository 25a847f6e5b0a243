"""Post page definition.

Ties the pipeline together for the ``/posts/<slug>`` route: static path
enumeration, static props (load and serialize) and page rendering.
"""

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any, TypedDict

from postpress.codehike import CH, code_hike, load_theme
from postpress.codehike.themes import DEFAULT_THEME
from postpress.config import Config
from postpress.core.cache import FileCache
from postpress.core.loader import load_document, resolve_source_path
from postpress.core.paths import DEFAULT_EXTENSION, StaticPaths, get_static_paths
from postpress.core.renderer import PageOptions, RenderedPage, render_page
from postpress.core.serializer import (
    MdxOptions,
    SerializedSource,
    SerializedSourceDict,
    options_fingerprint,
    serialize_async,
)

logger = logging.getLogger(__name__)

DEFAULT_COMPONENTS: Mapping[str, Any] = {"CH": CH}


class PostPropsDict(TypedDict):
    """Props handed from static generation to rendering."""

    source: SerializedSourceDict


class StaticPropsDict(TypedDict):
    """Static props result."""

    props: PostPropsDict


def post_mdx_options(
    theme: str = DEFAULT_THEME,
    *,
    auto_import: bool = False,
    line_numbers: bool = False,
    use_dynamic_import: bool = True,
    markdown_plugins: list[str] | None = None,
) -> MdxOptions:
    """Build the MDX options used for posts.

    Args:
        theme: Bundled theme name or path to a theme JSON file
        auto_import: Let Code Hike register its own ``CH`` import
        line_numbers: Show line numbers in code panels
        use_dynamic_import: Resolve imports at render time
        markdown_plugins: Extra mistune plugins

    Returns:
        MdxOptions with the Code Hike plugin configured
    """
    return MdxOptions(
        remark_plugins=[
            (
                code_hike,
                {
                    "auto_import": auto_import,
                    "theme": load_theme(theme),
                    "line_numbers": line_numbers,
                },
            ),
        ],
        use_dynamic_import=use_dynamic_import,
        markdown_plugins=list(markdown_plugins or []),
    )


class PostPage:
    """Static page definition for blog posts."""

    def __init__(
        self,
        source_dir: Path,
        *,
        extension: str = DEFAULT_EXTENSION,
        mdx_options: MdxOptions | None = None,
        components: Mapping[str, Any] | None = None,
        page_options: PageOptions | None = None,
        cache: FileCache | None = None,
    ) -> None:
        """Initialize page definition.

        Args:
            source_dir: Posts directory
            extension: Source file extension
            mdx_options: Serialization options (default: Code Hike post options)
            components: Component registry (default: ``{"CH": CH}``)
            page_options: Page chrome
            cache: Optional cache for serialized sources
        """
        self._source_dir = source_dir
        self._extension = extension
        self._mdx_options = mdx_options if mdx_options is not None else post_mdx_options()
        self._options_hash = options_fingerprint(self._mdx_options)
        self._components = components if components is not None else DEFAULT_COMPONENTS
        self._page_options = page_options or PageOptions()
        self._cache = cache

    @classmethod
    def from_config(cls, config: Config, *, live_reload: bool = False) -> "PostPage":
        """Create a page definition from application configuration."""
        cache = FileCache(config.build.cache_dir) if config.build.cache_enabled else None
        return cls(
            config.posts.source_dir,
            extension=config.posts.extension,
            mdx_options=post_mdx_options(
                config.codehike.theme,
                auto_import=config.codehike.auto_import,
                line_numbers=config.codehike.line_numbers,
                use_dynamic_import=config.mdx.use_dynamic_import,
                markdown_plugins=config.mdx.markdown_plugins,
            ),
            page_options=PageOptions(
                title=config.site.title,
                home_href=config.site.home_href,
                live_reload=live_reload,
            ),
            cache=cache,
        )

    @property
    def source_dir(self) -> Path:
        """Posts directory."""
        return self._source_dir

    @property
    def extension(self) -> str:
        """Source file extension."""
        return self._extension

    @property
    def cache(self) -> FileCache | None:
        """Serialized source cache, if enabled."""
        return self._cache

    def get_static_paths(self) -> StaticPaths:
        """Enumerate post paths to pre-render.

        Raises:
            FileNotFoundError: If the posts directory doesn't exist
        """
        return get_static_paths(self._source_dir, self._extension)

    async def get_static_props(self, params: Mapping[str, Any]) -> StaticPropsDict:
        """Load and serialize one post.

        Args:
            params: Route parameters; ``slug`` is a list of path segments
                or a single string

        Returns:
            ``{"props": {"source": <serialized source dict>}}``

        Raises:
            FileNotFoundError: If the post doesn't exist
            MDXSyntaxError: If the post is malformed
        """
        slug = _slug_from_params(params)
        source = await self.serialize_post(slug)
        return {"props": {"source": source.to_dict()}}

    async def serialize_post(self, slug: str) -> SerializedSource:
        """Serialize one post, consulting the cache when configured."""
        source_path = resolve_source_path(self._source_dir, slug, self._extension)

        source_mtime: float | None = None
        if self._cache is not None and source_path.is_file():
            source_mtime = source_path.stat().st_mtime
            cached = self._cache.get(slug, source_mtime, self._options_hash)
            if cached is not None:
                logger.debug(f"Cache hit for {slug}")
                return cached

        text = load_document(self._source_dir, slug, self._extension)
        source = await serialize_async(text, self._mdx_options)

        if self._cache is not None and source_mtime is not None:
            self._cache.set(slug, source, source_mtime, self._options_hash)
        return source

    def render(self, props: Mapping[str, Any], slug: str = "") -> RenderedPage:
        """Render a post page from its static props.

        Args:
            props: The ``props`` value returned by ``get_static_props``
            slug: Post slug (recorded on the page)

        Returns:
            RenderedPage
        """
        source = SerializedSource.from_dict(props["source"])
        return render_page(
            source,
            slug=slug,
            components=self._components,
            options=self._page_options,
        )

    async def build_page(self, slug: str) -> RenderedPage:
        """Run the full pipeline for one slug."""
        static_props = await self.get_static_props({"slug": [slug]})
        return self.render(static_props["props"], slug)


def _slug_from_params(params: Mapping[str, Any]) -> str:
    slug = params.get("slug")
    if isinstance(slug, str):
        return slug
    if isinstance(slug, list | tuple):
        return "/".join(str(part) for part in slug)
    raise ValueError(f"Invalid slug parameter: {slug!r}")
