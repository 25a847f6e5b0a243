"""Static export of post pages.

Output structure:
    out/
    └── posts/
        ├── a.html
        └── b.html
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from postpress.core.paths import slug_to_route
from postpress.core.types import URLPath

if TYPE_CHECKING:
    from postpress.posts import PostPage

logger = logging.getLogger(__name__)


@dataclass
class BuildResult:
    """Summary of a static export."""

    out_dir: Path
    routes: list[URLPath] = field(default_factory=list)
    files: list[Path] = field(default_factory=list)
    fallback: bool = False


async def build_site(page: "PostPage", out_dir: Path) -> BuildResult:
    """Pre-render every post into ``out_dir``.

    Pages are built one after another; the first failure aborts the build.

    Args:
        page: Post page definition
        out_dir: Output directory

    Returns:
        BuildResult listing generated routes and files

    Raises:
        FileNotFoundError: If the posts directory or a post is missing
        MDXSyntaxError: If a post is malformed
    """
    static_paths = page.get_static_paths()
    result = BuildResult(out_dir=out_dir, fallback=static_paths.fallback)
    logger.info(f"Building {len(static_paths.slugs)} post(s) from {page.source_dir}")

    for slug in static_paths.slugs:
        rendered = await page.build_page(slug)
        output_path = out_dir / "posts" / f"{slug}.html"
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(rendered.html, encoding="utf-8")

        route = slug_to_route(slug)
        result.routes.append(route)
        result.files.append(output_path)
        logger.info(f"Generated {route} -> {output_path}")

    return result
