"""Static path enumeration for post pages.

Maps the files of the posts directory to slugs and route parameters.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import TypedDict

from postpress.core.types import Slug, URLPath

DEFAULT_EXTENSION = ".mdx"
ROUTE_PREFIX = "/posts"


class RouteParamsDict(TypedDict):
    """Catch-all route parameters for a single post."""

    slug: list[str]


class PathEntryDict(TypedDict):
    """One pre-generated path."""

    params: RouteParamsDict


class StaticPathsDict(TypedDict):
    """Dictionary representation of static paths."""

    paths: list[PathEntryDict]
    fallback: bool


@dataclass(frozen=True)
class StaticPaths:
    """Pre-generated post paths.

    Fallback is always disabled: paths outside the enumerated set are not served.
    """

    slugs: tuple[Slug, ...]
    fallback: bool = False

    def routes(self) -> list[URLPath]:
        """Return the URL path of every pre-generated page."""
        return [slug_to_route(slug) for slug in self.slugs]

    def __contains__(self, slug: object) -> bool:
        return slug in self.slugs

    def to_dict(self) -> StaticPathsDict:
        """Convert to dictionary for JSON serialization."""
        return {
            "paths": [{"params": {"slug": [slug]}} for slug in self.slugs],
            "fallback": self.fallback,
        }


def slug_from_filename(filename: str, extension: str = DEFAULT_EXTENSION) -> Slug:
    """Derive a slug by dropping the trailing extension characters.

    The strip is positional: the filename is not checked against the extension.

    Args:
        filename: Directory entry name (e.g., "hello-world.mdx")
        extension: Extension whose length is removed

    Returns:
        Slug (e.g., "hello-world")
    """
    return Slug(filename[: len(filename) - len(extension)])


def slug_to_route(slug: str) -> URLPath:
    """Build the URL path for a slug."""
    return URLPath(f"{ROUTE_PREFIX}/{slug}")


def list_slugs(source_dir: Path, extension: str = DEFAULT_EXTENSION) -> list[Slug]:
    """List slugs for every entry of the posts directory.

    Entries keep directory listing order. Nothing is filtered and
    subdirectories are not descended into.

    Args:
        source_dir: Posts directory

    Returns:
        List of slugs

    Raises:
        FileNotFoundError: If source_dir doesn't exist
    """
    return [slug_from_filename(name, extension) for name in os.listdir(source_dir)]


def get_static_paths(source_dir: Path, extension: str = DEFAULT_EXTENSION) -> StaticPaths:
    """Enumerate the pages to pre-render.

    Args:
        source_dir: Posts directory
        extension: Source file extension

    Returns:
        StaticPaths with fallback disabled
    """
    return StaticPaths(slugs=tuple(list_slugs(source_dir, extension)), fallback=False)
