"""Shared test fixtures."""

from pathlib import Path

import pytest
from postpress.config import (
    BuildConfig,
    CodeHikeConfig,
    Config,
    LiveReloadConfig,
    MdxConfig,
    PostsConfig,
    ServerConfig,
    SiteConfig,
)


@pytest.fixture
def posts_dir(tmp_path: Path) -> Path:
    """Create an empty posts directory."""
    posts = tmp_path / "posts"
    posts.mkdir(exist_ok=True)
    return posts


@pytest.fixture
def test_config(tmp_path: Path, posts_dir: Path) -> Config:
    """Create a test configuration with tmp_path directories.

    Live reload is disabled so no file watcher is started.
    """
    return Config(
        site=SiteConfig(),
        posts=PostsConfig(source_dir=posts_dir),
        build=BuildConfig(out_dir=tmp_path / "out", cache_dir=tmp_path / ".cache"),
        server=ServerConfig(),
        codehike=CodeHikeConfig(),
        mdx=MdxConfig(),
        live_reload=LiveReloadConfig(enabled=False),
    )
