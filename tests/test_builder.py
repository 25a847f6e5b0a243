"""Tests for static export."""

from pathlib import Path

import pytest
from postpress.core.builder import build_site
from postpress.posts import PostPage


class TestBuildSite:
    """Tests for build_site()."""

    @pytest.mark.asyncio
    async def test__posts__written_per_route(self, posts_dir: Path, tmp_path: Path) -> None:
        """Each post becomes out/posts/<slug>.html."""
        (posts_dir / "hello-world.mdx").write_text("# Hi")
        (posts_dir / "second.mdx").write_text("Second post")
        out_dir = tmp_path / "out"

        result = await build_site(PostPage(posts_dir), out_dir)

        assert sorted(result.routes) == ["/posts/hello-world", "/posts/second"]
        assert result.fallback is False
        html = (out_dir / "posts" / "hello-world.html").read_text(encoding="utf-8")
        assert "<h1>Hi</h1>" in html
        assert "<title>DIY Firestore</title>" in html
        assert '<a href="/">Home</a>' in html
        assert "Second post" in (out_dir / "posts" / "second.html").read_text(encoding="utf-8")

    @pytest.mark.asyncio
    async def test__non_post_entry__fails_build(self, posts_dir: Path, tmp_path: Path) -> None:
        """Entries are not filtered, so a stray file has no matching source."""
        (posts_dir / "notes.md").write_text("not a post")

        with pytest.raises(FileNotFoundError, match="Source file not found"):
            await build_site(PostPage(posts_dir), tmp_path / "out")

    @pytest.mark.asyncio
    async def test__empty_dir__builds_nothing(self, posts_dir: Path, tmp_path: Path) -> None:
        result = await build_site(PostPage(posts_dir), tmp_path / "out")

        assert result.routes == []
        assert result.files == []

    @pytest.mark.asyncio
    async def test__missing_dir__raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            await build_site(PostPage(tmp_path / "missing"), tmp_path / "out")
