"""Tests for the post page pipeline."""

import os
from pathlib import Path

import pytest
from postpress.config import Config
from postpress.core.cache import FileCache
from postpress.core.mdx import MDXSyntaxError
from postpress.core.renderer import PageOptions
from postpress.posts import PostPage, post_mdx_options


class TestGetStaticPaths:
    """Tests for PostPage.get_static_paths()."""

    def test__posts__enumerated(self, posts_dir: Path) -> None:
        """One path per post, fallback disabled."""
        (posts_dir / "a.mdx").write_text("A")
        (posts_dir / "b.mdx").write_text("B")

        static_paths = PostPage(posts_dir).get_static_paths()

        assert sorted(static_paths.slugs) == ["a", "b"]
        assert static_paths.fallback is False

    def test__empty_dir__no_paths(self, posts_dir: Path) -> None:
        static_paths = PostPage(posts_dir).get_static_paths()

        assert static_paths.to_dict() == {"paths": [], "fallback": False}

    def test__missing_dir__raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            PostPage(tmp_path / "missing").get_static_paths()


class TestGetStaticProps:
    """Tests for PostPage.get_static_props()."""

    @pytest.mark.asyncio
    async def test__list_param__loads_post(self, posts_dir: Path) -> None:
        """Slug given as a list of segments."""
        (posts_dir / "hello-world.mdx").write_text("# Hi")

        result = await PostPage(posts_dir).get_static_props({"slug": ["hello-world"]})

        tree = result["props"]["source"]["tree"]
        assert tree[0]["type"] == "heading"

    @pytest.mark.asyncio
    async def test__string_param__loads_post(self, posts_dir: Path) -> None:
        """Slug given as a plain string."""
        (posts_dir / "hello-world.mdx").write_text("# Hi")

        result = await PostPage(posts_dir).get_static_props({"slug": "hello-world"})

        assert result["props"]["source"]["tree"]

    @pytest.mark.asyncio
    async def test__theme__in_scope(self, posts_dir: Path) -> None:
        """Serialized props carry the code theme."""
        (posts_dir / "a.mdx").write_text("text")

        result = await PostPage(posts_dir).get_static_props({"slug": ["a"]})

        assert result["props"]["source"]["scope"]["chCodeConfig"]["theme"]["name"] == "dracula-soft"

    @pytest.mark.asyncio
    async def test__missing_post__raises(self, posts_dir: Path) -> None:
        with pytest.raises(FileNotFoundError, match="Source file not found"):
            await PostPage(posts_dir).get_static_props({"slug": ["missing"]})

    @pytest.mark.asyncio
    async def test__invalid_param__raises(self, posts_dir: Path) -> None:
        with pytest.raises(ValueError, match="Invalid slug parameter"):
            await PostPage(posts_dir).get_static_props({"slug": 3})

    @pytest.mark.asyncio
    async def test__malformed_post__raises(self, posts_dir: Path) -> None:
        """Unclosed components fail serialization."""
        (posts_dir / "bad.mdx").write_text("<CH.Code>\n\ntext\n")

        with pytest.raises(MDXSyntaxError):
            await PostPage(posts_dir).get_static_props({"slug": ["bad"]})


class TestBuildPage:
    """Tests for PostPage.build_page()."""

    @pytest.mark.asyncio
    async def test__hello_world__renders_page(self, posts_dir: Path) -> None:
        """A heading-only post renders inside the page chrome."""
        (posts_dir / "hello-world.mdx").write_text("# Hi")

        page = await PostPage(posts_dir).build_page("hello-world")

        assert "<h1>Hi</h1>" in page.html
        assert "<title>DIY Firestore</title>" in page.html
        assert '<a href="/">Home</a>' in page.html

    @pytest.mark.asyncio
    async def test__posts__rendered_independently(self, posts_dir: Path) -> None:
        """Each page contains only its own content."""
        (posts_dir / "a.mdx").write_text("alpha text")
        (posts_dir / "b.mdx").write_text("beta text")
        page = PostPage(posts_dir)

        a = await page.build_page("a")
        b = await page.build_page("b")

        assert "alpha text" in a.body and "beta text" not in a.body
        assert "beta text" in b.body and "alpha text" not in b.body

    @pytest.mark.asyncio
    async def test__code_fence__rendered_with_code_hike(self, posts_dir: Path) -> None:
        (posts_dir / "code.mdx").write_text("```js index.js\nconst a = 1\n```\n")

        page = await PostPage(posts_dir).build_page("code")

        assert 'data-component="CH.Code"' in page.body
        assert "background: #282A36" in page.body

    @pytest.mark.asyncio
    async def test__unicode__preserved(self, posts_dir: Path) -> None:
        (posts_dir / "u.mdx").write_text("Grüße, 世界", encoding="utf-8")

        page = await PostPage(posts_dir).build_page("u")

        assert "Grüße, 世界" in page.body

    @pytest.mark.asyncio
    async def test__page_options__applied(self, posts_dir: Path) -> None:
        (posts_dir / "a.mdx").write_text("text")
        page = PostPage(posts_dir, page_options=PageOptions(title="Other"))

        rendered = await page.build_page("a")

        assert "<title>Other</title>" in rendered.html

    @pytest.mark.asyncio
    async def test__auto_import__renders_without_registry(self, posts_dir: Path) -> None:
        """With auto import, CH resolves even with an empty registry."""
        (posts_dir / "a.mdx").write_text("```py\nx = 1\n```\n")
        page = PostPage(posts_dir, mdx_options=post_mdx_options(auto_import=True), components={})

        rendered = await page.build_page("a")

        assert 'data-component="CH.Code"' in rendered.body


class TestCache:
    """Tests for serialization caching."""

    @pytest.mark.asyncio
    async def test__unchanged_mtime__uses_cache(self, posts_dir: Path, tmp_path: Path) -> None:
        """A cached entry is reused while the source mtime is unchanged."""
        post = posts_dir / "a.mdx"
        post.write_text("first")
        page = PostPage(posts_dir, cache=FileCache(tmp_path / ".cache"))

        await page.build_page("a")
        stat = post.stat()
        post.write_text("second")
        os.utime(post, ns=(stat.st_atime_ns, stat.st_mtime_ns))
        rendered = await page.build_page("a")

        assert "first" in rendered.body

    @pytest.mark.asyncio
    async def test__changed_mtime__reserializes(self, posts_dir: Path, tmp_path: Path) -> None:
        post = posts_dir / "a.mdx"
        post.write_text("first")
        page = PostPage(posts_dir, cache=FileCache(tmp_path / ".cache"))

        await page.build_page("a")
        post.write_text("second")
        stat = post.stat()
        os.utime(post, ns=(stat.st_atime_ns, stat.st_mtime_ns + 1_000_000_000))
        rendered = await page.build_page("a")

        assert "second" in rendered.body

    @pytest.mark.asyncio
    async def test__changed_options__reserializes(self, posts_dir: Path, tmp_path: Path) -> None:
        """Entries written with other serialization options are misses."""
        (posts_dir / "a.mdx").write_text("```py\nx = 1\n```\n")
        cache = FileCache(tmp_path / ".cache")

        await PostPage(posts_dir, cache=cache).build_page("a")
        numbered = PostPage(posts_dir, mdx_options=post_mdx_options(line_numbers=True), cache=cache)
        rendered = await numbered.build_page("a")
        fresh = await PostPage(posts_dir, mdx_options=post_mdx_options(line_numbers=True)).build_page("a")

        assert 'class="ch-line-number"' in rendered.body
        assert rendered.body == fresh.body


class TestFromConfig:
    """Tests for PostPage.from_config()."""

    def test__config__applied(self, test_config: Config) -> None:
        page = PostPage.from_config(test_config)

        assert page.source_dir == test_config.posts.source_dir
        assert page.extension == ".mdx"
        assert page.cache is not None
        assert page.cache.cache_dir == test_config.build.cache_dir

    def test__cache_disabled__no_cache(self, test_config: Config) -> None:
        config = test_config.with_overrides(cache_enabled=False)

        assert PostPage.from_config(config).cache is None
