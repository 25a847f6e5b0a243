"""Tests for document loading."""

from pathlib import Path

import pytest
from postpress.core.loader import load_document, resolve_source_path


class TestLoadDocument:
    """Tests for load_document()."""

    def test__existing_post__returns_full_text(self, posts_dir: Path) -> None:
        """Read the whole file."""
        (posts_dir / "hello-world.mdx").write_text("# Hi\n\nBody text.\n", encoding="utf-8")

        assert load_document(posts_dir, "hello-world") == "# Hi\n\nBody text.\n"

    def test__utf8_content__decodes_correctly(self, posts_dir: Path) -> None:
        """Decode content as UTF-8."""
        (posts_dir / "unicode.mdx").write_bytes("# Café ☕\n".encode())

        assert load_document(posts_dir, "unicode") == "# Café ☕\n"

    def test__missing_post__raises_file_not_found(self, posts_dir: Path) -> None:
        """Missing file is fatal."""
        with pytest.raises(FileNotFoundError, match="Source file not found"):
            load_document(posts_dir, "nonexistent")


def test__resolve_source_path__appends_extension(tmp_path: Path) -> None:
    """Source path is <dir>/<slug><extension>."""
    assert resolve_source_path(tmp_path, "post") == tmp_path / "post.mdx"
    assert resolve_source_path(tmp_path, "post", ".md") == tmp_path / "post.md"
