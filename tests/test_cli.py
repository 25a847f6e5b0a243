"""Tests for CLI commands."""

from pathlib import Path

from click.testing import CliRunner
from postpress.cli import cli


def _write_config(tmp_path: Path) -> Path:
    config_file = tmp_path / "postpress.toml"
    config_file.write_text("[live_reload]\nenabled = false\n")
    return config_file


class TestRoutesCommand:
    """Tests for the routes command."""

    def test__lists_post_routes(self, tmp_path: Path) -> None:
        """Print one route per post."""
        posts = tmp_path / "posts"
        posts.mkdir()
        (posts / "hello-world.mdx").write_text("# Hi")

        runner = CliRunner()
        result = runner.invoke(cli, ["routes", "-c", str(_write_config(tmp_path))])

        assert result.exit_code == 0
        assert result.output.strip() == "/posts/hello-world"

    def test__fails_on_missing_posts_dir(self, tmp_path: Path) -> None:
        runner = CliRunner()
        result = runner.invoke(
            cli,
            ["routes", "-c", str(_write_config(tmp_path)), "-s", str(tmp_path / "missing")],
        )

        assert result.exit_code == 1
        assert "Error:" in result.output


class TestBuildCommand:
    """Tests for the build command."""

    def test__builds_posts(self, tmp_path: Path) -> None:
        """Write one HTML file per post."""
        posts = tmp_path / "posts"
        posts.mkdir()
        (posts / "hello-world.mdx").write_text("# Hi")
        out_dir = tmp_path / "site"

        runner = CliRunner()
        result = runner.invoke(
            cli,
            ["build", "-c", str(_write_config(tmp_path)), "-o", str(out_dir), "--no-cache"],
        )

        assert result.exit_code == 0
        assert "/posts/hello-world" in result.output
        assert "Generated 1 page(s)" in result.output
        assert "<h1>Hi</h1>" in (out_dir / "posts" / "hello-world.html").read_text(encoding="utf-8")
        assert not (tmp_path / ".cache").exists()

    def test__cache_enabled__writes_cache(self, tmp_path: Path) -> None:
        posts = tmp_path / "posts"
        posts.mkdir()
        (posts / "a.mdx").write_text("text")

        runner = CliRunner()
        result = runner.invoke(cli, ["build", "-c", str(_write_config(tmp_path))])

        assert result.exit_code == 0
        assert (tmp_path / ".cache" / "serialized" / "a.json").exists()

    def test__fails_on_malformed_post(self, tmp_path: Path) -> None:
        """Report serialization errors and exit non-zero."""
        posts = tmp_path / "posts"
        posts.mkdir()
        (posts / "bad.mdx").write_text("</CH.Code>\n")

        runner = CliRunner()
        result = runner.invoke(cli, ["build", "-c", str(_write_config(tmp_path))])

        assert result.exit_code == 1
        assert "Unexpected closing tag" in result.output

    def test__fails_on_invalid_config(self, tmp_path: Path) -> None:
        config_file = tmp_path / "postpress.toml"
        config_file.write_text("[server]\nport = \"x\"\n")

        runner = CliRunner()
        result = runner.invoke(cli, ["build", "-c", str(config_file)])

        assert result.exit_code == 1
        assert "server.port must be an integer" in result.output
