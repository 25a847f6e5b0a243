"""Configuration management for Postpress.

Supports TOML configuration format with auto-discovery.
"""

import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path

from postpress.codehike.themes import DEFAULT_THEME
from postpress.core.paths import DEFAULT_EXTENSION
from postpress.core.renderer import DEFAULT_HOME_HREF, DEFAULT_TITLE

CONFIG_FILENAME = "postpress.toml"


@dataclass
class SiteConfig:
    """Page chrome configuration."""

    title: str = DEFAULT_TITLE
    home_href: str = DEFAULT_HOME_HREF


@dataclass
class PostsConfig:
    """Post sources configuration."""

    source_dir: Path = field(default_factory=lambda: Path("posts"))
    extension: str = DEFAULT_EXTENSION


@dataclass
class BuildConfig:
    """Static export configuration."""

    out_dir: Path = field(default_factory=lambda: Path("out"))
    cache_dir: Path = field(default_factory=lambda: Path(".cache"))
    cache_enabled: bool = True


@dataclass
class ServerConfig:
    """Preview server configuration."""

    host: str = "127.0.0.1"
    port: int = 3000


@dataclass
class CodeHikeConfig:
    """Code annotation configuration."""

    theme: str = DEFAULT_THEME
    auto_import: bool = False
    line_numbers: bool = False


@dataclass
class MdxConfig:
    """MDX compilation configuration."""

    use_dynamic_import: bool = True
    markdown_plugins: list[str] = field(default_factory=list)


@dataclass
class LiveReloadConfig:
    """Live reload configuration."""

    enabled: bool = True


@dataclass
class Config:
    """Application configuration."""

    site: SiteConfig
    posts: PostsConfig
    build: BuildConfig
    server: ServerConfig
    codehike: CodeHikeConfig
    mdx: MdxConfig
    live_reload: LiveReloadConfig
    config_path: Path | None = None

    @classmethod
    def load(cls, config_path: Path | None = None) -> "Config":
        """Load configuration from file.

        If config_path is provided, loads from that file.
        Otherwise, searches for postpress.toml in current directory and parents.

        Args:
            config_path: Optional explicit path to config file

        Returns:
            Config instance with defaults for missing sections

        Raises:
            FileNotFoundError: If explicit config_path doesn't exist
            ValueError: If configuration is invalid
        """
        if config_path is not None:
            if not config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {config_path}")
            return cls._load_from_file(config_path)

        discovered_path = cls._discover_config()
        if discovered_path is None:
            return cls._default()

        return cls._load_from_file(discovered_path)

    @classmethod
    def _discover_config(cls) -> Path | None:
        """Search for config file in current directory and parents."""
        current = Path.cwd()
        while True:
            candidate = current / CONFIG_FILENAME
            if candidate.exists():
                return candidate
            parent = current.parent
            if parent == current:
                return None
            current = parent

    @classmethod
    def _default(cls) -> "Config":
        """Create config with all defaults, relative to the working directory."""
        return cls(
            site=SiteConfig(),
            posts=PostsConfig(),
            build=BuildConfig(),
            server=ServerConfig(),
            codehike=CodeHikeConfig(),
            mdx=MdxConfig(),
            live_reload=LiveReloadConfig(),
        )

    @classmethod
    def _load_from_file(cls, path: Path) -> "Config":
        """Load configuration from a specific file.

        Raises:
            ValueError: If configuration is invalid
        """
        with path.open("rb") as f:
            data = tomllib.load(f)

        config_dir = path.parent

        return cls(
            site=cls._parse_site(data.get("site")),
            posts=cls._parse_posts(data.get("posts"), config_dir),
            build=cls._parse_build(data.get("build"), config_dir),
            server=cls._parse_server(data.get("server")),
            codehike=cls._parse_codehike(data.get("codehike"), config_dir),
            mdx=cls._parse_mdx(data.get("mdx")),
            live_reload=cls._parse_live_reload(data.get("live_reload")),
            config_path=path,
        )

    @classmethod
    def _parse_site(cls, data: object) -> SiteConfig:
        if data is None:
            return SiteConfig()

        if not isinstance(data, dict):
            raise ValueError("site section must be a dictionary")

        title = data.get("title", DEFAULT_TITLE)
        if not isinstance(title, str):
            raise ValueError("site.title must be a string")

        home_href = data.get("home_href", DEFAULT_HOME_HREF)
        if not isinstance(home_href, str):
            raise ValueError("site.home_href must be a string")

        return SiteConfig(title=title, home_href=home_href)

    @classmethod
    def _parse_posts(cls, data: object, config_dir: Path) -> PostsConfig:
        """Parse posts configuration section.

        Args:
            data: Raw posts section data
            config_dir: Directory containing config file (for relative paths)

        Returns:
            PostsConfig instance
        """
        if data is None:
            return PostsConfig(source_dir=config_dir / "posts")

        if not isinstance(data, dict):
            raise ValueError("posts section must be a dictionary")

        source_dir = data.get("source_dir", "posts")
        if not isinstance(source_dir, str):
            raise ValueError("posts.source_dir must be a string")

        extension = data.get("extension", DEFAULT_EXTENSION)
        if not isinstance(extension, str) or not extension:
            raise ValueError("posts.extension must be a non-empty string")

        return PostsConfig(source_dir=config_dir / source_dir, extension=extension)

    @classmethod
    def _parse_build(cls, data: object, config_dir: Path) -> BuildConfig:
        """Parse build configuration section.

        Args:
            data: Raw build section data
            config_dir: Directory containing config file (for relative paths)

        Returns:
            BuildConfig instance
        """
        if data is None:
            return BuildConfig(out_dir=config_dir / "out", cache_dir=config_dir / ".cache")

        if not isinstance(data, dict):
            raise ValueError("build section must be a dictionary")

        out_dir = data.get("out_dir", "out")
        if not isinstance(out_dir, str):
            raise ValueError("build.out_dir must be a string")

        cache_dir = data.get("cache_dir", ".cache")
        if not isinstance(cache_dir, str):
            raise ValueError("build.cache_dir must be a string")

        cache_enabled = data.get("cache_enabled", True)
        if not isinstance(cache_enabled, bool):
            raise ValueError("build.cache_enabled must be a boolean")

        return BuildConfig(
            out_dir=config_dir / out_dir,
            cache_dir=config_dir / cache_dir,
            cache_enabled=cache_enabled,
        )

    @classmethod
    def _parse_server(cls, data: object) -> ServerConfig:
        if data is None:
            return ServerConfig()

        if not isinstance(data, dict):
            raise ValueError("server section must be a dictionary")

        host = data.get("host", "127.0.0.1")
        if not isinstance(host, str):
            raise ValueError("server.host must be a string")

        port = data.get("port", 3000)
        if not isinstance(port, int) or isinstance(port, bool):
            raise ValueError("server.port must be an integer")

        return ServerConfig(host=host, port=port)

    @classmethod
    def _parse_codehike(cls, data: object, config_dir: Path) -> CodeHikeConfig:
        """Parse codehike configuration section.

        A theme ending in ``.json`` is a file path relative to the config
        directory; anything else names a bundled theme.
        """
        if data is None:
            return CodeHikeConfig()

        if not isinstance(data, dict):
            raise ValueError("codehike section must be a dictionary")

        theme = data.get("theme", DEFAULT_THEME)
        if not isinstance(theme, str):
            raise ValueError("codehike.theme must be a string")
        if theme.endswith(".json"):
            theme = str(config_dir / theme)

        auto_import = data.get("auto_import", False)
        if not isinstance(auto_import, bool):
            raise ValueError("codehike.auto_import must be a boolean")

        line_numbers = data.get("line_numbers", False)
        if not isinstance(line_numbers, bool):
            raise ValueError("codehike.line_numbers must be a boolean")

        return CodeHikeConfig(theme=theme, auto_import=auto_import, line_numbers=line_numbers)

    @classmethod
    def _parse_mdx(cls, data: object) -> MdxConfig:
        if data is None:
            return MdxConfig()

        if not isinstance(data, dict):
            raise ValueError("mdx section must be a dictionary")

        use_dynamic_import = data.get("use_dynamic_import", True)
        if not isinstance(use_dynamic_import, bool):
            raise ValueError("mdx.use_dynamic_import must be a boolean")

        plugins_raw = data.get("markdown_plugins", [])
        if not isinstance(plugins_raw, list):
            raise ValueError("mdx.markdown_plugins must be a list")
        markdown_plugins: list[str] = []
        for item in plugins_raw:
            if not isinstance(item, str):
                raise ValueError("mdx.markdown_plugins items must be strings")
            markdown_plugins.append(item)

        return MdxConfig(use_dynamic_import=use_dynamic_import, markdown_plugins=markdown_plugins)

    @classmethod
    def _parse_live_reload(cls, data: object) -> LiveReloadConfig:
        if data is None:
            return LiveReloadConfig()

        if not isinstance(data, dict):
            raise ValueError("live_reload section must be a dictionary")

        enabled = data.get("enabled", True)
        if not isinstance(enabled, bool):
            raise ValueError("live_reload.enabled must be a boolean")

        return LiveReloadConfig(enabled=enabled)

    def with_overrides(
        self,
        *,
        host: str | None = None,
        port: int | None = None,
        source_dir: Path | None = None,
        out_dir: Path | None = None,
        cache_enabled: bool | None = None,
        live_reload_enabled: bool | None = None,
    ) -> "Config":
        """Create a new Config with CLI overrides applied.

        Only non-None values override the existing config. The original
        Config is not modified.

        Returns:
            New Config instance with overrides applied
        """
        server = self.server
        if host is not None or port is not None:
            server = replace(
                self.server,
                host=host if host is not None else self.server.host,
                port=port if port is not None else self.server.port,
            )

        posts = self.posts
        if source_dir is not None:
            posts = replace(self.posts, source_dir=source_dir)

        build = self.build
        if out_dir is not None or cache_enabled is not None:
            build = replace(
                self.build,
                out_dir=out_dir if out_dir is not None else self.build.out_dir,
                cache_enabled=cache_enabled if cache_enabled is not None else self.build.cache_enabled,
            )

        live_reload = self.live_reload
        if live_reload_enabled is not None:
            live_reload = replace(self.live_reload, enabled=live_reload_enabled)

        return replace(
            self,
            server=server,
            posts=posts,
            build=build,
            live_reload=live_reload,
        )
