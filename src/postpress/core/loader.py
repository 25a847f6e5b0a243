"""Post document loading."""

from pathlib import Path

from postpress.core.paths import DEFAULT_EXTENSION


def resolve_source_path(source_dir: Path, slug: str, extension: str = DEFAULT_EXTENSION) -> Path:
    """Return the source file path for a slug."""
    return source_dir / f"{slug}{extension}"


def load_document(source_dir: Path, slug: str, extension: str = DEFAULT_EXTENSION) -> str:
    """Read a post document.

    Args:
        source_dir: Posts directory
        slug: Post slug (e.g., "hello-world")
        extension: Source file extension

    Returns:
        Full document text decoded as UTF-8

    Raises:
        FileNotFoundError: If the source file doesn't exist
    """
    source_path = resolve_source_path(source_dir, slug, extension)
    if not source_path.is_file():
        raise FileNotFoundError(f"Source file not found: {source_path}")
    return source_path.read_text(encoding="utf-8")
