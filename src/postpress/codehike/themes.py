"""Syntax theme loading and scope resolution.

Themes are VS Code style JSON documents (``colors`` + ``tokenColors``),
bundled under ``postpress/themes``. Token styles are looked up by TextMate
scope with prefix matching, the most specific selector winning.
"""

import json
from importlib.resources import files
from pathlib import Path
from typing import Any, TypedDict

DEFAULT_THEME = "dracula-soft"


class TokenStyle(TypedDict, total=False):
    """Resolved style for a highlighted token."""

    color: str
    fontStyle: str
    fontWeight: str


def load_theme(name_or_path: str | Path = DEFAULT_THEME) -> dict[str, Any]:
    """Load a theme by bundled name or from a JSON file path.

    Args:
        name_or_path: Bundled theme name (e.g., "dracula-soft") or path to JSON

    Returns:
        Theme dictionary with ``name``, ``type``, ``colors`` and ``tokenColors``

    Raises:
        FileNotFoundError: If the theme doesn't exist
        ValueError: If the theme file is not a JSON object
    """
    path = Path(name_or_path)
    if path.suffix == ".json":
        if not path.exists():
            raise FileNotFoundError(f"Theme file not found: {path}")
        text = path.read_text(encoding="utf-8")
    else:
        resource = files("postpress").joinpath("themes").joinpath(f"{name_or_path}.json")
        if not resource.is_file():
            raise FileNotFoundError(f"Unknown theme: {name_or_path}")
        text = resource.read_text(encoding="utf-8")

    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError("Theme must be a JSON object")

    return {
        "name": data.get("name", path.stem),
        "type": data.get("type", "dark"),
        "colors": dict(data.get("colors") or {}),
        "tokenColors": list(data.get("tokenColors") or []),
    }


class ThemeStyles:
    """Resolve token scopes against a theme's ``tokenColors``."""

    def __init__(self, theme: dict[str, Any]) -> None:
        colors = theme.get("colors", {})
        self.background: str = colors.get("editor.background", "#ffffff")
        self.foreground: str = colors.get("editor.foreground", "#000000")
        self._rules: list[tuple[str, TokenStyle]] = []

        for entry in theme.get("tokenColors", []):
            settings = entry.get("settings") or {}
            style: TokenStyle = {}
            if "foreground" in settings:
                style["color"] = settings["foreground"]
            font_style = settings.get("fontStyle", "")
            if "italic" in font_style:
                style["fontStyle"] = "italic"
            if "bold" in font_style:
                style["fontWeight"] = "bold"

            scopes = entry.get("scope", [])
            if isinstance(scopes, str):
                scopes = [s.strip() for s in scopes.split(",")]
            for scope in scopes:
                self._rules.append((scope, style))

        self._memo: dict[str, TokenStyle] = {}

    def style_for(self, scope: str) -> TokenStyle:
        """Return the style for a scope such as ``entity.name.function``.

        The longest matching selector wins. Unmatched scopes get the
        default foreground.
        """
        if scope in self._memo:
            return self._memo[scope]

        best: TokenStyle | None = None
        best_len = -1
        for selector, style in self._rules:
            if (scope == selector or scope.startswith(f"{selector}.")) and len(selector) > best_len:
                best = style
                best_len = len(selector)

        result: TokenStyle = dict(best) if best else {}  # type: ignore[assignment]
        result.setdefault("color", self.foreground)
        self._memo[scope] = result
        return result
