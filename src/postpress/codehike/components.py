"""Code Hike components.

Render functions for the ``CH.*`` nodes produced by the tree plugin. Each
takes ``(props, children_html, context)`` and returns HTML.
"""

from html import escape
from types import MappingProxyType
from typing import Any

from postpress.codehike.plugin import CODE_CONFIG_KEY
from postpress.core.renderer import RenderContext

_STYLE_PROPERTIES = {
    "color": "color",
    "fontStyle": "font-style",
    "fontWeight": "font-weight",
}


def Code(props: dict[str, Any], children: str, context: RenderContext) -> str:
    """Code group with one tab per file."""
    return (
        '<div class="ch-codegroup" data-component="CH.Code">'
        f"{_code_panel(props.get('files') or [], context)}{children}</div>\n"
    )


def Section(props: dict[str, Any], children: str, context: RenderContext) -> str:
    """Prose next to a sticky code panel."""
    return (
        '<section class="ch-section" data-component="CH.Section">'
        f'<div class="ch-section-content">{children}</div>'
        f'<div class="ch-section-code">{_code_panel(props.get("files") or [], context)}</div>'
        "</section>\n"
    )


def Scrollycoding(props: dict[str, Any], children: str, context: RenderContext) -> str:
    """Steps whose code panel follows the prose while scrolling."""
    return f'<div class="ch-scrollycoding" data-component="CH.Scrollycoding">{children}</div>\n'


def Spotlight(props: dict[str, Any], children: str, context: RenderContext) -> str:
    """Steps selectable from a list, one shared code area."""
    return f'<div class="ch-spotlight" data-component="CH.Spotlight">{children}</div>\n'


def Step(props: dict[str, Any], children: str, context: RenderContext) -> str:
    """One step of a Scrollycoding or Spotlight."""
    index = int(props.get("index", 0))
    files = props.get("files") or []
    code = f'<div class="ch-step-code">{_code_panel(files, context)}</div>' if files else ""
    return (
        f'<div class="ch-step" data-step="{index}">'
        f'<div class="ch-step-content">{children}</div>{code}</div>\n'
    )


CH = MappingProxyType(
    {
        "Code": Code,
        "Section": Section,
        "Scrollycoding": Scrollycoding,
        "Spotlight": Spotlight,
        "Step": Step,
    }
)


def _code_panel(files: list[dict[str, Any]], context: RenderContext) -> str:
    if not files:
        return ""

    config = context.scope.get(CODE_CONFIG_KEY) or {}
    colors = (config.get("theme") or {}).get("colors", {})
    background = colors.get("editor.background", "#ffffff")
    foreground = colors.get("editor.foreground", "#000000")
    line_numbers = bool(config.get("lineNumbers"))

    parts = [f'<div class="ch-code" style="background: {escape(background)}; color: {escape(foreground)}">']
    if len(files) > 1 or files[0].get("name"):
        parts.append('<div class="ch-tabs">')
        for index, file in enumerate(files):
            active = " ch-tab-active" if index == 0 else ""
            parts.append(f'<span class="ch-tab{active}">{escape(file.get("name") or file.get("lang") or "")}</span>')
        parts.append("</div>")

    for index, file in enumerate(files):
        hidden = "" if index == 0 else " hidden"
        lang = escape(file.get("lang") or "text")
        parts.append(f'<pre class="ch-pre"{hidden}><code class="language-{lang}">')
        parts.append(_render_lines(file, line_numbers))
        parts.append("</code></pre>")

    parts.append("</div>")
    return "".join(parts)


def _render_lines(file: dict[str, Any], line_numbers: bool) -> str:
    annotations = file.get("annotations") or {}
    focus = set(annotations.get("focus", []))
    mark = set(annotations.get("mark", []))

    rendered: list[str] = []
    for number, tokens in enumerate(file.get("lines") or [], start=1):
        classes = ["ch-line"]
        if focus and number not in focus:
            classes.append("ch-line-unfocused")
        if number in mark:
            classes.append("ch-line-mark")

        content = "".join(_render_token(token) for token in tokens)
        gutter = f'<span class="ch-line-number">{number}</span>' if line_numbers else ""
        rendered.append(f'<span class="{" ".join(classes)}" data-line="{number}">{gutter}{content}</span>')
    return "\n".join(rendered)


def _render_token(token: dict[str, Any]) -> str:
    style = token.get("style") or {}
    css = ";".join(
        f"{_STYLE_PROPERTIES[key]}: {escape(str(value))}"
        for key, value in style.items()
        if key in _STYLE_PROPERTIES
    )
    content = escape(token.get("content", ""), quote=False)
    if not css:
        return content
    return f'<span style="{css}">{content}</span>'
