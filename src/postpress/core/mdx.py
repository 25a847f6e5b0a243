"""MDX flow parsing.

Splits an MDX document into markdown runs, flow JSX elements and import
declarations. Markdown runs are parsed by mistune into its AST; JSX elements
become ``mdx_jsx`` nodes whose children are parsed recursively.

Supported subset:
    - ``<Name attr="value" flag>`` ... ``</Name>`` on their own lines at column 0
    - ``<Name />`` self-closing elements
    - ``<Name />`` and ``<Name>text</Name>`` inside a paragraph (inline)
    - ``import { A, B as C } from "package.module"`` lines at column 0

Tag names must start with an upper case letter (``CH.Code`` style dotted
names are allowed). Lowercase tags are left to markdown as raw HTML.
"""

import json
import re
import textwrap
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

import mistune
from mistune.core import InlineState
from mistune.inline_parser import InlineParser

Node = dict[str, Any]

FENCE_RE = re.compile(r"^ {0,3}(?P<fence>`{3,}|~{3,})")
IMPORT_RE = re.compile(
    r"""^import\s*\{(?P<names>[^}]*)\}\s*from\s*(?P<quote>["'])(?P<module>[\w.]+)(?P=quote)\s*;?\s*$"""
)
ESM_RE = re.compile(r"^(import|export)\s")
JSX_OPEN_RE = re.compile(
    r"^<(?P<name>[A-Z]\w*(?:\.[A-Za-z_]\w*)*)(?P<attrs>(?:\s[^<>]*?)?)\s*(?P<self_closing>/?)>\s*$"
)
ATTR_RE = re.compile(
    r"""(?P<name>[A-Za-z_][\w:-]*)"""
    r"""(?:\s*=\s*(?:"(?P<dq>[^"]*)"|'(?P<sq>[^']*)'|\{(?P<expr>[^{}]*)\}))?"""
)
IMPORT_NAME_RE = re.compile(r"^(?P<name>[A-Za-z_]\w*)(?:\s+as\s+(?P<alias>[A-Za-z_]\w*))?$")
INLINE_JSX_PATTERN = (
    r"<(?P<mdx_inline_name>[A-Z]\w*(?:\.[A-Za-z_]\w*)*)"
    r"(?P<mdx_inline_attrs>(?:\s[^<>]*?)?)\s*(?P<mdx_inline_self_closing>/?)>"
)


class MDXSyntaxError(ValueError):
    """Raised when an MDX document cannot be parsed."""

    def __init__(self, message: str, line: int | None = None) -> None:
        self.line = line
        if line is not None:
            message = f"{message} (line {line})"
        super().__init__(message)


@dataclass
class MDXDocument:
    """Parsed MDX document."""

    tree: list[Node]
    imports: dict[str, str] = field(default_factory=dict)


class MDXParser:
    """Parse MDX text into a JSON-safe node tree."""

    def __init__(self, markdown_plugins: Iterable[str] = ()) -> None:
        """Initialize parser.

        Args:
            markdown_plugins: Names of mistune plugins to enable (e.g., "table")
        """
        self._markdown = mistune.create_markdown(
            renderer="ast",
            plugins=list(markdown_plugins),
        )
        inline_jsx(self._markdown)

    def parse(self, text: str) -> MDXDocument:
        """Parse a complete document.

        Args:
            text: MDX source

        Returns:
            MDXDocument with tree and collected imports

        Raises:
            MDXSyntaxError: If an element is unclosed or an import is malformed
        """
        imports: dict[str, str] = {}
        tree = self._parse_flow(text.splitlines(), 1, imports, top_level=True)
        return MDXDocument(tree=tree, imports=imports)

    def _parse_flow(
        self,
        lines: list[str],
        first_line: int,
        imports: dict[str, str],
        *,
        top_level: bool,
    ) -> list[Node]:
        nodes: list[Node] = []
        buffer: list[str] = []
        fence: str | None = None
        i = 0

        while i < len(lines):
            line = lines[i]

            if fence is not None:
                buffer.append(line)
                if _closes_fence(line, fence):
                    fence = None
                i += 1
                continue

            fence_match = FENCE_RE.match(line)
            if fence_match:
                fence = fence_match.group("fence")
                buffer.append(line)
                i += 1
                continue

            esm_match = ESM_RE.match(line)
            if esm_match:
                if esm_match.group(1) == "export":
                    raise MDXSyntaxError("Export declarations are not supported", first_line + i)
                if not top_level:
                    raise MDXSyntaxError(
                        "Import declarations are only allowed at the top level",
                        first_line + i,
                    )
                imports.update(_parse_import(line, first_line + i))
                # Keep a blank line so surrounding paragraphs stay separate
                buffer.append("")
                i += 1
                continue

            open_match = JSX_OPEN_RE.match(line)
            if open_match:
                nodes.extend(self._parse_markdown(buffer))
                buffer = []

                name = open_match.group("name")
                props = _parse_attributes(open_match.group("attrs"), first_line + i)
                if open_match.group("self_closing"):
                    nodes.append(_jsx_node(name, props, []))
                    i += 1
                    continue

                end = _find_closing_tag(lines, i, name)
                if end is None:
                    raise MDXSyntaxError(f"Unclosed element <{name}>", first_line + i)

                inner = textwrap.dedent("\n".join(lines[i + 1 : end])).splitlines()
                children = self._parse_flow(inner, first_line + i + 1, imports, top_level=False)
                nodes.append(_jsx_node(name, props, children))
                i = end + 1
                continue

            closing = _closing_tag_name(line)
            if closing is not None:
                raise MDXSyntaxError(f"Unexpected closing tag </{closing}>", first_line + i)

            buffer.append(line)
            i += 1

        nodes.extend(self._parse_markdown(buffer))
        return nodes

    def _parse_markdown(self, lines: list[str]) -> list[Node]:
        text = "\n".join(lines)
        if not text.strip():
            return []
        result = self._markdown(text)
        return list(result)  # type: ignore[arg-type]


def _jsx_node(name: str, props: dict[str, Any], children: list[Node]) -> Node:
    return {"type": "mdx_jsx", "name": name, "props": props, "children": children}


def _closes_fence(line: str, fence: str) -> bool:
    stripped = line.strip()
    return (
        len(line) - len(line.lstrip(" ")) <= 3
        and len(stripped) >= len(fence)
        and set(stripped) == {fence[0]}
    )


def _closing_tag_name(line: str) -> str | None:
    match = re.match(r"^</(?P<name>[A-Z][\w.]*)\s*>\s*$", line)
    return match.group("name") if match else None


def _find_closing_tag(lines: list[str], start: int, name: str) -> int | None:
    """Find the line index closing the element opened at ``start``.

    Same-name elements nest; fenced code is skipped.
    """
    depth = 1
    fence: str | None = None
    for idx in range(start + 1, len(lines)):
        line = lines[idx]
        if fence is not None:
            if _closes_fence(line, fence):
                fence = None
            continue
        fence_match = FENCE_RE.match(line)
        if fence_match:
            fence = fence_match.group("fence")
            continue

        # Only column-0 tags count, as in _parse_flow
        open_match = JSX_OPEN_RE.match(line)
        if open_match and open_match.group("name") == name and not open_match.group("self_closing"):
            depth += 1
        elif _closing_tag_name(line) == name:
            depth -= 1
            if depth == 0:
                return idx
    return None


def _parse_import(line: str, line_no: int) -> dict[str, str]:
    match = IMPORT_RE.match(line)
    if match is None:
        raise MDXSyntaxError(f"Unsupported import declaration: {line.strip()}", line_no)

    module = match.group("module")
    result: dict[str, str] = {}
    for raw_name in match.group("names").split(","):
        raw_name = raw_name.strip()
        if not raw_name:
            continue
        name_match = IMPORT_NAME_RE.match(raw_name)
        if name_match is None:
            raise MDXSyntaxError(f"Invalid import specifier: {raw_name}", line_no)
        name = name_match.group("name")
        local = name_match.group("alias") or name
        result[local] = f"{module}:{name}"

    if not result:
        raise MDXSyntaxError("Import declaration has no names", line_no)
    return result


def _parse_attributes(raw: str, line_no: int | None) -> dict[str, Any]:
    props: dict[str, Any] = {}
    pos = 0
    raw = raw.strip()
    while pos < len(raw):
        if raw[pos].isspace():
            pos += 1
            continue
        match = ATTR_RE.match(raw, pos)
        if match is None:
            raise MDXSyntaxError(f"Invalid attribute syntax: {raw[pos:]}", line_no)

        name = match.group("name")
        if match.group("dq") is not None:
            value: Any = match.group("dq")
        elif match.group("sq") is not None:
            value = match.group("sq")
        elif match.group("expr") is not None:
            value = _parse_expression(match.group("expr"), line_no)
        else:
            value = True
        props[name] = value
        pos = match.end()
    return props


def _parse_expression(expr: str, line_no: int | None) -> Any:
    """Evaluate a literal attribute expression (numbers, booleans, strings, arrays)."""
    try:
        return json.loads(expr)
    except json.JSONDecodeError as e:
        raise MDXSyntaxError(f"Unsupported attribute expression: {{{expr}}}", line_no) from e


def inline_jsx(md: mistune.Markdown) -> None:
    """mistune plugin for components used inside a paragraph.

    ``<Name />`` and ``<Name attr="v">text</Name>`` become ``mdx_jsx``
    tokens; the text between paired tags is parsed as inline markdown.
    """
    md.inline.register("mdx_jsx", INLINE_JSX_PATTERN, _parse_inline_jsx, before="inline_html")


def _parse_inline_jsx(inline: InlineParser, m: re.Match[str], state: InlineState) -> int:
    name = m.group("mdx_inline_name")
    props = _parse_attributes(m.group("mdx_inline_attrs"), None)
    if m.group("mdx_inline_self_closing"):
        state.append_token(_jsx_node(name, props, []))
        return m.end()

    span = _find_inline_closing_tag(state.src, m.end(), name)
    if span is None:
        raise MDXSyntaxError(f"Unclosed inline element <{name}>")

    child_state = state.copy()
    child_state.src = state.src[m.end() : span[0]]
    children = inline.render(child_state)
    state.append_token(_jsx_node(name, props, children))
    return span[1]


def _find_inline_closing_tag(src: str, start: int, name: str) -> tuple[int, int] | None:
    """Return the span of the tag closing an inline element, honoring nesting."""
    tag_re = re.compile(rf"<(?P<close>/?){re.escape(name)}(?=[\s/>])[^<>]*?(?P<self>/?)>")
    depth = 1
    for match in tag_re.finditer(src, start):
        if match.group("close"):
            depth -= 1
            if depth == 0:
                return match.span()
        elif not match.group("self"):
            depth += 1
    return None
