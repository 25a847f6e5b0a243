"""Code Hike tree plugin.

Rewrites code blocks into ``CH.*`` component nodes carrying highlighted,
annotated files. Highlighting happens at serialization time so the
rendered page needs no client-side highlighter.
"""

import logging
from typing import Any

from postpress.codehike.annotations import extract_annotations, parse_meta
from postpress.codehike.highlight import highlight_lines
from postpress.codehike.themes import DEFAULT_THEME, ThemeStyles, load_theme
from postpress.core.mdx import Node
from postpress.core.serializer import SourceFile, TreePlugin

logger = logging.getLogger(__name__)

CODE_CONFIG_KEY = "chCodeConfig"
COMPONENTS_IMPORT = "postpress.codehike.components:CH"

# Components whose children are split into steps on thematic breaks
STEP_COMPONENTS = frozenset({"CH.Scrollycoding", "CH.Spotlight"})


def code_hike(
    *,
    theme: dict[str, Any] | None = None,
    auto_import: bool = True,
    line_numbers: bool = False,
) -> TreePlugin:
    """Create the Code Hike tree plugin.

    Args:
        theme: Theme dictionary from ``load_theme()`` (default: dracula-soft)
        auto_import: Register the ``CH`` import so the renderer can resolve
            it without a supplied component registry
        line_numbers: Show line numbers in code panels

    Returns:
        Tree plugin for ``MdxOptions.remark_plugins``
    """
    resolved_theme = theme if theme is not None else load_theme(DEFAULT_THEME)
    styles = ThemeStyles(resolved_theme)
    code_config = {
        "theme": resolved_theme,
        "lineNumbers": line_numbers,
    }

    def transform(tree: list[Node], file: SourceFile) -> list[Node]:
        file.scope[CODE_CONFIG_KEY] = code_config
        if auto_import:
            file.imports.setdefault("CH", COMPONENTS_IMPORT)
        return _CodeHikeTransform(styles).nodes(tree)

    return transform


class _CodeHikeTransform:
    def __init__(self, styles: ThemeStyles) -> None:
        self._styles = styles
        self._count = 0

    def nodes(self, nodes: list[Node]) -> list[Node]:
        return [self.node(node) for node in nodes]

    def node(self, node: Node) -> Node:
        node_type = node.get("type")
        if node_type == "block_code":
            return _jsx("CH.Code", {"files": [self.file(node)]}, [])

        if node_type == "mdx_jsx" and str(node.get("name", "")).startswith("CH."):
            return self.component(node)

        if "children" in node:
            return {**node, "children": self.nodes(node["children"])}
        return node

    def component(self, node: Node) -> Node:
        name = node["name"]
        props = dict(node.get("props") or {})
        children: list[Node] = node.get("children") or []

        if name in STEP_COMPONENTS:
            steps = [
                self.step(index, step_nodes)
                for index, step_nodes in enumerate(_split_steps(children))
            ]
            return _jsx(name, props, steps)

        files, rest = self.split_files(children)
        if files:
            props["files"] = props.get("files", []) + files
        return _jsx(name, props, self.nodes(rest))

    def step(self, index: int, nodes: list[Node]) -> Node:
        files, rest = self.split_files(nodes)
        return _jsx("CH.Step", {"index": index, "files": files}, self.nodes(rest))

    def split_files(self, nodes: list[Node]) -> tuple[list[dict[str, Any]], list[Node]]:
        files: list[dict[str, Any]] = []
        rest: list[Node] = []
        for child in nodes:
            if child.get("type") == "block_code":
                files.append(self.file(child))
            else:
                rest.append(child)
        return files, rest

    def file(self, node: Node) -> dict[str, Any]:
        info = (node.get("attrs") or {}).get("info")
        meta = parse_meta(info)
        raw = node.get("raw", "")
        if raw.endswith("\n"):
            raw = raw[:-1]

        code, annotations = extract_annotations(raw, meta)
        self._count += 1
        logger.debug(
            f"Highlighting code block {self._count} "
            f"(lang={meta.lang or 'text'}, name={meta.name or '-'})"
        )
        return {
            "name": meta.name,
            "lang": meta.lang,
            "lines": highlight_lines(code, meta.lang, self._styles),
            "annotations": annotations,
        }


def _jsx(name: str, props: dict[str, Any], children: list[Node]) -> Node:
    return {"type": "mdx_jsx", "name": name, "props": props, "children": children}


def _split_steps(nodes: list[Node]) -> list[list[Node]]:
    """Split nodes into steps separated by thematic breaks."""
    steps: list[list[Node]] = [[]]
    for node in nodes:
        if node.get("type") == "thematic_break":
            steps.append([])
        else:
            steps[-1].append(node)
    return [step for step in steps if any(n.get("type") != "blank_line" for n in step)]
