"""MDX serialization.

Turns MDX text into a JSON-safe ``SerializedSource`` that the page renderer
consumes. Tree plugins run over the parsed tree in order, the way remark
plugins run over mdast.
"""

import asyncio
import copy
import hashlib
import json
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, TypedDict

from postpress.core.mdx import MDXParser, MDXSyntaxError, Node

logger = logging.getLogger(__name__)


@dataclass
class SourceFile:
    """Document being serialized, handed to every tree plugin.

    Plugins may add entries to ``scope`` (values passed to components at
    render time) and ``imports`` (names resolved at render time).
    """

    value: str
    scope: dict[str, Any] = field(default_factory=dict)
    imports: dict[str, str] = field(default_factory=dict)


TreePlugin = Callable[[list[Node], SourceFile], "list[Node] | None"]
PluginSpec = TreePlugin | tuple[Callable[..., TreePlugin], dict[str, Any]]


@dataclass
class MdxOptions:
    """MDX compilation options."""

    remark_plugins: list[PluginSpec] = field(default_factory=list)
    use_dynamic_import: bool = False
    markdown_plugins: list[str] = field(default_factory=list)


class SerializedSourceDict(TypedDict):
    """Dictionary representation of a serialized source."""

    tree: list[Node]
    scope: dict[str, Any]
    imports: dict[str, str]
    frontmatter: dict[str, Any]


@dataclass
class SerializedSource:
    """Serialized MDX ready for rendering."""

    tree: list[Node]
    scope: dict[str, Any] = field(default_factory=dict)
    imports: dict[str, str] = field(default_factory=dict)
    frontmatter: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> SerializedSourceDict:
        """Convert to dictionary for JSON serialization."""
        return {
            "tree": self.tree,
            "scope": self.scope,
            "imports": self.imports,
            "frontmatter": self.frontmatter,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SerializedSource":
        """Rebuild from ``to_dict()`` output.

        Raises:
            ValueError: If data doesn't look like a serialized source
        """
        tree = data.get("tree")
        if not isinstance(tree, list):
            raise ValueError("Serialized source must contain a tree list")
        return cls(
            tree=tree,
            scope=dict(data.get("scope") or {}),
            imports=dict(data.get("imports") or {}),
            frontmatter=dict(data.get("frontmatter") or {}),
        )


def serialize(
    source: str,
    mdx_options: MdxOptions | None = None,
    scope: dict[str, Any] | None = None,
) -> SerializedSource:
    """Serialize MDX text.

    Args:
        source: Raw MDX document text
        mdx_options: Plugins and compilation flags
        scope: Initial scope values made available to components

    Returns:
        SerializedSource with tree, scope and imports

    Raises:
        MDXSyntaxError: If the document is malformed or carries imports
            while dynamic import is disabled
    """
    options = mdx_options or MdxOptions()
    parser = MDXParser(options.markdown_plugins)
    document = parser.parse(source)

    source_file = SourceFile(
        value=source,
        scope=copy.deepcopy(scope) if scope else {},
        imports=dict(document.imports),
    )

    tree = document.tree
    for spec in options.remark_plugins:
        plugin = _instantiate_plugin(spec)
        result = plugin(tree, source_file)
        if result is not None:
            tree = result

    if source_file.imports and not options.use_dynamic_import:
        names = ", ".join(sorted(source_file.imports))
        raise MDXSyntaxError(f"Imports require dynamic import to be enabled: {names}")

    logger.debug(f"Serialized {len(source)} characters into {len(tree)} top-level nodes")
    return SerializedSource(
        tree=tree,
        scope=source_file.scope,
        imports=source_file.imports,
    )


async def serialize_async(
    source: str,
    mdx_options: MdxOptions | None = None,
    scope: dict[str, Any] | None = None,
) -> SerializedSource:
    """Serialize MDX text in a worker thread.

    Same contract as ``serialize()``.
    """
    return await asyncio.to_thread(serialize, source, mdx_options, scope)


def options_fingerprint(options: MdxOptions) -> str:
    """Compute a hash of everything in ``options`` that shapes the output.

    Covers plugin identities and their keyword options (theme data
    included), the dynamic import flag and the markdown plugins. Used to
    tell cached serializations made with other options apart.

    Returns:
        SHA-256 hex digest
    """
    plugins: list[Any] = []
    for spec in options.remark_plugins:
        if isinstance(spec, tuple):
            factory, plugin_options = spec
            plugins.append([_qualified_name(factory), plugin_options])
        else:
            plugins.append([_qualified_name(spec), None])

    content = json.dumps(
        {
            "plugins": plugins,
            "use_dynamic_import": options.use_dynamic_import,
            "markdown_plugins": options.markdown_plugins,
        },
        sort_keys=True,
        default=_fingerprint_value,
    )
    return hashlib.sha256(content.encode()).hexdigest()


def _instantiate_plugin(spec: PluginSpec) -> TreePlugin:
    """Resolve a plugin spec to a tree plugin.

    ``(factory, options)`` pairs are called with the options as keyword
    arguments; plain callables are used as-is.
    """
    if isinstance(spec, tuple):
        factory, plugin_options = spec
        return factory(**plugin_options)
    return spec


def _qualified_name(obj: Any) -> str:
    return f"{getattr(obj, '__module__', '')}.{getattr(obj, '__qualname__', type(obj).__qualname__)}"


def _fingerprint_value(value: Any) -> str:
    if callable(value):
        return _qualified_name(value)
    return repr(value)
