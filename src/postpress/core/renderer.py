"""MDX rendering.

Walks a serialized tree with mistune's HTML renderer, instantiating
registered components for ``mdx_jsx`` nodes, and wraps the result in the
post page template.
"""

import importlib
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

import mistune
from jinja2 import Environment, PackageLoader, select_autoescape
from mistune.core import BlockState

from postpress.core.mdx import Node
from postpress.core.serializer import SerializedSource

DEFAULT_TITLE = "DIY Firestore"
DEFAULT_HOME_HREF = "/"
PAGE_TEMPLATE = "post.html"

ComponentFunc = Callable[[dict[str, Any], str, "RenderContext"], str]


class MissingComponentError(LookupError):
    """Raised when the tree references a component that isn't registered."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(
            f"Expected component `{name}` to be defined: "
            "you likely forgot to import, pass, or provide it."
        )


@dataclass(frozen=True)
class RenderContext:
    """Values available to component render functions."""

    scope: Mapping[str, Any]
    components: Mapping[str, Any]


@dataclass(frozen=True)
class RenderedPage:
    """A fully rendered post page."""

    slug: str
    title: str
    body: str
    html: str


@dataclass(frozen=True)
class PageOptions:
    """Fixed page chrome."""

    title: str = DEFAULT_TITLE
    home_href: str = DEFAULT_HOME_HREF
    live_reload: bool = False


class MDXRenderer(mistune.HTMLRenderer):
    """HTML renderer that understands ``mdx_jsx`` component nodes."""

    def __init__(self, components: Mapping[str, Any], scope: Mapping[str, Any]) -> None:
        # Lowercase tags render as elements, as intrinsic elements do in MDX
        super().__init__(escape=False)
        self._components = components
        self._context = RenderContext(scope=scope, components=components)

    def render_token(self, token: Node, state: BlockState) -> str:
        if token["type"] == "mdx_jsx":
            return self.mdx_jsx(token, state)
        return super().render_token(token, state)

    def mdx_jsx(self, token: Node, state: BlockState) -> str:
        component = resolve_component(self._components, token["name"])
        children_html = self.render_tokens(token.get("children") or [], state)
        return component(dict(token.get("props") or {}), children_html, self._context)


def resolve_component(components: Mapping[str, Any], name: str) -> ComponentFunc:
    """Look up a component by name.

    Dotted names resolve attribute-wise: ``CH.Code`` is ``components["CH"].Code``.

    Raises:
        MissingComponentError: If any part of the name is not defined
    """
    head, *rest = name.split(".")
    if head not in components:
        raise MissingComponentError(name)

    target = components[head]
    for attr in rest:
        if isinstance(target, Mapping):
            target = target.get(attr)
        else:
            target = getattr(target, attr, None)
        if target is None:
            raise MissingComponentError(name)

    if not callable(target):
        raise TypeError(f"Component `{name}` is not callable")
    return target


def resolve_imports(imports: Mapping[str, str]) -> dict[str, Any]:
    """Import names declared by the document.

    Args:
        imports: Mapping of local name to ``"package.module:attribute"``

    Returns:
        Mapping of local name to imported object

    Raises:
        ImportError: If a module or attribute cannot be imported
    """
    resolved: dict[str, Any] = {}
    for local, ref in imports.items():
        module_name, _, attr = ref.partition(":")
        module = importlib.import_module(module_name)
        if attr:
            try:
                resolved[local] = getattr(module, attr)
            except AttributeError as e:
                raise ImportError(f"Cannot import name '{attr}' from '{module_name}'") from e
        else:
            resolved[local] = module
    return resolved


def render_mdx(source: SerializedSource, components: Mapping[str, Any] | None = None) -> str:
    """Render serialized MDX to an HTML fragment.

    Names imported by the document shadow supplied components.

    Args:
        source: Serialized source
        components: Component registry (name -> render function or namespace)

    Returns:
        Rendered HTML
    """
    registry: dict[str, Any] = dict(components or {})
    registry.update(resolve_imports(source.imports))
    renderer = MDXRenderer(registry, source.scope)
    return renderer.render_tokens(source.tree, BlockState())


_environment: Environment | None = None


def get_environment() -> Environment:
    """Return the shared Jinja2 environment for page templates."""
    global _environment
    if _environment is None:
        _environment = Environment(
            loader=PackageLoader("postpress", "templates"),
            autoescape=select_autoescape(["html"]),
            keep_trailing_newline=True,
        )
    return _environment


def render_page(
    source: SerializedSource,
    *,
    slug: str,
    components: Mapping[str, Any] | None = None,
    options: PageOptions | None = None,
) -> RenderedPage:
    """Render a complete post page.

    Args:
        source: Serialized source of the post
        slug: Post slug
        components: Component registry
        options: Page chrome (title, home link, live reload)

    Returns:
        RenderedPage with body fragment and full HTML document
    """
    page_options = options or PageOptions()
    body = render_mdx(source, components)
    template = get_environment().get_template(PAGE_TEMPLATE)
    html = template.render(
        title=page_options.title,
        home_href=page_options.home_href,
        content=body,
        slug=slug,
        live_reload=page_options.live_reload,
    )
    return RenderedPage(slug=slug, title=page_options.title, body=body, html=html)
