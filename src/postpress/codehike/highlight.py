"""Syntax highlighting with Pygments, colored from a TextMate-style theme."""

import logging
from typing import TypedDict

from pygments import lex
from pygments import token as T
from pygments.lexer import Lexer
from pygments.lexers import get_lexer_by_name
from pygments.lexers.special import TextLexer
from pygments.util import ClassNotFound

from postpress.codehike.themes import ThemeStyles, TokenStyle

logger = logging.getLogger(__name__)

# Pygments token type -> TextMate scope used for theme lookup
_SCOPE_MAP = {
    T.Comment: "comment",
    T.Keyword.Type: "storage.type",
    T.Keyword.Declaration: "storage.type",
    T.Keyword.Namespace: "keyword.control.import",
    T.Keyword.Constant: "constant.language",
    T.Keyword: "keyword",
    T.Literal.String: "string",
    T.Literal.Number: "constant.numeric",
    T.Literal: "constant.other",
    T.Name.Function: "entity.name.function",
    T.Name.Class: "entity.name.class",
    T.Name.Exception: "entity.name.type",
    T.Name.Decorator: "meta.decorator",
    T.Name.Builtin: "support.function",
    T.Name.Tag: "entity.name.tag",
    T.Name.Attribute: "entity.other.attribute-name",
    T.Name.Property: "variable.other.property",
    T.Name.Constant: "constant.other",
    T.Name.Variable: "variable",
    T.Operator.Word: "keyword.operator",
    T.Operator: "keyword.operator",
    T.Punctuation: "punctuation",
    T.Generic.Inserted: "markup.inserted",
    T.Generic.Deleted: "markup.deleted",
}


class HighlightToken(TypedDict):
    """A run of text sharing one style."""

    content: str
    style: TokenStyle


def token_scope(ttype: T._TokenType) -> str:
    """Map a Pygments token type to a TextMate scope."""
    while ttype:
        if ttype in _SCOPE_MAP:
            return _SCOPE_MAP[ttype]
        ttype = ttype.parent
    return "source"


def get_lexer(lang: str) -> Lexer:
    """Return a lexer for ``lang``, falling back to plain text."""
    if not lang:
        return TextLexer(stripnl=False, ensurenl=False)
    try:
        return get_lexer_by_name(lang, stripnl=False, ensurenl=False)
    except ClassNotFound:
        logger.warning(f"Unknown language '{lang}', highlighting as plain text")
        return TextLexer(stripnl=False, ensurenl=False)


def highlight_lines(code: str, lang: str, styles: ThemeStyles) -> list[list[HighlightToken]]:
    """Highlight code into one token list per source line.

    Adjacent runs with the same style are merged.

    Args:
        code: Source code without trailing newline
        lang: Language name understood by Pygments
        styles: Theme styles

    Returns:
        List of lines, each a list of tokens
    """
    lines: list[list[HighlightToken]] = [[]]
    for ttype, value in lex(code, get_lexer(lang)):
        style = styles.style_for(token_scope(ttype))
        parts = value.split("\n")
        for idx, part in enumerate(parts):
            if idx > 0:
                lines.append([])
            if part:
                _append_token(lines[-1], part, style)

    # A trailing newline from the lexer would produce an extra empty line
    expected = code.count("\n") + 1
    while len(lines) < expected:
        lines.append([])
    return lines[:expected]


def _append_token(line: list[HighlightToken], content: str, style: TokenStyle) -> None:
    if line and line[-1]["style"] == style:
        line[-1]["content"] += content
    else:
        line.append({"content": content, "style": dict(style)})  # type: ignore[typeddict-item]
