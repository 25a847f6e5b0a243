"""Code block metadata and comment annotations.

Fence meta: ``js index.js focus=2:4 mark=3``
    language, optional file name, then ``key=range`` pairs.

Comment annotations on their own line, in any common comment syntax::

    // focus
    # mark(1:3)
    <!-- focus(2) -->

The annotation line is removed from the code. Its range counts from the
line that follows it (``focus`` alone means just that next line).
"""

import re
from dataclasses import dataclass, field

ANNOTATION_TYPES = ("focus", "mark")

COMMENT_ANNOTATION_RE = re.compile(
    r"^\s*(?://|#|--|;|/\*|<!--)\s*"
    r"(?P<type>focus|mark)(?:\((?P<range>[^)]*)\))?"
    r"\s*(?:\*/|-->)?\s*$"
)
RANGE_PART_RE = re.compile(r"^(?P<start>\d+)(?::(?P<end>\d+))?$")


@dataclass
class CodeMeta:
    """Parsed fence info string."""

    lang: str = ""
    name: str = ""
    ranges: dict[str, str] = field(default_factory=dict)


def parse_line_ranges(spec: str) -> list[int]:
    """Expand a range spec such as ``1,3:5`` into sorted line numbers.

    Raises:
        ValueError: If the spec is malformed
    """
    lines: set[int] = set()
    for part in spec.split(","):
        part = part.strip()
        if not part:
            continue
        match = RANGE_PART_RE.match(part)
        if match is None:
            raise ValueError(f"Invalid line range: {spec!r}")
        start = int(match.group("start"))
        end = int(match.group("end") or start)
        if start < 1 or end < start:
            raise ValueError(f"Invalid line range: {spec!r}")
        lines.update(range(start, end + 1))
    return sorted(lines)


def parse_meta(info: str | None) -> CodeMeta:
    """Parse a fence info string into language, file name and ranges."""
    meta = CodeMeta()
    if not info:
        return meta

    words = info.split()
    meta.lang = words[0]
    for word in words[1:]:
        key, sep, value = word.partition("=")
        if sep and key in ANNOTATION_TYPES:
            meta.ranges[key] = value
        elif not sep and not meta.name:
            meta.name = word
    return meta


def extract_annotations(code: str, meta: CodeMeta | None = None) -> tuple[str, dict[str, list[int]]]:
    """Strip annotation comments from code and collect annotated lines.

    Args:
        code: Raw code block content
        meta: Fence metadata whose ranges are merged in (absolute line numbers)

    Returns:
        Tuple of (code without annotation lines, {type: sorted line numbers})

    Raises:
        ValueError: If a range is malformed
    """
    kept: list[str] = []
    found: dict[str, set[int]] = {kind: set() for kind in ANNOTATION_TYPES}

    for line in code.split("\n"):
        match = COMMENT_ANNOTATION_RE.match(line)
        if match is None:
            kept.append(line)
            continue
        base = len(kept) + 1
        relative = parse_line_ranges(match.group("range") or "1")
        found[match.group("type")].update(base + r - 1 for r in relative)

    if meta is not None:
        for kind, spec in meta.ranges.items():
            found[kind].update(parse_line_ranges(spec))

    total = len(kept)
    annotations = {
        kind: sorted(n for n in lines if n <= total)
        for kind, lines in found.items()
        if any(n <= total for n in lines)
    }
    return "\n".join(kept), annotations
