"""
Traversal utilities for the editor's content tree.

The editor emits a recursive document of nodes shaped like
``{"type": ..., "attrs": {...}, "text": ..., "children": [...]}``.
The editor's own JSON names the child list ``content``; both are read,
with ``children`` taking precedence.

Traversal is total: nodes that are not mappings, child lists that are not
lists and non-string text are treated as empty contributions, so a
malformed subtree only lowers the counts derived from it.
"""

import re
from typing import Any, Callable, Iterator, Mapping, Optional

from .models import ContentNode, Heading

CHILD_KEYS = ("children", "content")

_WORD_SPLIT = re.compile(r"\s+")


def get_children(node: Any) -> list:
    """
    Return the child list of a node, or [] when missing or malformed.

    A present-but-non-list ``children`` value does not fall back to
    ``content``; it yields no children.
    """
    if not isinstance(node, Mapping):
        return []
    for key in CHILD_KEYS:
        if key in node:
            value = node[key]
            return value if isinstance(value, list) else []
    return []


def get_text(node: Any) -> Optional[str]:
    """Return the node's own text if it is a string."""
    if not isinstance(node, Mapping):
        return None
    text = node.get("text")
    return text if isinstance(text, str) else None


def iter_nodes(root: Optional[ContentNode]) -> Iterator[ContentNode]:
    """
    Yield every well-formed node in document order (pre-order).

    Uses an explicit stack so deeply nested documents cannot exhaust the
    recursion limit.
    """
    if root is None:
        return
    stack = [root]
    while stack:
        node = stack.pop()
        if not isinstance(node, Mapping):
            continue
        yield node
        children = get_children(node)
        stack.extend(reversed(children))


def walk(root: Optional[ContentNode], visit: Callable[[ContentNode], None]) -> None:
    """Call ``visit`` for every node in document order."""
    for node in iter_nodes(root):
        visit(node)


def collect_text(root: Optional[ContentNode]) -> str:
    """
    Concatenate all text leaves, separated by single spaces.

    A node contributes its own text before its children's.
    """
    parts = []
    for node in iter_nodes(root):
        text = get_text(node)
        if text:
            parts.append(text)
    return " ".join(parts)


def node_text(node: Optional[ContentNode]) -> str:
    """Text of a single node and its descendants, joined without separators."""
    return "".join(get_text(n) or "" for n in iter_nodes(node))


def split_words(text: str) -> list[str]:
    """Split text on whitespace, dropping empty tokens."""
    return [w for w in _WORD_SPLIT.split(text) if w]


def count_words(root: Optional[ContentNode]) -> int:
    """Number of whitespace-separated words in the document."""
    return len(split_words(collect_text(root)))


def _heading_level(node: ContentNode) -> Optional[int]:
    attrs = node.get("attrs")
    if not isinstance(attrs, Mapping):
        return None
    level = attrs.get("level")
    if isinstance(level, bool):
        return None
    if isinstance(level, float) and not level.is_integer():
        return None
    try:
        level = int(level)
    except (TypeError, ValueError, OverflowError):
        return None
    return level if 1 <= level <= 6 else None


def extract_headings(root: Optional[ContentNode]) -> list[Heading]:
    """
    Collect headings (nodes of type "heading" with a numeric attrs.level).

    Returns:
        Headings in document order.
    """
    headings = []
    for node in iter_nodes(root):
        if node.get("type") != "heading":
            continue
        level = _heading_level(node)
        if level is None:
            continue
        headings.append(Heading(level=level, text=node_text(node)))
    return headings


def count_headings(root: Optional[ContentNode], level: int) -> int:
    """Number of headings at the given level."""
    return sum(1 for h in extract_headings(root) if h.level == level)
