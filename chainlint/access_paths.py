"""
Access paths: an expression viewed as a root followed by access links.

``foo.bar[baz]()`` is the root ``foo`` followed by a property link ``bar``,
an element link ``[baz]`` and a call link ``()``. Paths are compared in a
normalized form so formatting differences (``foo.\\n bar``) and existing
``?.`` tokens never affect matching.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Tuple

from .expressions import is_optional

ROOT_TYPES = frozenset(["identifier", "this", "meta_property"])
ACCESS_TYPES = frozenset(["member_expression", "subscript_expression", "call_expression"])
PROPERTY_NAME_TYPES = frozenset(["property_identifier", "private_property_identifier"])

# Tokens compared by their full text rather than by their children
ATOMIC_TOKEN_TYPES = frozenset(["string", "template_string", "regex", "number", "jsx_text"])

_WHITESPACE = re.compile(r"\s+")


class LinkKind(Enum):
    PROPERTY = "property"
    ELEMENT = "element"
    CALL = "call"


@dataclass(frozen=True)
class Link:
    """One access step.

    ``key`` is the normalized comparison key; ``text`` is what gets written
    back: the property name, the element key or the call's argument list.
    """
    kind: LinkKind
    key: Any
    text: str
    optional: bool = False
    node: Any = field(default=None, compare=False, repr=False)

    @property
    def signature(self) -> Tuple[LinkKind, Any]:
        return (self.kind, self.key)


@dataclass(frozen=True)
class AccessPath:
    root: str
    links: Tuple[Link, ...] = ()
    node: Any = field(default=None, compare=False, repr=False)

    @property
    def is_bare_this(self) -> bool:
        return self.root == "this" and not self.links

    @property
    def ends_in_call(self) -> bool:
        return bool(self.links) and self.links[-1].kind == LinkKind.CALL

    def signature(self) -> Tuple:
        return (self.root,) + tuple(link.signature for link in self.links)


def _compact(text: str) -> str:
    return _WHITESPACE.sub("", text)


def access_path(node, source) -> Optional[AccessPath]:
    """Decompose ``node`` into an access path, or ``None`` if it is not one."""
    if node is None or node.has_error:
        return None

    links = []
    current = node
    while current.type in ACCESS_TYPES:
        if current.type == "member_expression":
            link = _property_link(current, source)
            current = current.child_by_field_name("object")
        elif current.type == "subscript_expression":
            link = _element_link(current, source)
            current = current.child_by_field_name("object")
        else:
            link = _call_link(current, source)
            current = current.child_by_field_name("function")
        if link is None or current is None:
            return None
        links.append(link)

    if current.type not in ROOT_TYPES:
        return None
    links.reverse()
    return AccessPath(_compact(source.text(current)), tuple(links), node)


def _property_link(node, source) -> Optional[Link]:
    prop = node.child_by_field_name("property")
    if prop is None or prop.type not in PROPERTY_NAME_TYPES:
        return None
    name = source.text(prop)
    return Link(LinkKind.PROPERTY, name, name, is_optional(node), node)


def _element_link(node, source) -> Optional[Link]:
    key = simple_key(node.child_by_field_name("index"), source)
    if key is None:
        return None
    return Link(LinkKind.ELEMENT, key, key, is_optional(node), node)


def _call_link(node, source) -> Optional[Link]:
    args = node.child_by_field_name("arguments")
    # Tagged templates are calls in the tree but cannot be made optional
    if args is None or args.type != "arguments":
        return None
    type_args = node.child_by_field_name("type_arguments")
    start = type_args.start_byte if type_args is not None else args.start_byte
    key = tuple(_tokens(type_args, source)) + tuple(_tokens(args, source))
    text = source.slice(start, args.end_byte)
    return Link(LinkKind.CALL, key, text, is_optional(node), node)


def _tokens(node, source):
    """Leaf token texts under ``node`` in source order, comments skipped."""
    if node is None:
        return
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type == "comment":
            continue
        if current.type in ATOMIC_TOKEN_TYPES or not current.children:
            yield source.text(current)
            continue
        stack.extend(reversed(current.children))


def simple_key(node, source) -> Optional[str]:
    """Normalized text of an element key simple enough to merge on.

    Accepts identifiers, ``this``, string/number literals, templates without
    substitutions, and plain property paths over identifiers or ``this``.
    """
    if node is None or node.has_error:
        return None
    node_type = node.type
    if node_type in ("identifier", "this"):
        return source.text(node)
    if node_type in ("string", "number"):
        return source.text(node)
    if node_type == "template_string":
        if any(child.type == "template_substitution" for child in node.named_children):
            return None
        return source.text(node)
    if node_type == "member_expression":
        path = access_path(node, source)
        # new.target / import.meta roots are not accepted as keys
        if path is None or "." in path.root:
            return None
        for link in path.links:
            if link.kind != LinkKind.PROPERTY or link.optional:
                return None
        return path.root + "".join("." + link.text for link in path.links)
    return None


def match_extension(previous: AccessPath, candidate: AccessPath) -> Optional[int]:
    """Count the links ``candidate`` adds on top of ``previous``.

    Returns ``0`` for a repeat of the same path, ``n > 0`` when ``candidate``
    is ``previous`` plus ``n`` more accesses, and ``None`` otherwise. The
    ``?.`` flags are ignored.
    """
    if previous.root != candidate.root:
        return None
    if len(candidate.links) < len(previous.links):
        return None
    for prev_link, cand_link in zip(previous.links, candidate.links):
        if prev_link.signature != cand_link.signature:
            return None
    return len(candidate.links) - len(previous.links)
