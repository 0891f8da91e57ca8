"""
Fallback pattern matcher for ``(X || {}).prop`` and ``(X ?? {})[key]``.
"""

from dataclasses import dataclass
from typing import Any, Optional

from .expressions import is_empty_object, is_optional, operator_of, unwrap_parens

FALLBACK_OPERATORS = frozenset(["||", "??"])

# Node types that bind at least as tightly as member access
NO_WRAP_TYPES = frozenset([
    "identifier",
    "this",
    "super",
    "call_expression",
    "member_expression",
    "subscript_expression",
    "parenthesized_expression",
    "string",
    "template_string",
    "number",
    "regex",
    "true",
    "false",
    "null",
    "undefined",
    "array",
    "object",
    "function",
    "function_expression",
    "class",
    "generator_function",
    "meta_property",
    "non_null_expression",
])

# Never-wrapped types that still need parentheses when they open a statement
LEADING_WRAP_TYPES = frozenset([
    "object",
    "function",
    "function_expression",
    "class",
    "generator_function",
])

ASSIGNMENT_TYPES = frozenset([
    "assignment_expression",
    "augmented_assignment_expression",
    "for_in_statement",
])

PATTERN_TYPES = frozenset([
    "array_pattern",
    "object_pattern",
    "pair_pattern",
    "rest_pattern",
])

# Wrappers an assignment target can sit inside and still be written to
TARGET_CONTAINER_TYPES = frozenset([
    "parenthesized_expression",
    "array",
    "object",
    "pair",
    "spread_element",
    "non_null_expression",
    "as_expression",
    "satisfies_expression",
    "type_assertion",
])


@dataclass(frozen=True)
class FallbackMatch:
    """``access`` is the whole member/element node, ``inner`` the kept ``X``."""
    access: Any
    inner: Any
    operator: str

    @property
    def start_byte(self) -> int:
        return self.access.start_byte

    @property
    def end_byte(self) -> int:
        return self.access.end_byte



def match_fallback(node) -> Optional[FallbackMatch]:
    if node is None or node.type not in ("member_expression", "subscript_expression"):
        return None
    if node.has_error or is_optional(node):
        return None
    if is_write_target(node):
        return None

    obj = node.child_by_field_name("object")
    if obj is None or obj.type != "parenthesized_expression":
        return None
    inner = unwrap_parens(obj)
    if inner is None or inner.type != "binary_expression":
        return None
    operator = operator_of(inner)
    if operator not in FALLBACK_OPERATORS:
        return None
    if not is_empty_object(inner.child_by_field_name("right")):
        return None
    left = inner.child_by_field_name("left")
    if left is None:
        return None
    return FallbackMatch(node, left, operator)


def _is_field(parent, name: str, child) -> bool:
    field = parent.child_by_field_name(name)
    return (
        field is not None
        and field.start_byte == child.start_byte
        and field.end_byte == child.end_byte
    )


def is_write_target(node) -> bool:
    """True when ``node`` sits where an optional chain is a syntax error.

    That is an assignment or ``for``-``in``/``of`` target, a destructuring
    target, an update operand, a ``new`` callee or a template tag.
    """
    child, parent = node, node.parent
    while parent is not None:
        parent_type = parent.type
        if parent_type in ASSIGNMENT_TYPES or parent_type == "assignment_pattern":
            return _is_field(parent, "left", child)
        if parent_type in PATTERN_TYPES or parent_type == "update_expression":
            return True
        if parent_type == "new_expression":
            return _is_field(parent, "constructor", child)
        if parent_type == "call_expression":
            args = parent.child_by_field_name("arguments")
            return (
                args is not None
                and args.type == "template_string"
                and _is_field(parent, "function", child)
            )
        if parent_type not in TARGET_CONTAINER_TYPES:
            return False
        child, parent = parent, parent.parent
    return False


def starts_statement(node) -> bool:
    """True when text replacing ``node`` would open a statement or arrow body."""
    child, parent = node, node.parent
    while parent is not None:
        if parent.type == "arrow_function":
            return _is_field(parent, "body", child)
        if parent.type == "expression_statement":
            return True
        if parent.start_byte != child.start_byte:
            return False
        child, parent = parent, parent.parent
    return False


def needs_parens(node, at_statement_start: bool = False) -> bool:
    """True when ``node`` must be parenthesized before a trailing ``?.``.

    At the start of a statement an object, function or class would be read
    as a block or a declaration, so those are wrapped there as well.
    """
    if at_statement_start and node.type in LEADING_WRAP_TYPES:
        return True
    if node.type == "new_expression":
        return node.child_by_field_name("arguments") is None
    return node.type not in NO_WRAP_TYPES
