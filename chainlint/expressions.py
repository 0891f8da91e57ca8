"""
Expression helpers over tree-sitter TypeScript/JavaScript nodes.

Tree-sitter nodes carry a string ``type``; this module maps them onto a small
``ExprKind`` enumeration and provides the few structural helpers the chain
and fallback matchers share (parenthesis unwrapping, logical flattening,
optional-access detection). Every helper returns ``None`` for shapes it does
not recognise instead of raising.
"""

from enum import Enum
from typing import Any, List, Optional


class ExprKind(Enum):
    IDENTIFIER = "identifier"
    THIS = "this"
    META_PROPERTY = "meta_property"
    MEMBER = "member"
    ELEMENT = "element"
    CALL = "call"
    LOGICAL = "logical"
    UNARY = "unary"
    BINARY = "binary"
    CONDITIONAL = "conditional"
    AWAIT = "await"
    NON_NULL = "non_null"
    LITERAL = "literal"
    PARENTHESIZED = "parenthesized"
    OTHER = "other"


LOGICAL_OPERATORS = frozenset(["&&", "||", "??"])

LITERAL_TYPES = frozenset([
    "string", "template_string", "number", "regex",
    "true", "false", "null", "undefined",
])

_KIND_BY_TYPE = {
    "identifier": ExprKind.IDENTIFIER,
    "this": ExprKind.THIS,
    "meta_property": ExprKind.META_PROPERTY,
    "member_expression": ExprKind.MEMBER,
    "subscript_expression": ExprKind.ELEMENT,
    "call_expression": ExprKind.CALL,
    "unary_expression": ExprKind.UNARY,
    "ternary_expression": ExprKind.CONDITIONAL,
    "await_expression": ExprKind.AWAIT,
    "non_null_expression": ExprKind.NON_NULL,
    "parenthesized_expression": ExprKind.PARENTHESIZED,
}


def kind_of(node: Any) -> ExprKind:
    """Classify a node; unknown or missing nodes are ``OTHER``."""
    if node is None:
        return ExprKind.OTHER
    node_type = node.type
    if node_type == "binary_expression":
        if operator_of(node) in LOGICAL_OPERATORS:
            return ExprKind.LOGICAL
        return ExprKind.BINARY
    if node_type in LITERAL_TYPES:
        return ExprKind.LITERAL
    return _KIND_BY_TYPE.get(node_type, ExprKind.OTHER)


def operator_of(node: Any) -> Optional[str]:
    """Operator token text of a binary or unary expression."""
    if node is None:
        return None
    op = node.child_by_field_name("operator")
    if op is None:
        return None
    return op.type


def expression_children(node: Any) -> List[Any]:
    """Named children of ``node`` with comments dropped."""
    return [child for child in node.named_children if child.type != "comment"]


def unwrap_parens(node: Any) -> Optional[Any]:
    """Strip any number of redundant parentheses around an expression."""
    while node is not None and node.type == "parenthesized_expression":
        inner = expression_children(node)
        if len(inner) != 1:
            return None
        node = inner[0]
    return node


def is_nullish_literal(node: Any, source) -> bool:
    """True for ``null``, ``undefined`` and the identifier ``undefined``."""
    node = unwrap_parens(node)
    if node is None:
        return False
    if node.type in ("null", "undefined"):
        return True
    return node.type == "identifier" and source.text(node) == "undefined"


def is_empty_object(node: Any) -> bool:
    node = unwrap_parens(node)
    return node is not None and node.type == "object" and not expression_children(node)


def is_optional(node: Any) -> bool:
    """True when a member/element/call node uses ``?.`` itself."""
    for child in node.children:
        if child.type in ("optional_chain", "?."):
            return True
    return False


def continues_run(node: Any, operator: str) -> bool:
    """True when ``node`` is an operand of a larger run of ``operator``."""
    parent = node.parent
    return (
        parent is not None
        and parent.type == "binary_expression"
        and operator_of(parent) == operator
    )


def flatten_logical(node: Any, operator: str) -> List[Any]:
    """Left-to-right operands of a run of ``operator`` rooted at ``node``.

    Parenthesized sub-expressions are operands in their own right; only bare
    nesting of the same operator is flattened.
    """
    operands = []
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type == "binary_expression" and operator_of(current) == operator:
            left = current.child_by_field_name("left")
            right = current.child_by_field_name("right")
            if left is None or right is None:
                operands.append(current)
                continue
            stack.append(right)
            stack.append(left)
        else:
            operands.append(current)
    return operands
