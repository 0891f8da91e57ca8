"""Helpers shared by the test modules: real tree-sitter parses, no mocked trees."""

from chainlint.javascript_adapter import JavaScriptAdapter
from chainlint.types import RuleContext
from chainlint.typescript_adapter import TypeScriptAdapter

_ts_adapter = TypeScriptAdapter()
_js_adapter = JavaScriptAdapter()


def adapter_for(file_path):
    if file_path.endswith(('.js', '.jsx', '.mjs', '.cjs')):
        return _js_adapter
    return _ts_adapter


def create_test_context(code, file_path="test.ts", config=None):
    """Build a RuleContext over a real parse of ``code``."""
    adapter = adapter_for(file_path)
    tree = adapter.parse(code, file_path=file_path)
    return RuleContext(
        file_path=file_path,
        text=code,
        tree=tree,
        adapter=adapter,
        config=config or {}
    )


def expression(code, file_path="test.ts"):
    """Parse ``_ = <code>;`` and return ``(node, source)`` for the right-hand side.

    Going through an assignment keeps ``{}`` and ``function`` in expression
    position.
    """
    ctx = create_test_context("_ = " + code + ";", file_path)
    statement = ctx.tree.root_node.named_children[0]
    assignment = statement.named_children[0]
    assert assignment.type == "assignment_expression", assignment.type
    return assignment.child_by_field_name("right"), ctx.source


def find_node(ctx, node_type, text=None):
    for node in ctx.walk_nodes():
        if node.type == node_type and (text is None or ctx.node_text(node) == text):
            return node
    raise LookupError(f"no {node_type} node matching {text!r}")


def apply_suggestion(code, finding):
    assert finding.suggestions and len(finding.suggestions) == 1
    return finding.suggestions[0].apply(code)
