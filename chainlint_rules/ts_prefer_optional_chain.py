"""Rule: lang.ts_prefer_optional_chain

Suggests optional chaining where code spells it out by hand:

- ``foo && foo.bar && foo.bar.baz``        -> ``foo?.bar?.baz``
- ``foo != null && foo.bar``               -> ``foo?.bar``
- ``!foo || !foo.bar``                     -> ``!foo?.bar``
- ``(foo || {}).bar`` / ``(foo ?? {}).bar`` -> ``foo?.bar``

The rewrite is only offered as a suggestion. A truthiness guard also rejects
``0``, ``""`` and ``false``, which ``?.`` lets through, so the merged form is
not always equivalent.

Config options (rule_configs["lang.ts_prefer_optional_chain"]):
- check_logical_chains: report ``&&`` chains (default True)
- check_negated_chains: report ``||`` chains of negations (default True)
- check_fallback_pattern: report ``(X || {}).prop`` (default True)
"""

from typing import Iterator

from chainlint.chain_walker import Chain, walk_chains
from chainlint.expressions import continues_run, flatten_logical, operator_of
from chainlint.fallback import FallbackMatch, match_fallback
from chainlint.rewriter import (chain_drops_comments, fallback_drops_comments, render_chain,
                                render_fallback)
from chainlint.types import Edit, Finding, Requires, RuleContext, RuleMeta

CHAIN_MESSAGE = (
    "Prefer using an optional chain expression instead, "
    "as it's more concise and easier to read"
)
FALLBACK_MESSAGE = "Change to an optional chain"


class TsPreferOptionalChainRule:
    """Suggest ``?.`` in place of guard chains and empty-object fallbacks."""

    meta = RuleMeta(
        id="lang.ts_prefer_optional_chain",
        category="lang",
        tier=0,
        priority="P2",
        autofix_safety="suggest-only",
        description="Prefer optional chaining over && guard chains and (x || {}) fallbacks",
        langs=["typescript", "javascript"]
    )

    requires = Requires(syntax=True)

    def visit(self, ctx: RuleContext) -> Iterator[Finding]:
        if not ctx.tree:
            return

        config = ctx.config or {}
        check_and = config.get("check_logical_chains", True)
        check_or = config.get("check_negated_chains", True)
        check_fallback = config.get("check_fallback_pattern", True)

        for node in ctx.walk_nodes():
            if node.type == "binary_expression":
                operator = operator_of(node)
                if operator == "&&" and not check_and:
                    continue
                if operator == "||" and not check_or:
                    continue
                if operator not in ("&&", "||") or continues_run(node, operator):
                    continue
                if node.has_error:
                    continue
                operands = flatten_logical(node, operator)
                chains = walk_chains(operands, operator, ctx.source)
                if not chains:
                    continue
                comments = self._comments(ctx, node)
                for chain in chains:
                    if not chain_drops_comments(chain, comments):
                        yield self._chain_finding(ctx, chain)

            elif check_fallback and node.type in ("member_expression", "subscript_expression"):
                match = match_fallback(node)
                if match is not None and not fallback_drops_comments(match, self._comments(ctx, node)):
                    yield self._fallback_finding(ctx, match)

    def _comments(self, ctx: RuleContext, node) -> list:
        return [child for child in ctx.walk_nodes(node) if child.type == "comment"]

    def _chain_finding(self, ctx: RuleContext, chain: Chain) -> Finding:
        edit = Edit(chain.start_byte, chain.end_byte, render_chain(chain))
        return Finding(
            rule=self.meta.id,
            message=CHAIN_MESSAGE,
            file=ctx.file_path,
            start_byte=chain.start_byte,
            end_byte=chain.end_byte,
            severity="warn",
            autofix=None,
            suggestions=[edit],
            meta={
                "message_kind": "prefer-chaining-operator",
                "pattern": "logical_chain",
                "original": ctx.get_text(chain.start_byte, chain.end_byte),
                "polarity": chain.polarity.value,
                "has_jump": chain.has_jump,
                "replacement": edit.replacement,
            }
        )

    def _fallback_finding(self, ctx: RuleContext, match: FallbackMatch) -> Finding:
        start_byte, end_byte = ctx.node_span(match.access)
        edit = Edit(start_byte, end_byte, render_fallback(match, ctx.source))
        return Finding(
            rule=self.meta.id,
            message=FALLBACK_MESSAGE,
            file=ctx.file_path,
            start_byte=start_byte,
            end_byte=end_byte,
            severity="warn",
            autofix=None,
            suggestions=[edit],
            meta={
                "message_kind": "prefer-chaining-operator",
                "pattern": "fallback_object",
                "original": ctx.get_text(start_byte, end_byte),
                "operator": match.operator,
                "replacement": edit.replacement,
            }
        )


# Export rule for auto-discovery
RULES = [TsPreferOptionalChainRule()]
