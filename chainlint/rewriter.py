"""
Render replacement text for matched chains and fallback patterns.
"""

from .access_paths import Link, LinkKind
from .chain_walker import Chain
from .fallback import FallbackMatch, needs_parens, starts_statement
from .guards import GuardForm


def render_link(link: Link, optional: bool) -> str:
    if link.kind == LinkKind.PROPERTY:
        return ("?." if optional else ".") + link.text
    if link.kind == LinkKind.ELEMENT:
        return ("?." if optional else "") + "[" + link.text + "]"
    return ("?." if optional else "") + link.text


def render_chain(chain: Chain) -> str:
    """Merged text for ``chain``.

    Seed links keep their own ``?.`` flags; each guarded extension becomes
    ``?.``; jumped extensions keep their source form. The last operand's
    guard decides the wrapper (``!``, a null comparison, or nothing).
    """
    parts = [chain.seed.root]
    parts.extend(render_link(link, link.optional) for link in chain.seed.links)
    for link, guarded in chain.extensions:
        parts.append(render_link(link, guarded or link.optional))
    text = "".join(parts)

    guard = chain.last_guard
    if guard.form == GuardForm.NEGATED:
        return "!" + text
    if guard.form == GuardForm.COMPARISON:
        return "%s %s %s" % (text, guard.comparison, guard.right_text)
    return text


def render_fallback(match: FallbackMatch, source) -> str:
    """``X?.prop`` / ``X?.[key]`` for a fallback match, ``X`` kept verbatim."""
    inner = source.text(match.inner)
    if needs_parens(match.inner, starts_statement(match.access)):
        inner = "(" + inner + ")"

    access = match.access
    if access.type == "member_expression":
        prop = access.child_by_field_name("property")
        return inner + "?." + source.text(prop)
    index = access.child_by_field_name("index")
    return inner + "?.[" + source.text(index) + "]"


def _call_span(link: Link):
    call = link.node
    args = call.child_by_field_name("arguments")
    type_args = call.child_by_field_name("type_arguments")
    start = type_args.start_byte if type_args is not None else args.start_byte
    return start, args.end_byte


def _loses_comment(comments, start_byte: int, end_byte: int, kept) -> bool:
    for comment in comments:
        if comment.start_byte < start_byte or comment.end_byte > end_byte:
            continue
        if not any(lo <= comment.start_byte and comment.end_byte <= hi for lo, hi in kept):
            return True
    return False


def chain_drops_comments(chain: Chain, comments) -> bool:
    """True when a comment inside the chain's range would not survive rendering.

    Only call argument lists are copied verbatim, so a comment between
    operands or inside a property path would be lost.
    """
    kept = [_call_span(link) for link in chain.links() if link.kind == LinkKind.CALL]
    return _loses_comment(comments, chain.start_byte, chain.end_byte, kept)


def fallback_drops_comments(match: FallbackMatch, comments) -> bool:
    """True when a comment outside the retained ``X`` would be lost."""
    kept = [(match.inner.start_byte, match.inner.end_byte)]
    return _loses_comment(comments, match.start_byte, match.end_byte, kept)
