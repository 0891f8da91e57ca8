"""Tests for the lang.ts_prefer_optional_chain rule against the full rule corpus."""

import pytest

from chainlint_rules.ts_prefer_optional_chain import (
    CHAIN_MESSAGE, FALLBACK_MESSAGE, TsPreferOptionalChainRule
)
from support import apply_suggestion, create_test_context

RULE = TsPreferOptionalChainRule()


def run_rule(code, file_path="test.ts", config=None):
    return list(RULE.visit(create_test_context(code, file_path, config)))


BASE_CASES = [
    # chained members
    ("foo && foo.bar", "foo?.bar"),
    ("foo.bar && foo.bar.baz", "foo.bar?.baz"),
    ("foo && foo()", "foo?.()"),
    ("foo.bar && foo.bar()", "foo.bar?.()"),
    ("foo && foo.bar && foo.bar.baz && foo.bar.baz.buzz", "foo?.bar?.baz?.buzz"),
    ("foo.bar && foo.bar.baz && foo.bar.baz.buzz", "foo.bar?.baz?.buzz"),
    # jump over a non-nullish property
    ("foo && foo.bar && foo.bar.baz.buzz", "foo?.bar?.baz.buzz"),
    ("foo.bar && foo.bar.baz.buzz", "foo.bar?.baz.buzz"),
    # repeated operand
    ("foo && foo.bar && foo.bar.baz && foo.bar.baz && foo.bar.baz.buzz", "foo?.bar?.baz?.buzz"),
    ("foo.bar && foo.bar.baz && foo.bar.baz && foo.bar.baz.buzz", "foo.bar?.baz?.buzz"),
    # element access
    ("foo && foo[bar] && foo[bar].baz && foo[bar].baz.buzz", "foo?.[bar]?.baz?.buzz"),
    ("foo && foo[bar].baz && foo[bar].baz.buzz", "foo?.[bar].baz?.buzz"),
    ("foo && foo[bar.baz] && foo[bar.baz].buzz", "foo?.[bar.baz]?.buzz"),
    ("foo[this.bar] && foo[this.bar].baz", "foo[this.bar]?.baz"),
    # calls
    ("foo && foo.bar && foo.bar.baz && foo.bar.baz.buzz()", "foo?.bar?.baz?.buzz()"),
    ("foo && foo.bar && foo.bar.baz && foo.bar.baz.buzz && foo.bar.baz.buzz()", "foo?.bar?.baz?.buzz?.()"),
    ("foo.bar && foo.bar.baz && foo.bar.baz.buzz && foo.bar.baz.buzz()", "foo.bar?.baz?.buzz?.()"),
    ("foo && foo.bar && foo.bar.baz.buzz()", "foo?.bar?.baz.buzz()"),
    ("foo.bar && foo.bar.baz.buzz()", "foo.bar?.baz.buzz()"),
    ("foo && foo.bar && foo.bar.baz.buzz && foo.bar.baz.buzz()", "foo?.bar?.baz.buzz?.()"),
    (
        "foo && foo.bar() && foo.bar().baz && foo.bar().baz.buzz && foo.bar().baz.buzz()",
        "foo?.bar()?.baz?.buzz?.()",
    ),
    # calls with element access
    ("foo && foo.bar && foo.bar.baz && foo.bar.baz[buzz]()", "foo?.bar?.baz?.[buzz]()"),
    (
        "foo && foo.bar && foo.bar.baz && foo.bar.baz[buzz] && foo.bar.baz[buzz]()",
        "foo?.bar?.baz?.[buzz]?.()",
    ),
    # partially optional already
    (
        "foo && foo?.bar && foo?.bar.baz && foo?.bar.baz[buzz] && foo?.bar.baz[buzz]()",
        "foo?.bar?.baz?.[buzz]?.()",
    ),
    ("foo && foo?.bar.baz && foo?.bar.baz[buzz]", "foo?.bar.baz?.[buzz]"),
    ("foo && foo?.() && foo?.().bar", "foo?.()?.bar"),
    ("foo.bar && foo.bar?.() && foo.bar?.().baz", "foo.bar?.()?.baz"),
]


def _variants():
    for code, output in BASE_CASES:
        yield code, output
        # whitespace inside the accesses is ignored
        yield code.replace(".", ".      "), output
        yield code.replace(".", ".\n"), output
        # unrelated trailing operands are left alone
        yield code + " && bing", output + " && bing"
        yield code + " && bing.bong", output + " && bing.bong"
        # null/undefined comparisons guard the same way as truthiness
        for check in ("!== null", "!= null", "!== undefined", "!= undefined"):
            yield code.replace("&&", check + " &&"), output
        # negated form
        yield code.replace("foo", "!foo").replace("&&", "||"), "!" + output


@pytest.mark.parametrize("code,output", list(_variants()))
def test_base_case_variants(code, output):
    findings = run_rule(code)
    assert len(findings) == 1
    finding = findings[0]
    assert finding.message == CHAIN_MESSAGE
    assert finding.autofix is None
    assert apply_suggestion(code, finding) == output


@pytest.mark.parametrize("code,output", [
    ("foo && foo.bar != null && foo.bar.baz !== undefined && foo.bar.baz.buzz;", "foo?.bar?.baz?.buzz;"),
    (
        "foo.bar && foo.bar.baz != null && foo.bar.baz.qux !== undefined && foo.bar.baz.qux.buzz;",
        "foo.bar?.baz?.qux?.buzz;",
    ),
    ("foo && foo.bar(baz => typeof baz);", "foo?.bar(baz => typeof baz);"),
    ('foo && foo["some long string"] && foo["some long string"].baz', 'foo?.["some long string"]?.baz'),
    ("foo && foo[`some long string`] && foo[`some long string`].baz", "foo?.[`some long string`]?.baz"),
    ("foo && foo['some long string'] && foo['some long string'].baz;", "foo?.['some long string']?.baz;"),
    (
        "\nfoo && foo.bar(/* comment */a,\n  // comment2\n  b, );\n      ",
        "\nfoo?.bar(/* comment */a,\n  // comment2\n  b, );\n      ",
    ),
    ("foo && foo.bar != null;", "foo?.bar != null;"),
    ("foo && foo.bar != undefined;", "foo?.bar != undefined;"),
    ("foo && foo.bar != null && baz;", "foo?.bar != null && baz;"),
    ("this.bar && this.bar.baz;", "this.bar?.baz;"),
    ("foo && foo?.();", "foo?.();"),
    ("foo.bar && foo.bar?.();", "foo.bar?.();"),
    ("!this.bar || !this.bar.baz;", "!this.bar?.baz;"),
    ("!a.b || !a.b();", "!a.b?.();"),
    ("!foo.bar || !foo.bar.baz;", "!foo.bar?.baz;"),
    ("!foo[bar] || !foo[bar]?.[baz];", "!foo[bar]?.[baz];"),
    ("!foo || !foo?.bar.baz;", "!foo?.bar.baz;"),
    ("foo && foo.bar && /* note */ baz;", "foo?.bar && /* note */ baz;"),
    ("/* lead */ foo && foo.bar;", "/* lead */ foo?.bar;"),
])
def test_single_chain(code, output):
    findings = run_rule(code)
    assert len(findings) == 1
    assert apply_suggestion(code, findings[0]) == output


def test_jsx_arguments_are_copied_verbatim():
    code = "foo && foo.bar(baz => <This Requires Spaces />);"
    findings = run_rule(code, file_path="test.tsx")
    assert len(findings) == 1
    assert findings[0].start_byte == 0
    assert apply_suggestion(code, findings[0]) == "foo?.bar(baz => <This Requires Spaces />);"


def test_finding_starts_at_first_operand():
    code = "foo && foo.bar != null && foo.bar.baz !== undefined && foo.bar.baz.buzz;"
    findings = run_rule(code)
    assert len(findings) == 1
    assert findings[0].start_byte == 0
    assert findings[0].end_byte == len(code) - 1


def test_two_chains_joined_by_or():
    code = "foo && foo.bar && foo.bar.baz || baz && baz.bar && baz.bar.foo"
    findings = run_rule(code)
    assert [apply_suggestion(code, f) for f in findings] == [
        "foo?.bar?.baz || baz && baz.bar && baz.bar.foo",
        "foo && foo.bar && foo.bar.baz || baz?.bar?.foo",
    ]


def test_two_negated_chains_in_parentheses():
    code = "(!foo || !foo.bar || !foo.bar.baz) && (!baz || !baz.bar || !baz.bar.foo);"
    findings = run_rule(code)
    assert [apply_suggestion(code, f) for f in findings] == [
        "(!foo?.bar?.baz) && (!baz || !baz.bar || !baz.bar.foo);",
        "(!foo || !foo.bar || !foo.bar.baz) && (!baz?.bar?.foo);",
    ]


@pytest.mark.parametrize("code", [
    "!a || !b;",
    "!a || a.b;",
    "!a && a.b;",
    "!a && !a.b;",
    "!a.b || a.b?.();",
    "!a.b || a.b();",
    "!foo() || !foo().bar;",
    "foo || {};",
    "foo || ({} as any);",
    "(foo || {})?.bar;",
    "(foo || { bar: 1 }).bar;",
    "(undefined && (foo || {})).bar;",
    "foo ||= bar;",
    "foo ||= bar || {};",
    "foo ||= bar?.baz;",
    "foo ||= bar?.baz || {};",
    "foo ||= bar?.baz?.buzz;",
    "(foo1 ? foo2 : foo3 || {}).foo4;",
    "(foo = 2 || {}).bar;",
    "func(foo || {}).bar;",
    "foo ?? {};",
    "(foo ?? {})?.bar;",
    "foo ||= bar ?? {};",
    "foo && bar;",
    "foo && foo;",
    "foo || bar;",
    "foo ?? bar;",
    "foo || foo.bar;",
    "foo ?? foo.bar;",
    "file !== 'index.ts' && file.endsWith('.ts');",
    "nextToken && sourceCode.isSpaceBetweenTokens(prevToken, nextToken);",
    "result && this.options.shouldPreserveNodeMaps;",
    "foo && fooBar.baz;",
    "match && match$1 !== undefined;",
    "foo !== null && foo !== undefined;",
    "x['y'] !== undefined && x['y'] !== null;",
    # complex element keys
    "foo && foo[bar as string] && foo[bar as string].baz;",
    "foo && foo[1 + 2] && foo[1 + 2].baz;",
    "foo && foo[typeof bar] && foo[typeof bar].baz;",
    "!foo || !foo[bar as string] || !foo[bar as string].baz;",
    "!foo || !foo[1 + 2] || !foo[1 + 2].baz;",
    "!foo || !foo[typeof bar] || !foo[typeof bar].baz;",
    # bare this never seeds a chain
    "this && this.foo;",
    "!this || !this.foo;",
    # non-null assertions are never merged across
    "!entity.__helper!.__initialized || options.refresh;",
    "!foo!.bar || !foo!.bar.baz;",
    "!foo!.bar!.baz || !foo!.bar!.baz!.paz;",
    "!foo.bar!.baz || !foo.bar!.baz!.paz;",
    # calls evaluated twice are not the same as once
    "foo() && foo().bar;",
    # optional chains cannot be written to, constructed or tagged
    "(foo || {}).bar = 1;",
    "(foo ?? {}).bar = 1;",
    "(foo || {}).bar += 1;",
    "(foo || {})[bar] = 1;",
    "((foo || {}).bar) = 1;",
    "(foo || {}).bar++;",
    "--(foo || {}).bar;",
    "new (foo || {}).Bar();",
    "(foo || {}).bar`t`;",
    "[(foo || {}).bar] = x;",
    "[a, ...(foo || {}).bar] = x;",
    "({ a: (foo || {}).bar } = x);",
    # comments outside call arguments would be lost
    "foo && /* keep */ foo.bar;",
    "foo && foo./* keep */bar;",
    "foo /* keep */ && foo.bar;",
    "!foo || /* keep */ !foo.bar;",
    "(foo /* keep */ || {}).bar;",
    "(foo || {}). /* keep */ bar;",
])
def test_valid(code):
    assert run_rule(code) == []


# (code, output, start column, end column); columns are 1-based, end exclusive
FALLBACK_CASES = [
    ("(foo || {}).bar;", "foo?.bar;", 1, 16),
    ("(foo || ({})).bar;", "foo?.bar;", 1, 18),
    ("(await foo || {}).bar;", "(await foo)?.bar;", 1, 22),
    ("(foo1?.foo2 || {}).foo3;", "foo1?.foo2?.foo3;", 1, 24),
    ("((() => foo())() || {}).bar;", "(() => foo())()?.bar;", 1, 28),
    ("const foo = (bar || {}).baz;", "const foo = bar?.baz;", 13, 28),
    ("(foo.bar || {})[baz];", "foo.bar?.[baz];", 1, 21),
    ("(foo || undefined || {}).bar;", "(foo || undefined)?.bar;", 1, 29),
    ("(foo() || bar || {}).baz;", "(foo() || bar)?.baz;", 1, 25),
    ("((foo1 ? foo2 : foo3) || {}).foo4;", "(foo1 ? foo2 : foo3)?.foo4;", 1, 34),
    ("if (foo) { (foo || {}).bar; }", "if (foo) { foo?.bar; }", 12, 27),
    ("if ((foo || {}).bar) { foo.bar; }", "if (foo?.bar) { foo.bar; }", 5, 20),
    ("(undefined && foo || {}).bar;", "(undefined && foo)?.bar;", 1, 29),
    ("(a > b || {}).bar;", "(a > b)?.bar;", 1, 18),
    ("(((typeof x) as string) || {}).bar;", "((typeof x) as string)?.bar;", 1, 35),
    ("(void foo() || {}).bar;", "(void foo())?.bar;", 1, 23),
    ("((a ? b : c) || {}).bar;", "(a ? b : c)?.bar;", 1, 24),
    ("((a instanceof Error) || {}).bar;", "(a instanceof Error)?.bar;", 1, 33),
    ("((a << b) || {}).bar;", "(a << b)?.bar;", 1, 21),
    ("((foo ** 2) || {}).bar;", "(foo ** 2)?.bar;", 1, 23),
    ("(foo ** 2 || {}).bar;", "(foo ** 2)?.bar;", 1, 21),
    ("(foo++ || {}).bar;", "(foo++)?.bar;", 1, 18),
    ("(+foo || {}).bar;", "(+foo)?.bar;", 1, 17),
    ("(this || {}).foo;", "this?.foo;", 1, 17),
    ("(foo || {}).bar();", "foo?.bar();", 1, 16),
    ("x[(foo || {}).bar] = 1;", "x[foo?.bar] = 1;", 3, 18),
    ("y = [(foo || {}).bar];", "y = [foo?.bar];", 6, 21),
    ("delete (foo || {}).bar;", "delete foo?.bar;", 8, 23),
    # object, function and class literals keep their parentheses where they open a statement
    ("({a: 1} || {}).a;", "({a: 1})?.a;", 1, 17),
    ("x = ({a: 1} || {}).a;", "x = {a: 1}?.a;", 5, 21),
    ("(function () {} || {}).name;", "(function () {})?.name;", 1, 28),
    ("(class {} || {}).name;", "(class {})?.name;", 1, 22),
    ("const f = () => ({a: 1} || {}).a;", "const f = () => ({a: 1})?.a;", 17, 33),
]


def _fallback_variants():
    for code, output, start, end in FALLBACK_CASES:
        yield code, output, start, end
        if " || {}" in code and "||" not in code.replace(" || {}", ""):
            yield code.replace(" || {}", " ?? {}"), output, start, end
    yield "(foo ?? ({})).bar;", "foo?.bar;", 1, 18
    yield "(foo ?? undefined ?? {}).bar;", "(foo ?? undefined)?.bar;", 1, 29
    yield "(foo() ?? bar ?? {}).baz;", "(foo() ?? bar)?.baz;", 1, 25


@pytest.mark.parametrize("code,output,start_col,end_col", list(_fallback_variants()))
def test_fallback_object(code, output, start_col, end_col):
    findings = run_rule(code)
    assert len(findings) == 1
    finding = findings[0]
    assert finding.message == FALLBACK_MESSAGE
    assert finding.meta["pattern"] == "fallback_object"
    assert finding.start_byte + 1 == start_col
    assert finding.end_byte + 1 == end_col
    assert apply_suggestion(code, finding) == output


@pytest.mark.parametrize("operator", ["||", "??"])
def test_nested_fallbacks_report_independently(operator):
    code = f"((foo1 {operator} {{}}).foo2 {operator} {{}}).foo3;"
    findings = run_rule(code)
    assert [(f.start_byte + 1, f.end_byte + 1) for f in findings] == [(1, 31), (2, 19)]
    assert [apply_suggestion(code, f) for f in findings] == [
        f"(foo1 {operator} {{}}).foo2?.foo3;",
        f"(foo1?.foo2 {operator} {{}}).foo3;",
    ]


class TestRuleMeta:
    """Rule metadata and finding shape."""

    def test_rule_metadata(self):
        assert RULE.meta.id == "lang.ts_prefer_optional_chain"
        assert RULE.meta.category == "lang"
        assert RULE.meta.tier == 0
        assert RULE.meta.autofix_safety == "suggest-only"
        assert set(RULE.meta.langs) == {"typescript", "javascript"}

    def test_chain_meta(self):
        findings = run_rule("foo && foo.bar.baz;")
        assert findings[0].meta["message_kind"] == "prefer-chaining-operator"
        assert findings[0].meta["pattern"] == "logical_chain"
        assert findings[0].meta["polarity"] == "positive"
        assert findings[0].meta["has_jump"] is True
        assert findings[0].meta["original"] == "foo && foo.bar.baz"

    def test_fallback_meta(self):
        findings = run_rule("x = (foo ?? {}).bar;")
        assert findings[0].meta["operator"] == "??"
        assert findings[0].meta["original"] == "(foo ?? {}).bar"
        assert findings[0].meta["replacement"] == "foo?.bar"

    def test_negated_meta(self):
        findings = run_rule("!foo || !foo.bar;")
        assert findings[0].meta["polarity"] == "negated"
        assert findings[0].meta["has_jump"] is False

    def test_no_tree_yields_nothing(self):
        ctx = create_test_context("foo && foo.bar;")
        ctx.tree = None
        assert list(RULE.visit(ctx)) == []


class TestRuleConfig:
    """Each pass can be switched off."""

    def test_disable_logical_chains(self):
        code = "foo && foo.bar; !foo || !foo.bar; (foo || {}).bar;"
        findings = run_rule(code, config={"check_logical_chains": False})
        assert [f.meta["pattern"] for f in findings] == ["logical_chain", "fallback_object"]
        assert findings[0].meta["polarity"] == "negated"

    def test_disable_negated_chains(self):
        code = "foo && foo.bar; !foo || !foo.bar;"
        findings = run_rule(code, config={"check_negated_chains": False})
        assert len(findings) == 1
        assert findings[0].meta["polarity"] == "positive"

    def test_disable_fallback_pattern(self):
        assert run_rule("(foo || {}).bar;", config={"check_fallback_pattern": False}) == []


class TestRobustness:
    """Unexpected shapes are declined silently."""

    @pytest.mark.parametrize("code", [
        "foo && foo.bar && ;",
        "(foo || {}).;",
        "!foo || !foo. || !foo.bar",
        "foo && foo[",
        "",
    ])
    def test_broken_input_does_not_raise(self, code):
        findings = run_rule(code)
        for finding in findings:
            assert 0 <= finding.start_byte <= finding.end_byte <= len(code.encode('utf-8'))

    def test_javascript_file(self):
        code = "const x = foo && foo.bar;\n"
        findings = run_rule(code, file_path="test.js")
        assert len(findings) == 1
        assert apply_suggestion(code, findings[0]) == "const x = foo?.bar;\n"

    def test_multibyte_source_offsets(self):
        code = "const s = 'héllo'; foo && foo.bar;"
        findings = run_rule(code)
        assert apply_suggestion(code, findings[0]) == "const s = 'héllo'; foo?.bar;"

    def test_long_run(self):
        operands = ["foo"] + ["foo" + ".a" * i for i in range(1, 200)]
        code = " && ".join(operands) + ";"
        findings = run_rule(code)
        assert len(findings) == 1
        assert apply_suggestion(code, findings[0]) == "foo" + "?.a" * 199 + ";"
