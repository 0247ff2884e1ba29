"""Tests for the scanning reference locator."""

from __future__ import annotations

from bundleprune.treeshake import ScanningLocator, Span


def test_locate_class_reference_skips_strings_comments_and_members() -> None:
    text = "var a = Foo; // Foo\nvar b = 'Foo'; FooBar; x.Foo; /* Foo */ use(Foo);"
    locator = ScanningLocator()

    spans = locator.locate_class_reference(text, "Foo")

    assert [span.start for span in spans] == [text.index("Foo"), text.rindex("Foo")]
    assert all(span.text(text) == "Foo" for span in spans)


def test_locate_class_reference_honours_region() -> None:
    text = "Foo; { Foo }"
    region = Span(text.index("{"), len(text))

    spans = ScanningLocator().locate_class_reference(text, "Foo", within=region)

    assert spans == [Span(7, 10)]
    assert 7 in region
    assert 0 not in region


def test_locate_static_factory_es5_assignment() -> None:
    text = "IonicModule.forRoot = function (a, b) { return { providers: [A] }; };"

    body = ScanningLocator().locate_static_factory(text, "IonicModule", "forRoot")

    assert body is not None
    assert body.text(text) == "{ return { providers: [A] }; }"


def test_locate_static_factory_es2015_class() -> None:
    text = (
        "class IonicModule {\n"
        "  static forRoot(config = {}) {\n"
        "    return { providers: [A, B] };\n"
        "  }\n"
        "}\n"
    )

    body = ScanningLocator().locate_static_factory(text, "IonicModule", "forRoot")

    assert body is not None
    assert body.text(text).startswith("{\n    return")
    assert body.text(text).endswith("}")


def test_locate_static_factory_ignores_commented_assignment() -> None:
    text = "// IonicModule.forRoot = function () { x };\nvar y = 1;"

    assert ScanningLocator().locate_static_factory(text, "IonicModule", "forRoot") is None


def test_locate_array_property_and_split_elements() -> None:
    text = "{ ngModule: M, providers: [ A, fn(b, c), 'x,y', { provide: T } ] }"
    locator = ScanningLocator()

    providers = locator.locate_array_property(text, "providers", within=Span(0, len(text)))
    assert providers is not None
    elements = locator.split_elements(text, providers)

    assert [element.text(text) for element in elements] == [
        "A",
        "fn(b, c)",
        "'x,y'",
        "{ provide: T }",
    ]


def test_find_matching_skips_brackets_in_literals() -> None:
    text = "f(')', /* ) */ g(1))"
    locator = ScanningLocator()

    assert locator.find_matching(text, 1) == len(text) - 1


def test_is_code() -> None:
    text = "a; 'b'; // c\nd"
    locator = ScanningLocator()

    assert locator.is_code(text, 0) is True
    assert locator.is_code(text, text.index("b")) is False
    assert locator.is_code(text, text.index("c")) is False
    assert locator.is_code(text, text.index("d")) is True


def test_regex_literals_are_not_code() -> None:
    text = "var TICK_RE = /[`]/g;\nvar x = Foo;"
    locator = ScanningLocator()

    assert locator.is_code(text, text.index("`")) is False
    assert locator.is_code(text, text.index("x")) is True
    assert [span.text(text) for span in locator.locate_class_reference(text, "Foo")] == ["Foo"]


def test_division_is_not_a_regex_literal() -> None:
    text = "var a = b / c; var d = e / Foo;"

    spans = ScanningLocator().locate_class_reference(text, "Foo")

    assert spans == [Span(text.index("Foo"), len(text) - 1)]


def test_locate_class_block_es5_wrapper_with_static_members() -> None:
    text = (
        "var A = 1;\n"
        "var Foo = /*#__PURE__*/(function () {\n"
        "    function Foo() {}\n"
        "    return Foo;\n"
        "}());\n"
        "Foo.decorators = [\n"
        "    { type: Injectable },\n"
        "];\n"
        "/** @nocollapse */\n"
        "Foo.ctorParameters = function () { return []; };\n"
        "var Bar = 2;\n"
    )

    block = ScanningLocator().locate_class_block(text, "Foo")

    assert block is not None
    assert text[: block.start] + text[block.end :] == "var A = 1;\nvar Bar = 2;\n"


def test_locate_class_block_es2015_declaration() -> None:
    text = (
        "export class Foo extends Base {\n"
        "  m() { return '}'; }\n"
        "}\n"
        "Foo.ctorParameters = () => [];\n"
        "class Bar {}\n"
    )

    block = ScanningLocator().locate_class_block(text, "Foo")

    assert block is not None
    assert text[: block.start] + text[block.end :] == "class Bar {}\n"


def test_locate_class_block_returns_none_when_absent() -> None:
    text = "var FooBar = (function () { return FooBar; }());"

    assert ScanningLocator().locate_class_block(text, "Foo") is None
