"""Tests for decorator stripping."""

from __future__ import annotations

import textwrap

from bundleprune.decorators import PURE_ANNOTATION, purge_decorators
from tests._fixtures.workspace import BUNDLE_JS


def test_static_decorator_fields_and_ctor_parameters_are_removed() -> None:
    output = purge_decorators("index.fesm.js", BUNDLE_JS).to_string()

    assert ".decorators" not in output
    assert "ctorParameters" not in output
    assert "@nocollapse" not in output
    assert "IonicModule.forRoot = function" in output
    assert "export { AlertController, ToastController, AlertCmp, ToastCmp, IonicModule };" in output


def test_class_wrappers_are_marked_pure() -> None:
    output = purge_decorators("index.fesm.js", BUNDLE_JS).to_string()

    assert f"var ToastController = {PURE_ANNOTATION}(function () {{" in output
    assert output.count(PURE_ANNOTATION) == 3


def test_transpiled_decorate_calls_and_arrow_ctor_parameters_are_removed() -> None:
    source = textwrap.dedent(
        """\
        let HomePage = class HomePage {
        };
        HomePage.ctorParameters = () => [
            { type: NavController },
        ];
        HomePage = __decorate([
            Component({ selector: 'page-home', template: '<p>)</p>' })
        ], HomePage);
        export { HomePage };
        """
    )

    output = purge_decorators("home.js", source).to_string()

    assert output == "let HomePage = class HomePage {\n};\nexport { HomePage };\n"


def test_decorator_text_inside_literals_is_kept() -> None:
    source = "var template = `\nFoo.decorators = [1];\n`;\n"

    assert purge_decorators("a.js", source).has_changed() is False


def test_purge_decorators_is_idempotent() -> None:
    once = purge_decorators("index.fesm.js", BUNDLE_JS).to_string()

    assert purge_decorators("index.fesm.js", once).has_changed() is False
