import pytest

from xjstbuild.bundle import compile_bundle

COMPILED = "exports.apply = function (data) { return data; };"


def test_bundle_wraps_code():
    src = compile_bundle(COMPILED)
    assert src.startswith("var BEMHTML;")
    assert "function buildBEMHTML(__xjst_libs__) {" in src
    assert COMPILED in src
    assert 'module.exports["BEMHTML"] = buildBEMHTML(' in src
    assert 'modules.define("BEMHTML"' in src
    assert 'global["BEMHTML"] = BEMHTML;' in src

def test_custom_export_name():
    src = compile_bundle(COMPILED, export_name="BEMBUSH")
    assert "var BEMBUSH;" in src
    assert 'module.exports["BEMBUSH"]' in src
    assert "BEMHTML" not in src

def test_invalid_export_name():
    with pytest.raises(ValueError):
        compile_bundle(COMPILED, export_name="not valid")

def test_requires_resolved_per_environment():
    src = compile_bundle(COMPILED, requires=["i18n"])
    assert '"i18n": require("i18n")' in src
    assert '"i18n": global["i18n"]' in src
    assert '["i18n", "vow"]' in src

def test_without_vow_resolves_global():
    src = compile_bundle(COMPILED)
    assert '"vow": require("vow")' in src
    assert "__xjst_vow__" not in src

def test_include_vow_inlines_source():
    vow_source = "module.exports = { resolve: function () {} };"
    src = compile_bundle(COMPILED, include_vow=True, vow_source=vow_source, requires=["vow"])
    assert vow_source in src
    assert '"vow": __xjst_vow__' in src
    assert 'require("vow")' not in src
    assert "libs.vow = __xjst_vow__;" in src

def test_include_vow_needs_source():
    with pytest.raises(ValueError):
        compile_bundle(COMPILED, include_vow=True)

def test_dirname_recorded():
    assert "// built from /project/bundles/page" in compile_bundle(COMPILED, dirname="/project/bundles/page")
