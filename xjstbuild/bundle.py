"""xjstbuild Bundle - Wraps compiled template code into a loadable JS module."""

from __future__ import annotations

import json
import re

_IDENTIFIER = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")


def _libs_object(requires: list[str], resolve: str, include_vow: bool) -> str:
    """JS object literal mapping each library name to its resolved value."""
    entries = []
    if include_vow:
        entries.append('"vow": __xjst_vow__')
    for name in requires:
        if include_vow and name == "vow":
            continue
        entries.append(f"{json.dumps(name)}: {resolve.format(name=json.dumps(name))}")
    return "{" + ", ".join(entries) + "}"


def compile_bundle(code: str, export_name: str = "BEMHTML", include_vow: bool = False,
                   requires: list[str] | tuple[str, ...] = (), dirname: str = "",
                   vow_source: str | None = None) -> str:
    """Wrap compiled templates so they load under CommonJS, YModules or as a global.

    The compiled code is expected to fill `exports` with an apply entry point.
    Library names in `requires` are resolved with require() under CommonJS and
    from the global object otherwise; `dirname` is recorded for the reader.
    """
    if not _IDENTIFIER.match(export_name):
        raise ValueError(f"Invalid export name: {export_name!r}")
    if include_vow and vow_source is None:
        raise ValueError("include_vow requires the vow library source")

    libs = list(requires)
    if not include_vow and "vow" not in libs:
        libs.append("vow")

    name = json.dumps(export_name)
    builder = f"build{export_name}"
    global_libs = _libs_object(
        libs, 'global[{name}] || global[{name}.charAt(0).toUpperCase() + {name}.slice(1)]',
        include_vow,
    )
    commonjs_libs = _libs_object(libs, "require({name})", include_vow)
    ym_libs = [lib for lib in libs if not (include_vow and lib == "vow")]

    parts = [f"var {export_name};", "(function (global) {"]
    if dirname:
        parts.append(f"    // built from {dirname}")
    if include_vow:
        parts.append("var __xjst_vow__ = (function () {")
        parts.append("    var module = { exports: {} }, exports = module.exports;")
        parts.append(vow_source.rstrip())
        parts.append("    return module.exports;")
        parts.append("})();")
    parts.extend([
        f"function {builder}(__xjst_libs__) {{",
        "    var exports = {};",
        code.rstrip(),
        "    return exports;",
        "}",
        "var defineAsGlobal = true;",
        'if (typeof module === "object" && typeof module.exports === "object") {',
        f"    module.exports[{name}] = {builder}({commonjs_libs});",
        "    defineAsGlobal = false;",
        "}",
        'if (typeof modules === "object") {',
        f"    modules.define({name}, {json.dumps(ym_libs)}, function (provide) {{",
        "        var args = Array.prototype.slice.call(arguments, 1), libs = {};",
        f"        {json.dumps(ym_libs)}.forEach(function (lib, i) {{ libs[lib] = args[i]; }});",
    ])
    if include_vow:
        parts.append("        libs.vow = __xjst_vow__;")
    parts.extend([
        f"        provide({builder}(libs));",
        "    });",
        "    defineAsGlobal = false;",
        "}",
        "if (defineAsGlobal) {",
        f"    {export_name} = {builder}({global_libs});",
        f"    global[{name}] = {export_name};",
        "}",
        '})(typeof window !== "undefined" ? window : global);',
    ])
    return "\n".join(parts) + "\n"
