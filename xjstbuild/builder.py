"""xjstbuild Builder - Builds one template bundle target from its source files."""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace

from xjstbuild.bundle import compile_bundle
from xjstbuild.compiler import CompileConfig, CompileError, CompileJobClient
from xjstbuild.source_map import SourceMap, SourceUnit, merge_sources
from xjstbuild.translator import translate_error

logger = logging.getLogger(__name__)


def _read_file(path: str) -> SourceUnit:
    with open(path, "r", encoding="utf-8") as f:
        return SourceUnit(source=f.read(), filename=os.path.abspath(path))


class XjstBuilder:
    """Merges XJST template files, compiles them and writes the bundle."""

    def __init__(self, root: str, target: str, client: CompileJobClient,
                 config: CompileConfig | None = None, vow_path: str | None = None):
        self.root = os.path.abspath(root)
        self.target = os.path.join(self.root, target)
        self.client = client
        self.config = config or CompileConfig()
        self.vow_path = vow_path

    def read_source_files(self, paths: list[str]) -> list[SourceUnit]:
        """Read all files as UTF-8, keeping the given order."""
        if not paths:
            return []
        with ThreadPoolExecutor(max_workers=min(8, len(paths))) as pool:
            return list(pool.map(_read_file, paths))

    def build(self, paths: list[str]) -> str:
        """Build the target from `paths` and return the written bundle."""
        source_map = merge_sources(self.read_source_files(paths))
        compiled = self._compile(source_map)
        bundle = self._bundle(compiled)

        os.makedirs(os.path.dirname(self.target), exist_ok=True)
        with open(self.target, "w", encoding="utf-8") as f:
            f.write(bundle)
        logger.info("Wrote %s", os.path.relpath(self.target, self.root))
        return bundle

    def _compile(self, source_map: SourceMap) -> str:
        logger.info("Compiling %d template file(s) into %s",
                    len(source_map.units), os.path.basename(self.target))
        future = self.client.submit(source_map.get_code(), self.config)
        try:
            return future.result()
        except CompileError as error:
            translated = translate_error(error, source_map, self.root)
            if translated is error:
                raise
            raise translated from error

    def _bundle(self, compiled: str) -> str:
        config = self.config
        if not config.dirname:
            config = replace(config, dirname=os.path.dirname(self.target))

        vow_source = None
        if config.include_vow:
            vow_source = self._read_vow()
        return compile_bundle(compiled, vow_source=vow_source, **config.bundle_options())

    def _read_vow(self) -> str:
        if self.vow_path is None:
            raise CompileError("include_vow is set but no vow library path was given")
        with open(self.vow_path, "r", encoding="utf-8") as f:
            return f.read()
