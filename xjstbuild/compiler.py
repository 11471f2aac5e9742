"""xjstbuild Compiler - Hands merged templates to the external XJST compiler."""

from __future__ import annotations

import json
import logging
import os
import subprocess
from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import Any, Callable, TYPE_CHECKING

if TYPE_CHECKING:
    from xjstbuild.scheduler import JobQueue

logger = logging.getLogger(__name__)

# Installs this.require for compiled templates; the bundle injects __xjst_libs__.
SCAFFOLDING = os.linesep.join([
    'this._mode === "", !this.require: applyNext(this.require = function (lib) {',
    '    return __xjst_libs__[lib];',
    '})',
])


@dataclass(frozen=True)
class CompileConfig:
    dev_mode: bool = True
    cache: bool = False
    export_name: str = "BEMHTML"
    apply_func_name: str = "apply"
    include_vow: bool = False
    requires: tuple[str, ...] = field(default_factory=tuple)
    dirname: str = ""

    def compiler_options(self) -> dict[str, Any]:
        """Options understood by the external compiler."""
        return {
            "devMode": self.dev_mode,
            "cache": self.cache,
            "exportName": self.export_name,
            "applyFuncName": self.apply_func_name,
        }

    def bundle_options(self) -> dict[str, Any]:
        """Options understood by the bundler."""
        return {
            "dirname": self.dirname,
            "export_name": self.export_name,
            "include_vow": self.include_vow,
            "requires": list(self.requires),
        }


class CompileError(Exception):
    """Compiler failure without a usable position."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class PositionedCompileError(CompileError):
    """Compiler failure pointing at a line/column of the merged code."""

    def __init__(self, message: str, line: int, column: int):
        self.line = line
        self.column = column
        super().__init__(message)

    def __reduce__(self):
        return type(self), (self.message, self.line, self.column)


class TemplateSyntaxError(CompileError):
    """Compiler failure mapped back to an original template file."""

    def __init__(self, message: str, filename: str, line: int, column: int):
        self.filename = filename
        self.line = line
        self.column = column
        super().__init__(message)

    def __reduce__(self):
        return type(self), (self.message, self.filename, self.line, self.column)


def failure_from_dict(data: dict[str, Any]) -> CompileError:
    """Build a compile failure from a decoded compiler error object."""
    message = str(data.get("message", ""))
    line, column = data.get("line"), data.get("column")
    if not (line and column):
        return CompileError(message)
    try:
        return PositionedCompileError(message, int(line), int(column))
    except (TypeError, ValueError):
        return CompileError(message)


class ExternalCompiler:
    """Runs an external compiler command: code on stdin, options as last argument."""

    def __init__(self, command: list[str]):
        if not command:
            raise ValueError("Compiler command must not be empty")
        self.command = list(command)

    def __call__(self, code: str, options: dict[str, Any]) -> str:
        argv = self.command + [json.dumps(options, sort_keys=True)]
        try:
            proc = subprocess.run(argv, input=code, capture_output=True,
                                  encoding="utf-8", errors="replace")
        except OSError as e:
            raise CompileError(f"Cannot run compiler {self.command[0]}: {e}") from e

        if proc.returncode == 0:
            return proc.stdout
        raise _parse_failure(proc.stderr, proc.returncode)


def _parse_failure(stderr: str, returncode: int) -> CompileError:
    text = stderr.strip()
    try:
        data = json.loads(text)
    except ValueError:
        data = None
    if isinstance(data, dict):
        return failure_from_dict(data)
    return CompileError(text or f"Compiler exited with status {returncode}")


Processor = Callable[[str, dict], str]


class CompileJobClient:
    """Submits one merged unit per call to the shared job queue."""

    def __init__(self, queue: JobQueue, processor: Processor):
        self.queue = queue
        self.processor = processor

    def submit(self, code: str, config: CompileConfig) -> Future:
        """Queue a compile job; the future holds compiled code or a CompileError."""
        payload = code + os.linesep + SCAFFOLDING
        logger.debug("Submitting %d characters of merged templates", len(payload))
        return self.queue.push(self.processor, payload, config.compiler_options())
