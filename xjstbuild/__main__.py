"""CLI entry point for xjstbuild. Run with: python -m xjstbuild <file.xjst> ... -o <target>"""
import argparse
import logging
import os
import shlex
import sys

from xjstbuild.builder import XjstBuilder
from xjstbuild.compiler import CompileConfig, CompileError, CompileJobClient, ExternalCompiler
from xjstbuild.scheduler import JobQueue


def main():
    parser = argparse.ArgumentParser(description="xjstbuild - merge and compile XJST templates")
    parser.add_argument("files", nargs="+", help="Template files, in merge order")
    parser.add_argument("-o", "--output", required=True, help="Target bundle path, relative to --root")
    parser.add_argument("--compiler", required=True, help="External XJST compiler command")
    parser.add_argument("--root", default=os.getcwd(), help="Project root (default: cwd)")
    parser.add_argument("--dev-mode", action=argparse.BooleanOptionalAction, default=True,
                        help="Compile templates in development mode (default: on)")
    parser.add_argument("--cache", action="store_true", help="Let the compiler cache internally")
    parser.add_argument("--export-name", default="BEMHTML", help="Exported symbol (default: BEMHTML)")
    parser.add_argument("--apply-func-name", default="apply", help="Apply function name (default: apply)")
    parser.add_argument("--vow-path", help="Path to vow.js to inline into the bundle")
    parser.add_argument("--require", action="append", default=[], dest="requires",
                        metavar="NAME", help="Library to expose to templates (repeatable)")
    parser.add_argument("--jobs", type=int, default=None, help="Compile worker count")
    parser.add_argument("--debug", action="store_true", help="Enable debug output")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    config = CompileConfig(
        dev_mode=args.dev_mode,
        cache=args.cache,
        export_name=args.export_name,
        apply_func_name=args.apply_func_name,
        include_vow=args.vow_path is not None,
        requires=tuple(args.requires),
    )

    try:
        with JobQueue(max_workers=args.jobs) as queue:
            client = CompileJobClient(queue, ExternalCompiler(shlex.split(args.compiler)))
            builder = XjstBuilder(args.root, args.output, client, config, vow_path=args.vow_path)
            builder.build(args.files)
    except FileNotFoundError as e:
        print(f"Error: File not found: {e.filename}", file=sys.stderr)
        sys.exit(1)
    except (CompileError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
