"""CLI entry-point for BinaryEmbedder-Py."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from binary_embedder import __version__
from binary_embedder.core import app_config
from binary_embedder.core.embedder import TOOL_NAME, EmbedRequest, run
from binary_embedder.core.input_scanner import (
    InputSet,
    load_manifest,
    resolve_inputs,
)
from binary_embedder.core.model import EmbedderError


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="binary-embedder",
        description=(
            "Embed binary files as C++ data arrays, regenerating the output "
            "only when inputs changed."
        ),
    )
    parser.add_argument(
        "patterns",
        nargs="*",
        help="input file paths, or wildcards when --dir is given",
    )
    parser.add_argument("-o", "--output", type=Path, help="generated output file")
    parser.add_argument(
        "-d", "--dir", type=Path, help="directory searched for the wildcards"
    )
    parser.add_argument("-p", "--prefix", help="prefix for the embedded names")
    parser.add_argument(
        "-m",
        "--manifest",
        type=Path,
        action="append",
        default=[],
        help="TOML file with [[input]] tables (repeatable)",
    )
    parser.add_argument(
        "-r", "--recursive", action="store_true", help="search --dir recursively"
    )
    parser.add_argument(
        "-a",
        "--append",
        action="store_true",
        help="keep existing entries that were not found this time",
    )
    parser.add_argument(
        "-c", "--clean", action="store_true", help="ignore the existing output"
    )
    parser.add_argument("-e", "--encoding", help="output text encoding")
    parser.add_argument("-v", "--verbose", action="store_true")
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(message)s",
    )
    cfg = app_config.load()
    output: Path | None = args.output
    append: bool = args.append
    sets: list[InputSet] = []
    try:
        for manifest_path in args.manifest:
            manifest = load_manifest(manifest_path, default_prefix=cfg.name_prefix)
            sets.extend(manifest.sets)
            if output is None:
                output = manifest.output
            append = append or bool(manifest.append)
        prefix = args.prefix if args.prefix is not None else cfg.name_prefix
        sets.extend(InputSet(p, args.dir, prefix) for p in args.patterns)
        if output is None:
            parser.error("an output file is required (-o or a manifest 'output')")
        if not sets:
            parser.error("no input files specified")
        inputs = resolve_inputs(
            sets,
            recursive=args.recursive or cfg.recursive,
            separator=cfg.name_separator,
        )
        result = run(
            EmbedRequest(
                output=output,
                inputs=inputs,
                append=append,
                clean=args.clean,
                encoding=args.encoding or cfg.output_encoding,
            )
        )
    except (EmbedderError, OSError, LookupError, UnicodeError) as exc:
        print(f"{TOOL_NAME}: {exc}", file=sys.stderr)
        return 1
    print(result.summary())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
