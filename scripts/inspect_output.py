#!/usr/bin/env python3
from __future__ import annotations

import argparse
from pathlib import Path

from binary_embedder.core.app_config import load as load_app_config
from binary_embedder.core.inspect_report import format_report, inspect_output


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="inspect_output",
        description="List the elements stored in a generated BinaryEmbedder file.",
    )
    parser.add_argument("output", help="Generated file to inspect.")
    parser.add_argument(
        "--encoding",
        default=None,
        help="Encoding to assume when the file has no BOM (default: config).",
    )
    args = parser.parse_args(argv)

    path = Path(args.output)
    encoding = args.encoding or load_app_config().output_encoding
    session_id, rows = inspect_output(path, encoding)
    print(format_report(path=path, session_id=session_id, rows=rows))
    return 0 if rows else 1


if __name__ == "__main__":
    raise SystemExit(main())
