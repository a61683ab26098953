#!/usr/bin/env python3
"""
pdf-annots
Extract highlights, underlines, strikeouts, notes and rectangle-marked
image regions from a PDF and print them as one JSON array on stdout.
`serve` exposes the same extraction as MCP tools over stdio.
"""

import json
import logging
import sys
from pathlib import Path

from pdf_annots.core.config import config_from_args, parse_arguments

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger("pdf_annots")


def run_extract(args) -> int:
    from pdf_annots.backends.pdf_document import extract_annotations

    config = config_from_args(args)
    annotations = extract_annotations(Path(args.input), config)
    sys.stdout.write(json.dumps(annotations, ensure_ascii=False, sort_keys=True) + "\n")
    return 0


def run_serve(args) -> int:
    from pdf_annots.core.paths import SearchRoots
    from pdf_annots.tools.mcp_tools import create_server

    directories = list(args.directories or []) + list(args.allowed_dirs or [])
    if not directories:
        print("Error: At least one accessible directory must be specified!", file=sys.stderr)
        print("  python main.py serve ~/Downloads ~/Documents", file=sys.stderr)
        return 1
    roots = SearchRoots(directories, args.max_file_size)
    logger.info("Starting PDF annotations MCP server...")
    create_server(roots).run()
    return 0


def main(argv=None) -> int:
    args = parse_arguments(argv)
    logging.getLogger().setLevel(getattr(logging, args.log_level))
    try:
        if args.command == "serve":
            return run_serve(args)
        return run_extract(args)
    except Exception as e:
        logger.debug("Fatal error", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
