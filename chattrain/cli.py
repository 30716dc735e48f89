# chattrain/cli.py
"""
Build a prompt/reply dataset from an exported chat archive.

Usage:
  chattrain /path/to/archive 203210712233820160
  chattrain /path/to/archive 203210712233820160 --output data/pairs.json --set window.max_lines=3
"""
from __future__ import annotations
import argparse, sys
from pathlib import Path

from .assemble import output_path, run
from .config_loader import config_argparser, load_config, parse_set_overrides
from .loader import ArchiveParseError
from .records import RecordError, parse_snowflake
from .utils import set_logger


def parse_args(argv=None):
    p = argparse.ArgumentParser(
        prog="chattrain",
        description="Turn a chat archive into prompt/reply pairs for one author.",
        parents=[config_argparser()],
    )
    p.add_argument("archive_root", help="Directory holding one sub-directory per channel.")
    p.add_argument("author_id", help="Id of the author whose messages become replies.")
    p.add_argument("--output", "-o", default=None, help="Output JSON path (default: prompt-<author_id>.json).")
    p.add_argument("--lenient", action="store_true",
                   help="Skip unparseable files with a warning instead of aborting.")
    p.add_argument("--no-progress", action="store_true", help="Disable the progress bar.")
    args = p.parse_args(argv)

    try:
        args.author_id = parse_snowflake(args.author_id, "author_id")
    except RecordError as e:
        p.error(str(e))
    if not Path(args.archive_root).is_dir():
        p.error(f"archive root {args.archive_root} is not a directory")
    try:
        args.overrides = parse_set_overrides(args.set)
    except ValueError as e:
        p.error(str(e))
    if args.lenient:
        args.overrides.setdefault("archive", {})["strict"] = False
    return args


def check_config(cfg, author_id):
    """Touch every value main() relies on so a bad setting fails before any work starts."""
    try:
        if int(cfg.window.max_lines) < 1:
            raise ValueError(f"window.max_lines must be at least 1, got {cfg.window.max_lines!r}")
        if float(cfg.window.max_age_minutes) < 0:
            raise ValueError(f"window.max_age_minutes must not be negative, got {cfg.window.max_age_minutes!r}")
        output_path(author_id, cfg.output.template)
        log = set_logger(cfg.log.name, cfg.log.level)
    except KeyError as e:
        raise SystemExit(f"[FATAL] bad config: output.template uses unknown field {e}") from e
    except (AttributeError, IndexError, TypeError, ValueError) as e:
        raise SystemExit(f"[FATAL] bad config: {e}") from e
    return log


def main(argv=None):
    args = parse_args(argv)
    cfg = load_config(args.config, args.local, cli_overrides=args.overrides)
    log = check_config(cfg, args.author_id)
    log.debug(f"Using config: {cfg.as_dict()}")
    progress = bool(cfg.log.progress) and not args.no_progress

    try:
        run(args.archive_root, args.author_id, cfg, output=args.output, log=log, progress=progress)
    except ArchiveParseError as e:
        raise SystemExit(f"[FATAL] {e}") from e
    except OSError as e:
        raise SystemExit(f"[FATAL] Could not read archive or write output: {e}") from e
    log.info("Done, see ya!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
