"""
Drive the loader and the windower over a whole archive and write the dataset.

Each sequence is loaded, windowed, then dropped before the next one is read;
pairs keep source order, then emission order inside a source.
"""

from __future__ import annotations
import logging, time
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import List, Optional, Tuple

from .config_loader import Config, load_config
from .loader import Layout, discover_sources, iter_sequences
from .records import Pair
from .utils import dump_json
from .window import window

logger = logging.getLogger(__name__)


@dataclass
class BuildStats:
    files: int = 0
    messages: int = 0
    sequences: int = 0
    pairs: int = 0
    seconds: float = 0.0


def build_dataset(
    root,
    target_author: int,
    cfg: Optional[Config] = None,
    log: logging.Logger = logger,
    progress: bool = False,
) -> Tuple[List[Pair], BuildStats]:
    cfg = cfg or load_config(local_path=None, dotenv=False)
    layout = Layout.from_config(cfg)
    max_lines = int(cfg.window.max_lines)
    max_age = timedelta(minutes=float(cfg.window.max_age_minutes))

    stats = BuildStats()
    start = time.perf_counter()
    pairs: List[Pair] = []

    sources = discover_sources(root, layout, log)
    stats.files = len(sources)
    for _, messages in iter_sequences(sources, strict=bool(cfg.archive.strict), log=log, progress=progress):
        stats.sequences += 1
        stats.messages += len(messages)
        pairs.extend(window(messages, target_author, max_lines=max_lines, max_age=max_age))

    stats.pairs = len(pairs)
    stats.seconds = time.perf_counter() - start
    log.info(
        f"Completed all parsing in {stats.seconds:.1f} seconds, have {stats.messages} messages "
        f"from {stats.sequences} channels/threads ({stats.files} files found), "
        f"{stats.pairs} pairs"
    )
    return pairs, stats


def output_path(target_author: int, template: str = "prompt-{author}.json", directory=".") -> Path:
    return Path(directory) / template.format(author=target_author)


def write_dataset(pairs: List[Pair], path, indent: Optional[int] = None) -> Path:
    return dump_json([p.as_dict() for p in pairs], path, indent=indent)


def run(
    root,
    target_author: int,
    cfg: Optional[Config] = None,
    output=None,
    log: logging.Logger = logger,
    progress: bool = False,
) -> Path:
    """Build the whole dataset, then write it. A failed build leaves no output file."""
    cfg = cfg or load_config(local_path=None, dotenv=False)
    pairs, _ = build_dataset(root, target_author, cfg, log=log, progress=progress)
    path = Path(output) if output else output_path(target_author, cfg.output.template)
    write_dataset(pairs, path, indent=cfg.output.indent)
    log.info(f"Wrote {len(pairs)} pairs to {path}")
    return path
