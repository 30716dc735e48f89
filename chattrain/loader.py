"""
Archive discovery and parsing.

Expected layout (one directory per channel, thread directories nested):

    <root>/
      <channel>/
        channel_messages.json
        threads/
          <thread>/
            thread_messages.json

Every channel and every thread becomes its own time-sorted sequence; threads
are never merged into their parent channel.
"""

from __future__ import annotations
import json, logging, time
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Tuple

from tqdm import tqdm

from .records import Message, RecordError
from .utils import elapsed_ms

logger = logging.getLogger(__name__)

CHANNEL = "channel"
THREAD = "thread"


class ArchiveParseError(ValueError):
    """A messages file could not be read as an array of well-formed messages."""

    def __init__(self, path: Path, reason: str, index: Optional[int] = None):
        self.path = Path(path)
        self.index = index
        where = f"{self.path}" if index is None else f"{self.path} (message #{index})"
        super().__init__(f"Failed to parse {where}: {reason}")


@dataclass(frozen=True)
class Layout:
    channel_file: str = "channel_messages.json"
    threads_dir: str = "threads"
    thread_file: str = "thread_messages.json"

    @classmethod
    def from_config(cls, cfg) -> "Layout":
        archive = getattr(cfg, "archive", None)
        if archive is None:
            return cls()
        return cls(
            channel_file=getattr(archive, "channel_file", cls.channel_file),
            threads_dir=getattr(archive, "threads_dir", cls.threads_dir),
            thread_file=getattr(archive, "thread_file", cls.thread_file),
        )


@dataclass(frozen=True)
class Source:
    path: Path
    kind: str
    name: str


def _subdirs(path: Path) -> List[Path]:
    return sorted((p for p in path.iterdir() if p.is_dir()), key=lambda p: p.name)


def discover_sources(root, layout: Layout = Layout(), log: logging.Logger = logger) -> List[Source]:
    """All channel files first, then all thread files, in directory-name order."""
    root = Path(root)
    channel_dirs = _subdirs(root)
    channels: List[Source] = []
    threads: List[Source] = []

    for channel_dir in channel_dirs:
        messages_path = channel_dir / layout.channel_file
        if messages_path.is_file():
            channels.append(Source(messages_path, CHANNEL, channel_dir.name))
        else:
            log.warning(f"Found no {layout.channel_file} in {channel_dir}, skipping..")

        threads_dir = channel_dir / layout.threads_dir
        if not threads_dir.is_dir():
            log.warning(f"Found no threads in {channel_dir}, skipping..")
            continue
        for thread_dir in _subdirs(threads_dir):
            messages_path = thread_dir / layout.thread_file
            if messages_path.is_file():
                threads.append(Source(messages_path, THREAD, f"{channel_dir.name}/{thread_dir.name}"))
            else:
                log.warning(f"Found no {layout.thread_file} in {thread_dir}, skipping..")

    return channels + threads


def load_messages(path) -> Tuple[Message, ...]:
    """Parse one messages file and return its records sorted by timestamp (stable)."""
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ArchiveParseError(path, f"malformed JSON ({e})") from e
    except UnicodeDecodeError as e:
        raise ArchiveParseError(path, f"not UTF-8 ({e})") from e

    if not isinstance(data, list):
        raise ArchiveParseError(path, f"expected a top-level JSON array, got {type(data).__name__}")

    messages = []
    for index, raw in enumerate(data):
        try:
            messages.append(Message.from_raw(raw))
        except RecordError as e:
            raise ArchiveParseError(path, str(e), index) from e

    messages.sort(key=lambda m: m.timestamp)
    return tuple(messages)


def iter_sequences(
    sources: Iterable[Source],
    strict: bool = True,
    log: logging.Logger = logger,
    progress: bool = False,
) -> Iterator[Tuple[Source, Tuple[Message, ...]]]:
    """
    Load sources one at a time, logging per-file timing.

    strict=True aborts on the first parse error. strict=False logs the error
    and skips that file, which drops its messages from the dataset.
    """
    sources = list(sources)
    total = len(sources)
    for number, source in enumerate(tqdm(sources, desc="parsing", unit="file", disable=not progress)):
        log.info(f"Starting parsing on {source.path} ({number}/{total})")
        start = time.perf_counter()
        try:
            messages = load_messages(source.path)
        except ArchiveParseError as e:
            if strict:
                raise
            log.warning(f"{e}; skipping..")
            continue
        log.info(
            f"Completed parsing on {source.path} ({number}/{total}), "
            f"took {elapsed_ms(start, time.perf_counter())}ms"
        )
        yield source, messages


def load_archive(
    root,
    layout: Layout = Layout(),
    strict: bool = True,
    log: logging.Logger = logger,
) -> List[Tuple[Message, ...]]:
    """Discover and load every sequence up front."""
    sources = discover_sources(root, layout, log)
    return [messages for _, messages in iter_sequences(sources, strict=strict, log=log)]
