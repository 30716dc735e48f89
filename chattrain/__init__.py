# chattrain/__init__.py
"""
chattrain package

Turns an exported chat archive into prompt/reply pairs for fine-tuning:
archive loading, reply-context windowing, config loading, logging and JSON I/O.
"""

__version__ = "0.1.0"

from . import utils

# re-export the common entry points for convenience:
from .assemble import build_dataset, run, write_dataset
from .config_loader import load_config
from .loader import ArchiveParseError, discover_sources, load_archive, load_messages
from .records import Message, Pair, RecordError
from .utils import dump_json, set_logger
from .window import window
