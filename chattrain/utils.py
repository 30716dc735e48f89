# chattrain/utils.py
from pathlib import Path
import json, logging, sys

LOG_FORMAT = "[%(asctime)s] %(levelname)s: %(message)s"

def set_logger(name="chattrain", level="INFO"):
    logger = logging.getLogger(name)
    if not logger.handlers:
        h = logging.StreamHandler(sys.stdout)
        fmt = logging.Formatter(LOG_FORMAT)
        h.setFormatter(fmt)
        logger.addHandler(h)
    logger.setLevel(level)
    return logger

def dump_json(obj, path, indent=None):
    """Write obj as UTF-8 JSON, creating parent dirs and truncating any existing file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(obj, f, indent=indent, ensure_ascii=False)
    return path

def elapsed_ms(start: float, end: float) -> int:
    return int((end - start) * 1000)
