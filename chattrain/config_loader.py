from __future__ import annotations
import os, json, argparse
from copy import deepcopy
from pathlib import Path

import yaml
from dotenv import load_dotenv

DEFAULT_PATH = Path(__file__).with_name("default.yaml")
ENV_PREFIX = "CHATTRAIN_"


class Config:
    """Dot access over the merged settings: cfg.window.max_lines."""
    def __init__(self, data: dict):
        self._data = data
        for k, v in data.items():
            setattr(self, k, Config(v) if isinstance(v, dict) else v)

    def as_dict(self) -> dict:
        return deepcopy(self._data)

    def __repr__(self):
        return f"Config({self._data})"


# --- Helpers ---
def _deep_update(dst: dict, src: dict) -> dict:
    # nested mappings merge key by key; anything else replaces
    for k, v in src.items():
        if isinstance(v, dict) and isinstance(dst.get(k), dict):
            _deep_update(dst[k], v)
        else:
            dst[k] = v
    return dst

def _load_yaml(path, required: bool = False) -> dict:
    if not path or not os.path.exists(path):
        if required:
            raise SystemExit(f"Config file {path} does not exist")
        return {}
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise SystemExit(f"Config file {path} must contain a mapping, got {type(data).__name__}")
    return data

def _parse_value(raw: str):
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw

def _set_nested(d: dict, parts: list[str], value) -> None:
    node = d
    for part in parts[:-1]:
        node = node.setdefault(part, {})
    node[parts[-1]] = value

def _env_overrides(prefix: str = ENV_PREFIX) -> dict:
    # CHATTRAIN_WINDOW__MAX_LINES=3 -> {"window": {"max_lines": 3}}
    out = {}
    for k, v in os.environ.items():
        if not k.startswith(prefix):
            continue
        path = [part.lower() for part in k[len(prefix):].split("__")]
        _set_nested(out, path, _parse_value(v))
    return out


# --- Main loader ---
def load_config(
    config_path: str | Path | None = None,
    local_path: str | Path | None = "config/local.yaml",
    cli_overrides: dict | None = None,
    env_prefix: str = ENV_PREFIX,
    dotenv: bool = True,
) -> Config:
    """
    Precedence (lowest -> highest):
      packaged default.yaml < config_path < local.yaml < environment (CHATTRAIN_*) < cli_overrides
    An explicit config_path must exist; a missing local.yaml is ignored.
    Returns a Config object with dot-access.
    """
    if dotenv:
        load_dotenv(override=False)
    cfg = _load_yaml(DEFAULT_PATH, required=True)
    if config_path:
        _deep_update(cfg, _load_yaml(config_path, required=True))
    _deep_update(cfg, _load_yaml(local_path))
    _deep_update(cfg, _env_overrides(env_prefix))
    if cli_overrides:
        _deep_update(cfg, cli_overrides)

    return Config(cfg)


# --- CLI helpers ---
def config_argparser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(add_help=False)
    p.add_argument("--config", default=None, help="YAML config layered over the packaged defaults.")
    p.add_argument("--local", default="config/local.yaml", help="Local YAML overrides (optional).")
    p.add_argument("--set", action="append", default=[], metavar="KEY=JSON",
                   help="Override key=JSON (nested via dots), e.g. window.max_lines=3.")
    return p

def parse_set_overrides(pairs: list[str]) -> dict:
    out = {}
    for pair in pairs:
        if "=" not in pair:
            raise ValueError(f"--set must be key=VALUE, got: {pair}")
        k, v = pair.split("=", 1)
        _set_nested(out, k.split("."), _parse_value(v))
    return out
