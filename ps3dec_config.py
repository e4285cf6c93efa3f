"""
PS3Dec GUI — persisted settings.

Settings live in a small JSON file next to the application and are rewritten
after every field change. Reading never fails: anything missing or malformed
falls back to the defaults.
"""

import os
import sys
import json
import logging
from dataclasses import dataclass, asdict

log = logging.getLogger(__name__)

MIN_THREADS = 1
MAX_THREADS = 256


def get_app_dir():
    if getattr(sys, 'frozen', False):
        return os.path.dirname(sys.executable)
    return os.path.dirname(os.path.abspath(__file__))


CONFIG_FILE = os.path.join(get_app_dir(), "ps3dec_gui.json")


@dataclass
class Configuration:
    iso_path: str = ""
    decryption_key: str = ""
    thread_count: int = MIN_THREADS
    auto: bool = False
    ps3dec_path: str = ""


def clamp_thread_count(value):
    """Coerce *value* to an int in [MIN_THREADS, MAX_THREADS]; junk becomes MIN_THREADS."""
    if isinstance(value, bool):
        return MIN_THREADS
    try:
        n = int(value)
    except (TypeError, ValueError, OverflowError):
        return MIN_THREADS
    return max(MIN_THREADS, min(MAX_THREADS, n))


def step_thread_count(value, delta):
    """Step from whatever is in the entry right now, not the last committed value."""
    return clamp_thread_count(clamp_thread_count(value) + delta)


def config_from_dict(data):
    cfg = Configuration()
    if not isinstance(data, dict):
        return cfg
    for name in ("iso_path", "decryption_key", "ps3dec_path"):
        value = data.get(name)
        if isinstance(value, str):
            setattr(cfg, name, value)
    if isinstance(data.get("auto"), bool):
        cfg.auto = data["auto"]
    if "thread_count" in data:
        cfg.thread_count = clamp_thread_count(data["thread_count"])
    return cfg


def load_config(path=CONFIG_FILE):
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        return Configuration()
    except (OSError, ValueError) as e:
        log.debug("Ignoring unreadable config %s: %s", path, e)
        return Configuration()
    return config_from_dict(data)


def save_config(cfg, path=CONFIG_FILE):
    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(asdict(cfg), f, indent=2)
    except (OSError, TypeError, ValueError) as e:
        log.debug("Could not save config to %s: %s", path, e)
