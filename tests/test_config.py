"""Tests for ps3dec_config: defaults, tolerant loading, clamping and save/load."""
import json

import pytest

from ps3dec_config import (
    Configuration, load_config, save_config, clamp_thread_count, step_thread_count,
    config_from_dict,
    MIN_THREADS, MAX_THREADS,
)


def test_missing_file_gives_defaults(tmp_path):
    cfg = load_config(tmp_path / "nope.json")
    assert cfg == Configuration()
    assert cfg.thread_count == 1
    assert cfg.auto is False
    assert cfg.iso_path == "" and cfg.ps3dec_path == ""


@pytest.mark.parametrize("payload", ["{not json", "[1, 2, 3]", "null", ""])
def test_malformed_file_gives_defaults(tmp_path, payload):
    path = tmp_path / "ps3dec_gui.json"
    path.write_text(payload)
    assert load_config(path) == Configuration()


def test_save_then_load_round_trip(tmp_path):
    path = tmp_path / "ps3dec_gui.json"
    cfg = Configuration(
        iso_path="/games/disc.iso",
        decryption_key="00112233445566778899aabbccddeeff",
        thread_count=8,
        auto=True,
        ps3dec_path="/opt/ps3dec/ps3dec",
    )
    save_config(cfg, path)
    assert load_config(path) == cfg


def test_saved_file_uses_expected_keys(tmp_path):
    path = tmp_path / "ps3dec_gui.json"
    save_config(Configuration(iso_path="a.iso"), path)
    data = json.loads(path.read_text())
    assert set(data) == {"iso_path", "decryption_key", "thread_count", "auto", "ps3dec_path"}


def test_save_failure_is_swallowed(tmp_path):
    # a directory cannot be opened for writing
    save_config(Configuration(), tmp_path)


def test_partial_and_mistyped_fields_fall_back_per_field():
    cfg = config_from_dict({"iso_path": 5, "auto": "yes", "thread_count": 9999, "ps3dec_path": "x"})
    assert cfg.iso_path == ""
    assert cfg.auto is False
    assert cfg.thread_count == MAX_THREADS
    assert cfg.ps3dec_path == "x"


@pytest.mark.parametrize(
    "value, expected",
    [
        (0, MIN_THREADS),
        (-5, MIN_THREADS),
        (1, 1),
        (256, 256),
        (257, MAX_THREADS),
        (10**9, MAX_THREADS),
        ("12", 12),
        (" 300 ", MAX_THREADS),
        ("abc", MIN_THREADS),
        ("", MIN_THREADS),
        (None, MIN_THREADS),
        (True, MIN_THREADS),
        (3.9, 3),
        (float("inf"), MIN_THREADS),
    ],
)
def test_clamp_thread_count(value, expected):
    assert clamp_thread_count(value) == expected


@pytest.mark.parametrize(
    "typed, delta, expected",
    [
        ("50", 1, 51),
        ("50", -1, 49),
        ("256", 1, MAX_THREADS),
        ("1", -1, MIN_THREADS),
        ("999", -1, 255),
        ("junk", 1, 2),
    ],
)
def test_step_uses_the_typed_value(typed, delta, expected):
    assert step_thread_count(typed, delta) == expected
