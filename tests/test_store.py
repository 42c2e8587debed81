from __future__ import annotations

import json
import os
import stat
from pathlib import Path

import pytest

from obsmacros.core.actions import EnableItem, MuteInput, SwitchScene, ToggleInputMute
from obsmacros.core.errors import ConfigNotFoundError, ConfigParseError, ConfigSaveError
from obsmacros.core.keys import Key, KeyBinding, Modifiers
from obsmacros.core.store import Config, ConfigStore
from obsmacros.remote.base import Credentials


def _write(path: Path, doc) -> None:
    path.write_text(doc if isinstance(doc, str) else json.dumps(doc), encoding="utf-8")


def test_missing_file_is_not_found(tmp_path: Path) -> None:
    with pytest.raises(ConfigNotFoundError):
        ConfigStore(tmp_path / "missing.json").load()


def test_malformed_json_is_parse_error(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    _write(path, "{not json")
    with pytest.raises(ConfigParseError):
        ConfigStore(path).load()


@pytest.mark.parametrize(
    "doc",
    [
        [],
        {"credentials": {"host": "localhost", "port": "4455", "password": ""}},
        {"credentials": "localhost"},
        {"macros": 5},
    ],
)
def test_wrong_shape_is_parse_error(tmp_path: Path, doc) -> None:
    path = tmp_path / "config.json"
    _write(path, doc)
    with pytest.raises(ConfigParseError):
        ConfigStore(path).load()


def test_bad_macro_is_dropped_and_rest_loads(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    _write(
        path,
        {
            "credentials": {"host": "10.0.0.5", "port": 4455, "password": "pw"},
            "macros": {
                "112": {"type": "SwitchScene", "parameters": {"SceneName": "Live"}},
                "113": {"type": "Teleport", "parameters": {"Where": "Mars"}},
            },
        },
    )

    loaded = ConfigStore(path).load()

    assert len(loaded.config.macros) == 1
    assert loaded.skipped == 1
    assert loaded.config.macros.lookup(KeyBinding(Key.F1)) == SwitchScene("Live")
    assert loaded.config.credentials == Credentials(host="10.0.0.5", port=4455, password="pw")


def test_legacy_pascal_case_file_loads(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    _write(
        path,
        {
            "Credentials": {"Host": "obs.local", "Port": 4456, "Password": "secret"},
            "Macros": [
                {
                    "KeyChar": "\u0000",
                    "Key": 113,
                    "Modifiers": 2,
                    "Action": {"Type": 1, "Parameters": {"SceneName": "Live", "ItemID": "3", "ItemName": "Cam"}},
                }
            ],
        },
    )

    loaded = ConfigStore(path).load()

    assert loaded.config.credentials == Credentials(host="obs.local", port=4456, password="secret")
    assert loaded.config.macros.lookup(KeyBinding(Key.F2, Modifiers.SHIFT)) == EnableItem("Live", 3, "Cam")


def test_missing_sections_use_defaults(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    _write(path, {})
    loaded = ConfigStore(path).load()
    assert loaded.config.credentials == Credentials(host="localhost", port=4455, password="")
    assert len(loaded.config.macros) == 0


def test_save_then_reload_in_fresh_store(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    config = Config(credentials=Credentials(host="obs.local", port=4455, password="pw"))
    config.macros.insert(KeyBinding(Key.F1), SwitchScene("Live"))

    ConfigStore(path).save(config)
    loaded = ConfigStore(path).load()

    assert loaded.config.macros.lookup(KeyBinding(Key.F1)).describe() == "Switch to Scene: Live"
    assert loaded.config.credentials == config.credentials


def test_saved_file_layout(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    config = Config()
    config.macros.insert(KeyBinding(Key.F2, Modifiers.SHIFT), ToggleInputMute("Mic"))

    ConfigStore(path).save(config)

    assert json.loads(path.read_text(encoding="utf-8")) == {
        "credentials": {"host": "localhost", "port": 4455, "password": ""},
        "macros": {"625": {"type": "ToggleInput", "parameters": {"InputName": "Mic"}}},
    }
    assert [p.name for p in tmp_path.iterdir()] == ["config.json"]


def test_failed_save_leaves_previous_file_untouched(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = tmp_path / "config.json"
    store = ConfigStore(path)
    original = Config()
    original.macros.insert(KeyBinding(Key.F1), SwitchScene("Live"))
    store.save(original)
    before = path.read_text(encoding="utf-8")

    def broken_replace(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(os, "replace", broken_replace)
    changed = Config()
    changed.macros.insert(KeyBinding(Key.F3), SwitchScene("Intro"))

    with pytest.raises(ConfigSaveError):
        store.save(changed)

    assert path.read_text(encoding="utf-8") == before
    assert [p.name for p in tmp_path.iterdir()] == ["config.json"]


def test_non_ascii_digit_tag_drops_only_that_macro(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    _write(
        path,
        {
            "macros": {
                "112": {"type": "SwitchScene", "parameters": {"SceneName": "Live"}},
                "113": {"type": "²", "parameters": {"SceneName": "Intro"}},
            },
        },
    )

    loaded = ConfigStore(path).load()

    assert loaded.config.macros.list_sorted() == [(KeyBinding(Key.F1), SwitchScene("Live"))]
    assert loaded.skipped == 1


@pytest.mark.parametrize(
    "bad",
    [
        {"KeyChar": "", "Key": "NotAKey", "Modifiers": 0, "Action": {"Type": 0, "Parameters": {"SceneName": "X"}}},
        {"KeyChar": "", "Key": 114, "Modifiers": "Hyper", "Action": {"Type": 0, "Parameters": {"SceneName": "X"}}},
        {"KeyChar": "", "Key": 114, "Modifiers": None, "Action": {"Type": 0, "Parameters": {"SceneName": "X"}}},
    ],
)
def test_list_layout_with_bad_key_keeps_good_entries(tmp_path: Path, bad) -> None:
    path = tmp_path / "config.json"
    good = [
        {"KeyChar": "", "Key": 112, "Modifiers": 0, "Action": {"Type": 0, "Parameters": {"SceneName": "Live"}}},
        {"KeyChar": "", "Key": 113, "Modifiers": 4, "Action": {"Type": 4, "Parameters": {"InputName": "Mic"}}},
    ]
    _write(path, {"Macros": [good[0], bad, good[1]]})

    loaded = ConfigStore(path).load()

    assert loaded.config.macros.list_sorted() == [
        (KeyBinding(Key.F1), SwitchScene("Live")),
        (KeyBinding(Key.F2, Modifiers.CONTROL), MuteInput("Mic")),
    ]
    assert loaded.skipped == 1


def test_unencodable_text_is_a_save_error(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    _write(path, {"macros": {"112": {"type": "SwitchScene", "parameters": {"SceneName": "\ud800"}}}})
    store = ConfigStore(path)
    before = path.read_text(encoding="utf-8")
    loaded = store.load()

    with pytest.raises(ConfigSaveError):
        store.save(loaded.config)

    assert path.read_text(encoding="utf-8") == before
    assert [p.name for p in tmp_path.iterdir()] == ["config.json"]


def test_failed_write_removes_temp_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = tmp_path / "config.json"

    def broken_fsync(fd):
        raise OSError("I/O error")

    monkeypatch.setattr(os, "fsync", broken_fsync)

    with pytest.raises(ConfigSaveError):
        ConfigStore(path).save(Config())

    assert list(tmp_path.iterdir()) == []


@pytest.mark.skipif(os.name != "posix", reason="POSIX file modes")
def test_save_keeps_existing_file_mode(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    store = ConfigStore(path)
    store.save(Config())
    os.chmod(path, 0o644)

    store.save(Config())

    assert stat.S_IMODE(os.stat(path).st_mode) == 0o644
