from __future__ import annotations

import pytest

from obsmacros.core.actions import (
    ActionType,
    DisableItem,
    EnableItem,
    MuteInput,
    SwitchScene,
    ToggleInputMute,
    TriggerHotkey,
    UnmuteInput,
)
from obsmacros.core.codec import (
    SerializedAction,
    decode_action,
    decode_macros,
    encode_action,
    encode_macros,
)
from obsmacros.core.errors import (
    MacroDecodeError,
    MalformedParameterError,
    MissingParameterError,
    UnknownActionTagError,
)
from obsmacros.core.keys import Key, KeyBinding, Modifiers


@pytest.mark.parametrize(
    "action",
    [
        SwitchScene("Live"),
        EnableItem("Live", 12, "Camera"),
        DisableItem("Intro", 0, "Logo"),
        MuteInput("Mic/Aux"),
        UnmuteInput("Desktop Audio"),
        TriggerHotkey("OBSBasic.StartStreaming"),
    ],
)
def test_round_trip(action) -> None:
    decoded = decode_action(SerializedAction.from_json(encode_action(action).to_json()))
    assert decoded == action
    assert type(decoded) is type(action)


def test_toggle_round_trip_restarts_in_default_state() -> None:
    toggle = ToggleInputMute("Mic")
    toggle.muted = True

    decoded = decode_action(encode_action(toggle))

    assert isinstance(decoded, ToggleInputMute)
    assert decoded.input_name == "Mic"
    assert decoded.muted is False


def test_encoded_shape_matches_stored_format() -> None:
    assert encode_action(EnableItem("Live", 12, "Camera")).to_json() == {
        "type": "EnableItem",
        "parameters": {"SceneName": "Live", "ItemID": "12", "ItemName": "Camera"},
    }


def test_ordinal_tag_and_lowercase_fields_accepted() -> None:
    serialized = SerializedAction.from_json({"Type": 3, "Parameters": {"InputName": "Mic"}})
    assert serialized.type is ActionType.TOGGLE_INPUT
    assert decode_action(serialized) == ToggleInputMute("Mic")


def test_integer_item_id_accepted() -> None:
    serialized = SerializedAction.from_json(
        {"type": "DisableItem", "parameters": {"SceneName": "Live", "ItemID": 4, "ItemName": "Cam"}}
    )
    assert decode_action(serialized) == DisableItem("Live", 4, "Cam")


@pytest.mark.parametrize("tag", ["Explode", 7, -1, True, None, "²", "٣", ["SwitchScene"], 0.0])
def test_unknown_tag(tag) -> None:
    with pytest.raises(UnknownActionTagError):
        SerializedAction.from_json({"type": tag, "parameters": {}})


def test_missing_parameter_names_the_parameter() -> None:
    with pytest.raises(MissingParameterError) as exc:
        decode_action(SerializedAction(ActionType.ENABLE_ITEM, {"SceneName": "Live", "ItemID": "3"}))
    assert exc.value.name == "ItemName"


@pytest.mark.parametrize("item_id", ["three", "3.5", True, None, [3]])
def test_malformed_item_id(item_id) -> None:
    with pytest.raises(MalformedParameterError) as exc:
        decode_action(
            SerializedAction(
                ActionType.ENABLE_ITEM, {"SceneName": "Live", "ItemID": item_id, "ItemName": "Cam"}
            )
        )
    assert exc.value.name == "ItemID"


def test_non_object_action_is_a_decode_error() -> None:
    with pytest.raises(MacroDecodeError):
        SerializedAction.from_json("SwitchScene")


def test_encode_macros_uses_packed_keys() -> None:
    doc = encode_macros([(KeyBinding(Key.F2, Modifiers.SHIFT), MuteInput("Mic"))])
    assert doc == {"625": {"type": "MuteInput", "parameters": {"InputName": "Mic"}}}


def test_decode_macros_reads_legacy_list_layout() -> None:
    decoded = decode_macros(
        [
            {
                "KeyChar": "\u0000",
                "Key": 112,
                "Modifiers": 0,
                "Action": {"Type": 0, "Parameters": {"SceneName": "Live"}},
            },
            {
                "KeyChar": "A",
                "Key": 65,
                "Modifiers": 2,
                "Action": {"Type": 6, "Parameters": {"Hotkey": "Clip"}},
            },
        ]
    )
    assert decoded.errors == ()
    assert decoded.macros == [
        (KeyBinding(Key.F1), SwitchScene("Live")),
        (KeyBinding(Key.A, Modifiers.SHIFT), TriggerHotkey("Clip")),
    ]


def test_decode_macros_reads_packed_list_layout() -> None:
    decoded = decode_macros([{"key": 625, "action": {"type": "MuteInput", "parameters": {"InputName": "Mic"}}}])
    assert decoded.macros == [(KeyBinding(Key.F2, Modifiers.SHIFT), MuteInput("Mic"))]


def test_decode_macros_skips_bad_entries() -> None:
    decoded = decode_macros(
        {
            "112": {"type": "SwitchScene", "parameters": {"SceneName": "Live"}},
            "113": {"type": "Teleport", "parameters": {}},
            "F3": {"type": "SwitchScene", "parameters": {"SceneName": "Intro"}},
        }
    )
    assert decoded.macros == [(KeyBinding(Key.F1), SwitchScene("Live"))]
    assert len(decoded.errors) == 2
    assert isinstance(decoded.errors[0], UnknownActionTagError)


def test_decode_macros_rejects_scalar_layout() -> None:
    with pytest.raises(MacroDecodeError):
        decode_macros("nope")


@pytest.mark.parametrize(
    "bad",
    [
        {"KeyChar": "", "Key": "NotAKey", "Modifiers": 0, "Action": {"Type": 0, "Parameters": {"SceneName": "X"}}},
        {"KeyChar": "", "Key": 113, "Modifiers": "Hyper", "Action": {"Type": 0, "Parameters": {"SceneName": "X"}}},
        {"KeyChar": "", "Key": 113, "Modifiers": None, "Action": {"Type": 0, "Parameters": {"SceneName": "X"}}},
        {"Key": {"code": 113}, "Modifiers": 0, "Action": {"Type": 0, "Parameters": {"SceneName": "X"}}},
        {"key": 113.5, "action": {"type": "SwitchScene", "parameters": {"SceneName": "X"}}},
        {"key": -1, "action": {"type": "SwitchScene", "parameters": {"SceneName": "X"}}},
        {"key": 113, "action": {"type": ["SwitchScene"], "parameters": {"SceneName": "X"}}},
        {"key": 113, "action": {"type": "²", "parameters": {"SceneName": "X"}}},
        {"Key": 113, "Modifiers": 0},
        ["not", "an", "entry"],
    ],
)
def test_decode_macros_list_layout_skips_only_the_bad_entry(bad) -> None:
    good = {"KeyChar": "", "Key": 112, "Modifiers": 0, "Action": {"Type": 0, "Parameters": {"SceneName": "Live"}}}

    decoded = decode_macros([good, bad])

    assert decoded.macros == [(KeyBinding(Key.F1), SwitchScene("Live"))]
    assert len(decoded.errors) == 1
    assert isinstance(decoded.errors[0], MacroDecodeError)


@pytest.mark.parametrize("raw_key", ["-1", "1.5", "²", "F3", None, (112,)])
def test_decode_macros_mapping_layout_rejects_junk_keys(raw_key) -> None:
    decoded = decode_macros(
        {
            "112": {"type": "SwitchScene", "parameters": {"SceneName": "Live"}},
            raw_key: {"type": "SwitchScene", "parameters": {"SceneName": "Intro"}},
        }
    )
    assert decoded.macros == [(KeyBinding(Key.F1), SwitchScene("Live"))]
    assert len(decoded.errors) == 1
    assert isinstance(decoded.errors[0], MalformedParameterError)
