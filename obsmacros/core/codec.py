"""Stored representation of actions and key bindings.

Two macro layouts exist in the wild and both are read:

- a list of entries, each either the older ``KeyChar``/``Key``/``Modifiers``
  triple with an ``Action`` object, or ``{"key": <packed int>, "action": ...}``
- a mapping from packed key integer to action object (written by this version)

Action objects are ``{"type": <tag or ordinal>, "parameters": {...}}``. Field
names are matched case-insensitively since older files used PascalCase.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from obsmacros.core.actions import (
    Action,
    ActionType,
    DisableItem,
    EnableItem,
    MuteInput,
    SwitchScene,
    ToggleInputMute,
    TriggerHotkey,
    UnmuteInput,
    action_type,
)
from obsmacros.core.errors import (
    MacroDecodeError,
    MalformedParameterError,
    MissingParameterError,
    UnknownActionTagError,
)
from obsmacros.core.keys import KeyBinding, decode_key, decode_legacy_key, encode_key

SCENE_NAME = "SceneName"
ITEM_ID = "ItemID"
ITEM_NAME = "ItemName"
INPUT_NAME = "InputName"
HOTKEY = "Hotkey"

_TAGS = {t.tag.lower(): t for t in ActionType} | {t.name.lower(): t for t in ActionType}
LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class SerializedAction:
    type: ActionType
    parameters: dict[str, Any] = field(default_factory=dict)

    def to_json(self) -> dict[str, Any]:
        return {"type": self.type.tag, "parameters": dict(self.parameters)}

    @classmethod
    def from_json(cls, obj: Any) -> SerializedAction:
        if not isinstance(obj, Mapping):
            raise MacroDecodeError(f"Action must be an object, got {type(obj).__name__}")
        if not _has_field(obj, "type"):
            raise MissingParameterError("type")
        params = _field(obj, "parameters", {})
        if params is None:
            params = {}
        if not isinstance(params, Mapping):
            raise MalformedParameterError("parameters", params)
        return cls(type=parse_tag(_field(obj, "type")), parameters=dict(params))


@dataclass(frozen=True)
class DecodedMacros:
    macros: list[tuple[KeyBinding, Action]]
    errors: tuple[MacroDecodeError, ...]


def parse_tag(value: Any) -> ActionType:
    """Resolve a stored tag given either as a name or an ordinal."""
    if isinstance(value, bool):
        raise UnknownActionTagError(f"Action type {value!r} is unknown")
    if isinstance(value, int):
        try:
            return ActionType(value)
        except ValueError:
            raise UnknownActionTagError(f"Action type {value} is unknown") from None
    if isinstance(value, str):
        text = value.strip()
        if text.isascii() and text.isdigit():
            return parse_tag(int(text))
        tag = _TAGS.get(text.lower())
        if tag is not None:
            return tag
    raise UnknownActionTagError(f"Action type {value!r} is unknown")


def encode_action(action: Action) -> SerializedAction:
    match action:
        case SwitchScene(scene_name=scene):
            params = {SCENE_NAME: scene}
        case EnableItem(scene_name=scene, item_id=item_id, item_name=item_name) | DisableItem(
            scene_name=scene, item_id=item_id, item_name=item_name
        ):
            # ItemID stays a string so readers expecting a string map still load it.
            params = {SCENE_NAME: scene, ITEM_ID: str(item_id), ITEM_NAME: item_name}
        case ToggleInputMute(input_name=name) | MuteInput(input_name=name) | UnmuteInput(input_name=name):
            params = {INPUT_NAME: name}
        case TriggerHotkey(hotkey=hotkey):
            params = {HOTKEY: hotkey}
        case _:
            raise TypeError(f"Not an action: {action!r}")
    return SerializedAction(type=action_type(action), parameters=params)


def decode_action(serialized: SerializedAction) -> Action:
    params = serialized.parameters
    match serialized.type:
        case ActionType.SWITCH_SCENE:
            return SwitchScene(_str_param(params, SCENE_NAME))
        case ActionType.ENABLE_ITEM:
            return EnableItem(
                _str_param(params, SCENE_NAME),
                _int_param(params, ITEM_ID),
                _str_param(params, ITEM_NAME),
            )
        case ActionType.DISABLE_ITEM:
            return DisableItem(
                _str_param(params, SCENE_NAME),
                _int_param(params, ITEM_ID),
                _str_param(params, ITEM_NAME),
            )
        case ActionType.TOGGLE_INPUT:
            return ToggleInputMute(_str_param(params, INPUT_NAME))
        case ActionType.MUTE_INPUT:
            return MuteInput(_str_param(params, INPUT_NAME))
        case ActionType.UNMUTE_INPUT:
            return UnmuteInput(_str_param(params, INPUT_NAME))
        case ActionType.TRIGGER_HOTKEY:
            return TriggerHotkey(_str_param(params, HOTKEY))
    raise UnknownActionTagError(f"Action type {serialized.type!r} is unknown")


def encode_macros(macros: Iterable[tuple[KeyBinding, Action]]) -> dict[str, dict[str, Any]]:
    return {str(encode_key(binding)): encode_action(action).to_json() for binding, action in macros}


def decode_macros(doc: Any) -> DecodedMacros:
    """Decode either macro layout, skipping entries that fail to decode."""
    if doc is None:
        return DecodedMacros(macros=[], errors=())
    if isinstance(doc, Mapping):
        entries: Iterable[tuple[str, Any]] = ((f"macros.{k}", (k, v)) for k, v in doc.items())
        decode_entry = _decode_mapping_entry
    elif isinstance(doc, list):
        entries = ((f"macros[{i}]", entry) for i, entry in enumerate(doc))
        decode_entry = _decode_list_entry
    else:
        raise MacroDecodeError(f"Macros must be a list or an object, got {type(doc).__name__}")

    macros: list[tuple[KeyBinding, Action]] = []
    errors: list[MacroDecodeError] = []
    for where, entry in entries:
        try:
            macros.append(decode_entry(entry))
        except MacroDecodeError as exc:
            LOGGER.info("Skipping %s: %s", where, exc)
            errors.append(exc)
    return DecodedMacros(macros=macros, errors=tuple(errors))


def _decode_mapping_entry(entry: tuple[str, Any]) -> tuple[KeyBinding, Action]:
    raw_key, raw_action = entry
    try:
        packed = int(raw_key)
    except (TypeError, ValueError):
        raise MalformedParameterError("key", raw_key) from None
    if packed < 0:
        raise MalformedParameterError("key", raw_key)
    return decode_key(packed), decode_action(SerializedAction.from_json(raw_action))


def _decode_list_entry(entry: Any) -> tuple[KeyBinding, Action]:
    if not isinstance(entry, Mapping):
        raise MacroDecodeError(f"Macro entry must be an object, got {type(entry).__name__}")

    if not _has_field(entry, "action"):
        raise MissingParameterError("action")
    action = decode_action(SerializedAction.from_json(_field(entry, "action")))

    packed = _field(entry, "key")
    is_packed = isinstance(packed, int) and not isinstance(packed, bool) and packed >= 0
    if is_packed and not _has_field(entry, "modifiers"):
        return decode_key(packed), action

    if packed is None:
        raise MissingParameterError("key")
    try:
        binding = decode_legacy_key(
            _field(entry, "keychar"),
            packed,
            _field(entry, "modifiers", 0),
        )
    except ValueError:
        raise MalformedParameterError("key", packed) from None
    return binding, action


def _has_field(obj: Mapping[str, Any], name: str) -> bool:
    return any(isinstance(k, str) and k.lower() == name for k in obj)


def _field(obj: Mapping[str, Any], name: str, default: Any = None) -> Any:
    if name in obj:
        return obj[name]
    for k, v in obj.items():
        if isinstance(k, str) and k.lower() == name:
            return v
    return default


def _str_param(params: Mapping[str, Any], name: str) -> str:
    if not _has_field(params, name.lower()):
        raise MissingParameterError(name)
    value = _field(params, name.lower())
    if not isinstance(value, str):
        raise MalformedParameterError(name, value)
    return value


def _int_param(params: Mapping[str, Any], name: str) -> int:
    if not _has_field(params, name.lower()):
        raise MissingParameterError(name)
    value = _field(params, name.lower())
    if isinstance(value, bool):
        raise MalformedParameterError(name, value)
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            raise MalformedParameterError(name, value) from None
    raise MalformedParameterError(name, value)
