"""Macro actions that can be bound to a key and invoked against OBS."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Union

from obsmacros.remote.base import RemoteSurface


class ActionType(IntEnum):
    """Stored action tags. Ordinals are persisted and must never be reordered."""

    SWITCH_SCENE = 0
    ENABLE_ITEM = 1
    DISABLE_ITEM = 2
    TOGGLE_INPUT = 3
    MUTE_INPUT = 4
    UNMUTE_INPUT = 5
    TRIGGER_HOTKEY = 6

    @property
    def tag(self) -> str:
        return "".join(part.capitalize() for part in self.name.split("_"))


@dataclass(frozen=True)
class SwitchScene:
    scene_name: str

    async def invoke(self, remote: RemoteSurface) -> None:
        await remote.set_current_program_scene(self.scene_name)

    def describe(self) -> str:
        return f"Switch to Scene: {self.scene_name}"

    def __str__(self) -> str:
        return self.describe()


@dataclass(frozen=True)
class EnableItem:
    scene_name: str
    item_id: int
    item_name: str

    async def invoke(self, remote: RemoteSurface) -> None:
        await remote.set_scene_item_enabled(self.scene_name, self.item_id, True)

    def describe(self) -> str:
        return f"Enable {self.item_name} in {self.scene_name}"

    def __str__(self) -> str:
        return self.describe()


@dataclass(frozen=True)
class DisableItem:
    scene_name: str
    item_id: int
    item_name: str

    async def invoke(self, remote: RemoteSurface) -> None:
        await remote.set_scene_item_enabled(self.scene_name, self.item_id, False)

    def describe(self) -> str:
        return f"Disable {self.item_name} in {self.scene_name}"

    def __str__(self) -> str:
        return self.describe()


@dataclass
class ToggleInputMute:
    """Flip an input's mute flag on every invocation.

    The remote surface only takes an explicit mute state, so the action keeps
    the last state it applied. The state is not stored: a freshly loaded
    toggle always starts unmuted and mutes on its first invocation.
    """

    input_name: str
    muted: bool = field(default=False, compare=False)

    async def invoke(self, remote: RemoteSurface) -> None:
        self.muted = not self.muted
        await remote.set_input_mute(self.input_name, self.muted)

    def describe(self) -> str:
        return f"Toggle {self.input_name}"

    def __str__(self) -> str:
        return self.describe()


@dataclass(frozen=True)
class MuteInput:
    input_name: str

    async def invoke(self, remote: RemoteSurface) -> None:
        await remote.set_input_mute(self.input_name, True)

    def describe(self) -> str:
        return f"Mute {self.input_name}"

    def __str__(self) -> str:
        return self.describe()


@dataclass(frozen=True)
class UnmuteInput:
    input_name: str

    async def invoke(self, remote: RemoteSurface) -> None:
        await remote.set_input_mute(self.input_name, False)

    def describe(self) -> str:
        return f"Unmute {self.input_name}"

    def __str__(self) -> str:
        return self.describe()


@dataclass(frozen=True)
class TriggerHotkey:
    hotkey: str

    async def invoke(self, remote: RemoteSurface) -> None:
        await remote.trigger_hotkey_by_name(self.hotkey)

    def describe(self) -> str:
        return f"Trigger Hotkey: {self.hotkey}"

    def __str__(self) -> str:
        return self.describe()


Action = Union[
    SwitchScene,
    EnableItem,
    DisableItem,
    ToggleInputMute,
    MuteInput,
    UnmuteInput,
    TriggerHotkey,
]


def action_type(action: Action) -> ActionType:
    match action:
        case SwitchScene():
            return ActionType.SWITCH_SCENE
        case EnableItem():
            return ActionType.ENABLE_ITEM
        case DisableItem():
            return ActionType.DISABLE_ITEM
        case ToggleInputMute():
            return ActionType.TOGGLE_INPUT
        case MuteInput():
            return ActionType.MUTE_INPUT
        case UnmuteInput():
            return ActionType.UNMUTE_INPUT
        case TriggerHotkey():
            return ActionType.TRIGGER_HOTKEY
    raise TypeError(f"Not an action: {action!r}")
