"""Remote surface interfaces."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol


class ConnectionState(Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    DISCONNECTING = "disconnecting"


@dataclass(frozen=True)
class Credentials:
    host: str = "localhost"
    port: int = 4455
    password: str = ""


@dataclass(frozen=True)
class SceneItem:
    item_id: int
    source_name: str


@dataclass(frozen=True)
class InputInfo:
    name: str
    kind: str


class RemoteSurface(Protocol):
    @property
    def state(self) -> ConnectionState:
        """Current connection state."""

    async def connect(self, credentials: Credentials) -> None:
        """Connect and authenticate; return only once requests can be issued."""

    async def disconnect(self) -> None:
        """Close the session."""

    async def get_scene_list(self) -> list[str]:
        """Return scene names."""

    async def get_scene_item_list(self, scene_name: str) -> list[SceneItem]:
        """Return the items of one scene."""

    async def get_input_list(self) -> list[InputInfo]:
        """Return all inputs."""

    async def get_hotkey_list(self) -> list[str]:
        """Return hotkey names."""

    async def set_current_program_scene(self, scene_name: str) -> None:
        """Switch the program output to a scene."""

    async def set_scene_item_enabled(self, scene_name: str, item_id: int, enabled: bool) -> None:
        """Show or hide a scene item."""

    async def set_input_mute(self, input_name: str, muted: bool) -> None:
        """Set an input's mute flag."""

    async def trigger_hotkey_by_name(self, hotkey_name: str) -> None:
        """Trigger a named hotkey."""


def filter_audio_inputs(inputs: list[InputInfo]) -> list[InputInfo]:
    """Keep inputs whose kind looks like an audio capture or output device."""
    return [i for i in inputs if "input" in i.kind or "output" in i.kind]
