"""Programmatic access to macro configs and OBS without the interactive console.

`Client` loads and saves a config file, edits its bindings and fires them
against a connected OBS. The types callers need to build bindings and actions
are re-exported here.
"""

from __future__ import annotations

import os

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
)
from obsmacros.core.codec import SerializedAction, decode_action, encode_action
from obsmacros.core.errors import (
    ConfigError,
    ConfigNotFoundError,
    ConfigParseError,
    ConfigSaveError,
    MacroDecodeError,
    MalformedParameterError,
    MissingParameterError,
    ObsMacrosError,
    RemoteCommandError,
    RemoteConnectError,
    RemoteError,
    UnknownActionTagError,
)
from obsmacros.core.keys import Key, KeyBinding, Modifiers, decode_key, encode_key
from obsmacros.core.registry import MacroRegistry
from obsmacros.core.store import Config, ConfigStore, LoadedConfig
from obsmacros.remote.base import ConnectionState, Credentials, RemoteSurface
from obsmacros.remote.obs_websocket import ObsWebSocketClient

__all__ = [
    "ObsMacrosError",
    "ConfigError",
    "ConfigNotFoundError",
    "ConfigParseError",
    "ConfigSaveError",
    "MacroDecodeError",
    "UnknownActionTagError",
    "MissingParameterError",
    "MalformedParameterError",
    "RemoteError",
    "RemoteConnectError",
    "RemoteCommandError",
    "Action",
    "ActionType",
    "SwitchScene",
    "EnableItem",
    "DisableItem",
    "ToggleInputMute",
    "MuteInput",
    "UnmuteInput",
    "TriggerHotkey",
    "SerializedAction",
    "encode_action",
    "decode_action",
    "Key",
    "Modifiers",
    "KeyBinding",
    "encode_key",
    "decode_key",
    "MacroRegistry",
    "Config",
    "ConfigStore",
    "LoadedConfig",
    "ConnectionState",
    "Credentials",
    "RemoteSurface",
    "ObsWebSocketClient",
    "Client",
]


class Client:
    """Public client for driving macros without the interactive console.

    A `Client` owns one config (credentials plus macro registry), the file it
    is persisted to, and the remote session macros are invoked against.
    """

    def __init__(
        self,
        config_path: str | os.PathLike[str] = "config.json",
        *,
        remote: RemoteSurface | None = None,
        request_timeout_s: float = 10.0,
    ) -> None:
        self._store = ConfigStore(config_path)
        self._remote = remote or ObsWebSocketClient(request_timeout_s=request_timeout_s)
        self.config = Config()
        self.skipped = 0

    @property
    def remote(self) -> RemoteSurface:
        return self._remote

    def load(self) -> Config:
        loaded = self._store.load()
        self.config = loaded.config
        self.skipped = loaded.skipped
        return self.config

    def save(self) -> None:
        self._store.save(self.config)

    def bind(self, binding: KeyBinding, action: Action) -> None:
        self.config.macros.insert(binding, action)

    def unbind(self, binding: KeyBinding) -> bool:
        return self.config.macros.remove(binding)

    def macros(self) -> list[tuple[KeyBinding, Action]]:
        return self.config.macros.list_sorted()

    async def connect(self, credentials: Credentials | None = None) -> None:
        if credentials is not None:
            self.config.credentials = credentials
        await self._remote.connect(self.config.credentials)

    async def disconnect(self) -> None:
        await self._remote.disconnect()

    async def trigger(self, binding: KeyBinding) -> Action | None:
        """Invoke the action bound to ``binding``; None when nothing is bound."""
        action = self.config.macros.lookup(binding)
        if action is not None:
            await action.invoke(self._remote)
        return action
