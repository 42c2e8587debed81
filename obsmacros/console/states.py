"""Interactive menu flow: macro mode, editing, recording and removing bindings."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TypeVar

from obsmacros.console.io import ConsoleIO
from obsmacros.console.keyreader import KeyReader
from obsmacros.core.actions import (
    Action,
    DisableItem,
    EnableItem,
    MuteInput,
    SwitchScene,
    ToggleInputMute,
    TriggerHotkey,
    UnmuteInput,
)
from obsmacros.core.errors import ConfigSaveError, RemoteCommandError, RemoteConnectError
from obsmacros.core.keys import Key, KeyBinding
from obsmacros.core.store import Config, ConfigStore
from obsmacros.remote.base import Credentials, RemoteSurface, filter_audio_inputs

T = TypeVar("T")
LOGGER = logging.getLogger(__name__)
_NOT_AN_OPTION = object()

MAIN_MENU = """m) Macro Mode
e) Edit Mode
s) Save"""

EDIT_MENU = """n) New Macro
r) Remove Macro"""

ACTION_MENU = """Select Action:
s) Switch Scene
q) Enable Scene Item
w) Disable Scene Item
t) Toggle Input Mute
e) Mute Input
r) Unmute Input
h) Trigger Hotkey"""


@dataclass
class Session:
    """Everything the menus operate on, passed explicitly between states."""

    config: Config
    store: ConfigStore
    remote: RemoteSurface
    keys: KeyReader
    io: ConsoleIO

    async def read_key(self) -> KeyBinding:
        return await asyncio.to_thread(self.keys.read_key)


def prompt_credentials(io: ConsoleIO, current: Credentials | None = None) -> Credentials:
    current = current or Credentials()
    host = io.prompt_text("Host", default=current.host)
    port = io.prompt_int("Port")
    password = io.prompt_text("Password", default="", hide_input=True)
    return Credentials(host=host, port=port, password=password)


async def connect_with_retry(session: Session) -> None:
    """Connect to OBS, re-prompting for credentials until OBS accepts them."""
    while True:
        try:
            await session.remote.connect(session.config.credentials)
            return
        except RemoteConnectError as exc:
            LOGGER.info("Connect failed: %s", exc)
            session.io.echo(f"Couldn't connect to OBS ({exc}). Check host, port and password.")
            session.config.credentials = prompt_credentials(session.io, session.config.credentials)


async def run_menu(session: Session) -> None:
    notice: str | None = None
    while True:
        session.io.clear()
        session.io.echo(MAIN_MENU)
        if notice:
            session.io.echo(notice)
            notice = None

        key = await session.read_key()
        if key.key == Key.ESCAPE:
            return
        if key.key == Key.M:
            await run_macro_mode(session)
        elif key.key == Key.E:
            await run_edit_mode(session)
        elif key.key == Key.S:
            notice = save_config(session)


def save_config(session: Session) -> str:
    try:
        session.store.save(session.config)
    except ConfigSaveError as exc:
        return f"Error: {exc}"
    return f"Saved {len(session.config.macros)} macros to {session.store.path}"


async def run_macro_mode(session: Session) -> None:
    session.io.clear()
    session.io.echo("Macro Mode")
    session.io.echo(session.config.macros.render())

    while True:
        key = await session.read_key()
        if key.key == Key.ESCAPE:
            return
        action = session.config.macros.lookup(key)
        if action is None:
            continue
        try:
            await action.invoke(session.remote)
        except RemoteCommandError as exc:
            session.io.echo(f"Error: {key}: {exc}")


async def run_edit_mode(session: Session) -> None:
    while True:
        session.io.clear()
        session.io.echo(session.config.macros.render())
        session.io.echo(EDIT_MENU)

        key = await session.read_key()
        if key.key == Key.ESCAPE:
            return
        if key.key == Key.N:
            await record_key(session)
        elif key.key == Key.R:
            await remove_key(session)


async def record_key(session: Session) -> None:
    while True:
        session.io.clear()
        session.io.echo("Press key to assign new macro:")

        key = await session.read_key()
        if key.key == Key.ESCAPE:
            return
        session.io.echo(f"Key pressed: {key}")
        if await assign_action(session, key):
            return


async def assign_action(session: Session, trigger: KeyBinding) -> bool:
    """Let the user build an action for ``trigger``; False if nothing was assigned."""
    while True:
        session.io.echo(ACTION_MENU)
        key = await session.read_key()
        if key.key == Key.ESCAPE:
            return False
        try:
            action = await _choose_action(session, key.key)
        except RemoteCommandError as exc:
            session.io.echo(f"Error: {exc}")
            return False
        if action is _NOT_AN_OPTION:
            continue
        if action is None:
            return False
        session.config.macros.insert(trigger, action)
        LOGGER.info("Bound %s to %s", trigger, action.describe())
        return True


async def _choose_action(session: Session, key: int) -> Action | None | object:
    remote = session.remote
    io = session.io
    match key:
        case Key.S:
            scene = await _choose_scene(session)
            return SwitchScene(scene) if scene is not None else None
        case Key.Q | Key.W:
            scene = await _choose_scene(session)
            if scene is None:
                return None
            io.echo("Listing Items...")
            items = await remote.get_scene_item_list(scene)
            item = prompt_for_choice(io, items, lambda i: i.source_name, empty="No items in scene")
            if item is None:
                return None
            cls = EnableItem if key == Key.Q else DisableItem
            return cls(scene, item.item_id, item.source_name)
        case Key.T | Key.E | Key.R:
            io.echo("Listing Inputs...")
            inputs = filter_audio_inputs(await remote.get_input_list())
            chosen = prompt_for_choice(io, inputs, lambda i: i.name, empty="No audio inputs available")
            if chosen is None:
                return None
            if key == Key.T:
                return ToggleInputMute(chosen.name)
            return MuteInput(chosen.name) if key == Key.E else UnmuteInput(chosen.name)
        case Key.H:
            io.echo("Listing Hotkeys...")
            hotkeys = await remote.get_hotkey_list()
            hotkey = prompt_for_choice(io, hotkeys, str, empty="No hotkeys available")
            return TriggerHotkey(hotkey) if hotkey is not None else None
    return _NOT_AN_OPTION


async def _choose_scene(session: Session) -> str | None:
    session.io.echo("Listing Scenes...")
    scenes = await session.remote.get_scene_list()
    return prompt_for_choice(session.io, scenes, str, empty="No scenes available")


def prompt_for_choice(
    io: ConsoleIO,
    values: Sequence[T],
    label: Callable[[T], str],
    *,
    empty: str = "Nothing to choose from",
) -> T | None:
    if not values:
        io.echo(empty)
        return None
    for index, value in enumerate(values):
        io.echo(f"{index})\t{label(value)}")
    while True:
        index = io.prompt_int("Enter index")
        if 0 <= index < len(values):
            return values[index]
        io.echo("Not a valid index!")


async def remove_key(session: Session) -> None:
    while True:
        session.io.clear()
        session.io.echo(session.config.macros.render())
        session.io.echo("Enter key to remove")

        key = await session.read_key()
        if key.key == Key.ESCAPE:
            return
        if session.config.macros.remove(key):
            session.io.echo(f"Removed {key}")
            return
        session.io.echo(f"Key {key} not found")
