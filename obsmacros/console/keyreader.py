"""Blocking key capture for the interactive console."""

from __future__ import annotations

from typing import Any, Protocol

from obsmacros.core.keys import Key, KeyBinding, Modifiers

_SPECIAL_KEYS: dict[str, Key] = {
    "esc": Key.ESCAPE,
    "enter": Key.ENTER,
    "tab": Key.TAB,
    "space": Key.SPACEBAR,
    "backspace": Key.BACKSPACE,
    "delete": Key.DELETE,
    "insert": Key.INSERT,
    "home": Key.HOME,
    "end": Key.END,
    "page_up": Key.PAGE_UP,
    "page_down": Key.PAGE_DOWN,
    "up": Key.UP_ARROW,
    "down": Key.DOWN_ARROW,
    "left": Key.LEFT_ARROW,
    "right": Key.RIGHT_ARROW,
    "pause": Key.PAUSE,
    "print_screen": Key.PRINT_SCREEN,
    "menu": Key.APPLICATIONS,
    "cmd": Key.LEFT_WINDOWS,
    "cmd_l": Key.LEFT_WINDOWS,
    "cmd_r": Key.RIGHT_WINDOWS,
    "media_volume_mute": Key.VOLUME_MUTE,
    "media_volume_down": Key.VOLUME_DOWN,
    "media_volume_up": Key.VOLUME_UP,
    "media_next": Key.MEDIA_NEXT,
    "media_previous": Key.MEDIA_PREVIOUS,
    "media_play_pause": Key.MEDIA_PLAY,
} | {f"f{n}": Key[f"F{n}"] for n in range(1, 25)}

_MODIFIER_KEYS: dict[str, Modifiers] = {
    "shift": Modifiers.SHIFT,
    "shift_l": Modifiers.SHIFT,
    "shift_r": Modifiers.SHIFT,
    "ctrl": Modifiers.CONTROL,
    "ctrl_l": Modifiers.CONTROL,
    "ctrl_r": Modifiers.CONTROL,
    "alt": Modifiers.ALT,
    "alt_l": Modifiers.ALT,
    "alt_r": Modifiers.ALT,
    "alt_gr": Modifiers.ALT,
}

# US layout: shifted digit row symbols map back to their digit key.
_SHIFTED_DIGITS = {sym: Key[f"D{d}"] for sym, d in zip(")!@#$%^&*(", range(10))}

_PUNCTUATION: dict[str, Key] = {
    ";": Key.OEM1,
    ":": Key.OEM1,
    "=": Key.OEM_PLUS,
    "+": Key.OEM_PLUS,
    ",": Key.OEM_COMMA,
    "<": Key.OEM_COMMA,
    "-": Key.OEM_MINUS,
    "_": Key.OEM_MINUS,
    ".": Key.OEM_PERIOD,
    ">": Key.OEM_PERIOD,
    "/": Key.OEM2,
    "?": Key.OEM2,
    "`": Key.OEM3,
    "~": Key.OEM3,
    "[": Key.OEM4,
    "{": Key.OEM4,
    "\\": Key.OEM5,
    "|": Key.OEM5,
    "]": Key.OEM6,
    "}": Key.OEM6,
    "'": Key.OEM7,
    '"': Key.OEM7,
}


class KeyReader(Protocol):
    def read_key(self) -> KeyBinding:
        """Block until a non-modifier key is pressed and return it with held modifiers."""


def modifier_for_name(name: str) -> Modifiers:
    return _MODIFIER_KEYS.get(name, Modifiers.NONE)


def key_for_name(name: str) -> Key | None:
    return _SPECIAL_KEYS.get(name)


def key_for_char(char: str) -> Key | None:
    if len(char) != 1:
        return None
    code = ord(char)
    # Control+letter arrives as the ASCII control character. Named keys such as
    # Tab reach us through key.name, so a bare "\t" here is Ctrl+I.
    if 1 <= code <= 26:
        return Key(ord("A") + code - 1)
    if char.isascii() and char.isalpha():
        return Key(ord(char.upper()))
    if char.isascii() and char.isdigit():
        return Key[f"D{char}"]
    if char == " ":
        return Key.SPACEBAR
    return _SHIFTED_DIGITS.get(char) or _PUNCTUATION.get(char)


class PynputKeyReader:
    """Read key presses through pynput.

    Each read opens a suppressing listener so captured keys never reach the
    terminal; between reads the keyboard is released for regular prompts.
    """

    def __init__(self, *, suppress: bool = True) -> None:
        self._suppress = suppress

    def read_key(self) -> KeyBinding:
        from pynput import keyboard  # type: ignore

        modifiers = Modifiers.NONE
        with keyboard.Events(suppress=self._suppress) as events:
            for event in events:
                key = _resolve(event.key)
                modifier = modifier_for_name(key) if isinstance(key, str) else Modifiers.NONE
                if isinstance(event, keyboard.Events.Release):
                    modifiers &= ~modifier
                    continue
                if modifier:
                    modifiers |= modifier
                    continue
                if isinstance(key, Key):
                    return KeyBinding(key=key, modifiers=modifiers)
        raise RuntimeError("Keyboard listener stopped")


def _resolve(pynput_key: Any) -> Key | str | None:
    """Return a modifier name, a mapped Key, or None for keys we cannot bind."""
    name = getattr(pynput_key, "name", None)
    if isinstance(name, str):
        if name in _MODIFIER_KEYS:
            return name
        return key_for_name(name)
    char = getattr(pynput_key, "char", None)
    if isinstance(char, str):
        return key_for_char(char)
    return None
