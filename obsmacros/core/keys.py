"""Key identities, modifier sets and the compact key-binding codec.

Key codes follow the console virtual-key numbering that historical config
files were written with, so a packed binding stays readable across versions:
the key code sits in the low byte and the modifier bits above it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum, IntFlag

KEY_MASK = 0xFF
MODIFIER_SHIFT = 8


class Key(IntEnum):
    BACKSPACE = 8
    TAB = 9
    CLEAR = 12
    ENTER = 13
    PAUSE = 19
    ESCAPE = 27
    SPACEBAR = 32
    PAGE_UP = 33
    PAGE_DOWN = 34
    END = 35
    HOME = 36
    LEFT_ARROW = 37
    UP_ARROW = 38
    RIGHT_ARROW = 39
    DOWN_ARROW = 40
    SELECT = 41
    PRINT = 42
    EXECUTE = 43
    PRINT_SCREEN = 44
    INSERT = 45
    DELETE = 46
    HELP = 47
    D0 = 48
    D1 = 49
    D2 = 50
    D3 = 51
    D4 = 52
    D5 = 53
    D6 = 54
    D7 = 55
    D8 = 56
    D9 = 57
    A = 65
    B = 66
    C = 67
    D = 68
    E = 69
    F = 70
    G = 71
    H = 72
    I = 73  # noqa: E741
    J = 74
    K = 75
    L = 76
    M = 77
    N = 78
    O = 79  # noqa: E741
    P = 80
    Q = 81
    R = 82
    S = 83
    T = 84
    U = 85
    V = 86
    W = 87
    X = 88
    Y = 89
    Z = 90
    LEFT_WINDOWS = 91
    RIGHT_WINDOWS = 92
    APPLICATIONS = 93
    SLEEP = 95
    NUM_PAD0 = 96
    NUM_PAD1 = 97
    NUM_PAD2 = 98
    NUM_PAD3 = 99
    NUM_PAD4 = 100
    NUM_PAD5 = 101
    NUM_PAD6 = 102
    NUM_PAD7 = 103
    NUM_PAD8 = 104
    NUM_PAD9 = 105
    MULTIPLY = 106
    ADD = 107
    SEPARATOR = 108
    SUBTRACT = 109
    DECIMAL = 110
    DIVIDE = 111
    F1 = 112
    F2 = 113
    F3 = 114
    F4 = 115
    F5 = 116
    F6 = 117
    F7 = 118
    F8 = 119
    F9 = 120
    F10 = 121
    F11 = 122
    F12 = 123
    F13 = 124
    F14 = 125
    F15 = 126
    F16 = 127
    F17 = 128
    F18 = 129
    F19 = 130
    F20 = 131
    F21 = 132
    F22 = 133
    F23 = 134
    F24 = 135
    VOLUME_MUTE = 173
    VOLUME_DOWN = 174
    VOLUME_UP = 175
    MEDIA_NEXT = 176
    MEDIA_PREVIOUS = 177
    MEDIA_STOP = 178
    MEDIA_PLAY = 179
    OEM1 = 186
    OEM_PLUS = 187
    OEM_COMMA = 188
    OEM_MINUS = 189
    OEM_PERIOD = 190
    OEM2 = 191
    OEM3 = 192
    OEM4 = 219
    OEM5 = 220
    OEM6 = 221
    OEM7 = 222
    OEM8 = 223
    OEM102 = 226

    @property
    def display_name(self) -> str:
        return "".join(part.capitalize() for part in self.name.split("_"))


class Modifiers(IntFlag):
    NONE = 0
    ALT = 1
    SHIFT = 2
    CONTROL = 4


ALL_MODIFIERS = Modifiers.ALT | Modifiers.SHIFT | Modifiers.CONTROL

# Rendering order matches what earlier releases printed.
_MODIFIER_LABELS = (
    (Modifiers.ALT, "ALT"),
    (Modifiers.SHIFT, "SHIFT"),
    (Modifiers.CONTROL, "CTRL"),
)

_KEYS_BY_NAME = {key.display_name.lower(): key for key in Key} | {key.name.lower(): key for key in Key}
_MODIFIERS_BY_NAME = {
    "alt": Modifiers.ALT,
    "shift": Modifiers.SHIFT,
    "control": Modifiers.CONTROL,
    "ctrl": Modifiers.CONTROL,
    "none": Modifiers.NONE,
}


def key_name(code: int) -> str:
    try:
        return Key(code).display_name
    except ValueError:
        return f"Key{code}"


def parse_key(value: int | str) -> int:
    """Resolve a key code from an ordinal or a key name such as ``F5`` or ``PageUp``."""
    if isinstance(value, bool):
        raise ValueError(f"Invalid key {value!r}")
    if isinstance(value, int):
        if not 0 <= value <= KEY_MASK:
            raise ValueError(f"Key code {value} out of range")
        return value
    if isinstance(value, str):
        text = value.strip()
        if text.isascii() and text.isdigit():
            return parse_key(int(text))
        key = _KEYS_BY_NAME.get(text.lower())
        if key is not None:
            return int(key)
    raise ValueError(f"Unknown key {value!r}")


def parse_modifiers(value: int | str) -> Modifiers:
    """Resolve a modifier set from a bit field or a flag string like ``"Shift, Control"``."""
    if isinstance(value, bool):
        raise ValueError(f"Invalid modifiers {value!r}")
    if isinstance(value, int):
        if value & ~int(ALL_MODIFIERS):
            raise ValueError(f"Unknown modifier bits in {value}")
        return Modifiers(value)
    if isinstance(value, str):
        text = value.strip()
        if text.isascii() and text.isdigit():
            return parse_modifiers(int(text))
        result = Modifiers.NONE
        for part in text.replace("+", ",").split(","):
            part = part.strip().lower()
            if not part:
                continue
            flag = _MODIFIERS_BY_NAME.get(part)
            if flag is None:
                raise ValueError(f"Unknown modifier {part!r}")
            result |= flag
        return result
    raise ValueError(f"Invalid modifiers {value!r}")


@dataclass(frozen=True)
class KeyBinding:
    key: int
    modifiers: Modifiers = Modifiers.NONE

    def __post_init__(self) -> None:
        object.__setattr__(self, "key", int(self.key))
        object.__setattr__(self, "modifiers", Modifiers(int(self.modifiers) & int(ALL_MODIFIERS)))

    def sort_key(self) -> tuple[int, int]:
        return self.key, int(self.modifiers)

    def __str__(self) -> str:
        labels = "".join(f"+{label}" for flag, label in _MODIFIER_LABELS if self.modifiers & flag)
        return f"{key_name(self.key)}{labels}"


def encode_key(binding: KeyBinding) -> int:
    return (binding.key & KEY_MASK) | (int(binding.modifiers) << MODIFIER_SHIFT)


def decode_key(value: int) -> KeyBinding:
    return KeyBinding(
        key=value & KEY_MASK,
        modifiers=Modifiers((value >> MODIFIER_SHIFT) & int(ALL_MODIFIERS)),
    )


def decode_legacy_key(key_char: object, key: int | str, modifiers: int | str) -> KeyBinding:
    """Decode the older ``KeyChar``/``Key``/``Modifiers`` triple.

    The typed character only described what the console echoed; identity is
    the key code and modifiers.
    """
    del key_char
    return KeyBinding(key=parse_key(key), modifiers=parse_modifiers(modifiers))
