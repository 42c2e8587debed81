"""In-memory key binding to action registry."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from obsmacros.core.actions import Action
from obsmacros.core.keys import KeyBinding


class MacroRegistry:
    def __init__(self, macros: Iterable[tuple[KeyBinding, Action]] = ()) -> None:
        self._macros: dict[KeyBinding, Action] = {}
        for binding, action in macros:
            self.insert(binding, action)

    def insert(self, binding: KeyBinding, action: Action) -> None:
        """Bind an action, replacing whatever the binding pointed at before."""
        self._macros[binding] = action

    def remove(self, binding: KeyBinding) -> bool:
        return self._macros.pop(binding, None) is not None

    def lookup(self, binding: KeyBinding) -> Action | None:
        return self._macros.get(binding)

    def list_sorted(self) -> list[tuple[KeyBinding, Action]]:
        return sorted(self._macros.items(), key=lambda item: item[0].sort_key())

    def render(self) -> str:
        if not self._macros:
            return "Registered Macros: None"
        lines = [f"{binding} -> {action.describe()}" for binding, action in self.list_sorted()]
        return "Registered Macros:\n" + "\n".join(lines)

    def __len__(self) -> int:
        return len(self._macros)

    def __contains__(self, binding: object) -> bool:
        return binding in self._macros

    def __iter__(self) -> Iterator[tuple[KeyBinding, Action]]:
        return iter(self.list_sorted())
