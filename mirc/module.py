"""The IR module: a named collection of functions."""

from __future__ import annotations

from dataclasses import dataclass, field

from mirc.function import FuncId, Function


@dataclass
class Module:
    """A named list of functions."""

    name: str
    functions: list[Function] = field(default_factory=list)

    def add_function(self, function: Function) -> FuncId:
        """Append a function and return its id."""
        self.functions.append(function)
        return FuncId(len(self.functions) - 1)

    def function(self, func_id: FuncId) -> Function | None:
        """The function with the given id, or None if there is none."""
        if 0 <= func_id.index < len(self.functions):
            return self.functions[func_id.index]
        return None