"""Types, values and instructions of the mid-level IR."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Union

_I64_MIN = -(1 << 63)
_I64_MAX = (1 << 63) - 1


class MIRType(enum.Enum):
    """Value types known to the IR."""

    INT32 = enum.auto()


@dataclass(frozen=True, order=True)
class InstId:
    """Position of an instruction inside its function."""

    index: int

    def __post_init__(self) -> None:
        if self.index < 0:
            raise ValueError(f"instruction index must be non-negative, got {self.index}")


@dataclass(frozen=True)
class InstRef:
    """A value produced by an earlier instruction."""

    inst: InstId


@dataclass(frozen=True)
class ConstantInt:
    """A 64-bit signed integer literal."""

    value: int

    def __post_init__(self) -> None:
        if not _I64_MIN <= self.value <= _I64_MAX:
            raise ValueError(f"integer constant {self.value} does not fit in 64 bits")


@dataclass(frozen=True)
class ConstantFloat:
    """A double-precision floating point literal."""

    value: float


Value = Union[InstRef, ConstantInt, ConstantFloat]


@dataclass(frozen=True)
class DefineInst:
    """Define a new variable of ``type`` initialised with ``value``."""

    type: MIRType
    value: Value


@dataclass(frozen=True)
class AssignInst:
    """Store ``src`` into the variable ``dest``."""

    dest: Value
    src: Value


@dataclass(frozen=True)
class AddInst:
    """Store ``lhs + rhs`` into the variable ``dest``."""

    dest: Value
    lhs: Value
    rhs: Value
    type: MIRType


@dataclass(frozen=True)
class RetInst:
    """Return ``value`` from the current function."""

    value: Value


Instruction = Union[DefineInst, AssignInst, AddInst, RetInst]