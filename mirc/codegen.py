"""Lowering of IR modules to textual LLVM IR."""

from __future__ import annotations

import argparse
import math
import re
import struct
import sys
from dataclasses import dataclass, field

from mirc.function import Block, Function
from mirc.ir import (
    AddInst,
    AssignInst,
    ConstantFloat,
    ConstantInt,
    DefineInst,
    InstId,
    Instruction,
    InstRef,
    MIRType,
    RetInst,
    Value,
)
from mirc.module import Module

_LLVM_TYPES = {MIRType.INT32: "i32"}
_ALIGN = {"i32": 4, "i64": 8, "double": 8, "ptr": 8}
_PLAIN_NAME = re.compile(r"[-a-zA-Z$._][-a-zA-Z$._0-9]*")


class CodegenError(Exception):
    """Raised when a module cannot be lowered or fails verification."""


def _llvm_type(ty: MIRType) -> str:
    return _LLVM_TYPES[ty]


def _ident(name: str) -> str:
    if _PLAIN_NAME.fullmatch(name):
        return name
    escaped = "".join(
        ch if ch.isprintable() and ch not in '"\\' else f"\\{ord(ch):02X}" for ch in name
    )
    return f'"{escaped}"'


def _wrap(value: int, bits: int) -> int:
    value &= (1 << bits) - 1
    return value - (1 << bits) if value >> (bits - 1) else value


def _format_double(value: float) -> str:
    if math.isfinite(value):
        text = f"{value:e}"
        if float(text) == value:
            return text
    (bits,) = struct.unpack("<Q", struct.pack("<d", value))
    return f"0x{bits:016X}"


@dataclass
class _Namer:
    separator: str = ""
    taken: set[str] = field(default_factory=set)
    last_unique: int = 0

    def unique(self, base: str) -> str:
        if base not in self.taken:
            self.taken.add(base)
            return base
        while True:
            self.last_unique += 1
            candidate = f"{base}{self.separator}{self.last_unique}"
            if candidate not in self.taken:
                self.taken.add(candidate)
                return candidate


@dataclass(frozen=True)
class _LLValue:
    type: str
    text: str
    constant: int | None = None


@dataclass
class _LLInst:
    text: str
    ret_type: str | None = None

    @property
    def terminator(self) -> bool:
        return self.ret_type is not None


@dataclass
class _LLBlock:
    name: str
    insts: list[_LLInst] = field(default_factory=list)


@dataclass
class _LLFunction:
    name: str
    ret_type: str
    blocks: list[_LLBlock] = field(default_factory=list)
    names: _Namer = field(default_factory=_Namer)


class Codegen:
    """Builds an LLVM IR module from IR functions."""

    def __init__(self, module_name: str = "main") -> None:
        self.module_name = module_name
        self._functions: list[_LLFunction] = []
        self._globals = _Namer(separator=".")
        self._named: dict[InstId, _LLValue] = {}

    def compile(self, module: Module) -> None:
        """Lower every function of ``module``."""
        for function in module.functions:
            self.compile_function(function)

    def compile_function(self, function: Function) -> None:
        """Lower one function and all of its blocks."""
        llfunc = _LLFunction(
            self._globals.unique(function.name), _llvm_type(function.ret_type)
        )
        self._functions.append(llfunc)
        self._named = {}
        for block in function.blocks:
            self._compile_block(block, function, llfunc)

    def verify(self) -> None:
        """Check the built module; raise CodegenError describing every problem."""
        errors = []
        for func in self._functions:
            for block in func.blocks:
                if not block.insts or not block.insts[-1].terminator:
                    errors.append(
                        f"Basic Block in function '{func.name}' does not have terminator!"
                    )
                if any(inst.terminator for inst in block.insts[:-1]):
                    errors.append("Terminator found in the middle of a basic block!")
                if any(
                    inst.terminator and inst.ret_type != func.ret_type
                    for inst in block.insts
                ):
                    errors.append(
                        "Function return type does not match operand type of return inst!"
                    )
        if errors:
            raise CodegenError("\n".join(errors))

    def emit(self) -> str:
        """Textual form of the built module."""
        lines = [
            f"; ModuleID = '{self.module_name}'",
            f'source_filename = "{self.module_name}"',
        ]
        for func in self._functions:
            lines.append("")
            signature = f"{func.ret_type} @{_ident(func.name)}()"
            if not func.blocks:
                lines.append(f"declare {signature}")
                continue
            lines.append(f"define {signature} {{")
            for position, block in enumerate(func.blocks):
                if position:
                    lines.append("")
                lines.append(f"{_ident(block.name)}:")
                lines.extend(f"  {inst.text}" for inst in block.insts)
            lines.append("}")
        return "\n".join(lines) + "\n"

    def _compile_block(self, block: Block, function: Function, llfunc: _LLFunction) -> None:
        llblock = _LLBlock(llfunc.names.unique(block.name or "bb"))
        llfunc.blocks.append(llblock)
        for index, inst in zip(block.range, block.instructions(function)):
            self._compile_instruction(InstId(index), inst, llfunc, llblock)

    def _compile_instruction(
        self, inst_id: InstId, inst: Instruction, func: _LLFunction, block: _LLBlock
    ) -> None:
        match inst:
            case DefineInst(type=ty, value=value):
                llty = _llvm_type(ty)
                slot = self._emit(func, block, "temp", f"alloca {llty}, align {_ALIGN[llty]}", "ptr")
                self._store(block, slot, self._value(value))
                self._named[inst_id] = slot
            case AssignInst(dest=dest, src=src):
                ptr = self._as_pointer(self._value(dest))
                self._store(block, ptr, self._value(src))
            case AddInst(dest=dest, lhs=lhs, rhs=rhs, type=ty):
                if not isinstance(dest, InstRef):
                    raise CodegenError("add destination must be an instruction")
                dest_ptr = self._as_pointer(self._lookup(dest.inst))
                llty = _llvm_type(ty)
                lhs_val = self._operand(lhs, llty, "lhs_load", func, block)
                rhs_val = self._operand(rhs, llty, "rhs_load", func, block)
                total = self._add(lhs_val, rhs_val, func, block)
                self._store(block, dest_ptr, total)
                self._named[inst_id] = total
            case RetInst(value=value):
                result = self._value(value)
                block.insts.append(
                    _LLInst(f"ret {result.type} {result.text}", ret_type=result.type)
                )
            case _:
                raise CodegenError(f"unknown instruction {inst!r}")

    def _emit(self, func: _LLFunction, block: _LLBlock, base: str, body: str, ty: str) -> _LLValue:
        name = f"%{_ident(func.names.unique(base))}"
        block.insts.append(_LLInst(f"{name} = {body}"))
        return _LLValue(ty, name)

    def _store(self, block: _LLBlock, ptr: _LLValue, value: _LLValue) -> None:
        block.insts.append(
            _LLInst(
                f"store {value.type} {value.text}, ptr {ptr.text}, align {_ALIGN[value.type]}"
            )
        )

    def _lookup(self, inst_id: InstId) -> _LLValue:
        try:
            return self._named[inst_id]
        except KeyError:
            raise CodegenError(f"instruction {inst_id.index} has no value") from None

    @staticmethod
    def _as_pointer(value: _LLValue) -> _LLValue:
        if value.type != "ptr":
            raise CodegenError(f"expected a pointer value, found {value.type}")
        return value

    def _value(self, value: Value) -> _LLValue:
        match value:
            case InstRef(inst=inst_id):
                return self._lookup(inst_id)
            case ConstantInt(value=literal):
                folded = _wrap(literal, 64)
                return _LLValue("i64", str(folded), folded)
            case ConstantFloat(value=literal):
                return _LLValue("double", _format_double(literal))
        raise CodegenError(f"unknown value {value!r}")

    def _operand(
        self, value: Value, llty: str, base: str, func: _LLFunction, block: _LLBlock
    ) -> _LLValue:
        match value:
            case InstRef(inst=inst_id):
                ptr = self._as_pointer(self._lookup(inst_id))
                return self._emit(
                    func, block, base, f"load {llty}, ptr {ptr.text}, align {_ALIGN[llty]}", llty
                )
            case ConstantInt(value=literal):
                folded = _wrap(literal, 32)
                return _LLValue("i32", str(folded), folded)
        raise CodegenError(f"unsupported add operand {value!r}")

    def _add(
        self, lhs: _LLValue, rhs: _LLValue, func: _LLFunction, block: _LLBlock
    ) -> _LLValue:
        if lhs.constant is not None and rhs.constant is not None:
            folded = _wrap(lhs.constant + rhs.constant, 32)
            return _LLValue("i32", str(folded), folded)
        return self._emit(func, block, "add", f"add i32 {lhs.text}, {rhs.text}", "i32")


def compile_module(module: Module) -> str:
    """Lower and verify ``module``, returning its textual LLVM IR."""
    codegen = Codegen()
    codegen.compile(module)
    codegen.verify()
    return codegen.emit()


def build_example_module() -> Module:
    """A small module whose ``main`` defines two variables, adds and returns."""
    module = Module("main")
    main_id = module.add_function(Function("main", MIRType.INT32))
    function = module.function(main_id)
    entry = function.block(function.add_block(Block("entry", InstId(0))))

    def add(inst: Instruction) -> InstId:
        inst_id = function.add_instruction(inst)
        entry.adjust_range(inst_id)
        return inst_id

    first = add(DefineInst(MIRType.INT32, ConstantInt(69)))
    second = add(DefineInst(MIRType.INT32, InstRef(first)))
    total = add(AddInst(InstRef(first), InstRef(second), ConstantInt(2), MIRType.INT32))
    add(RetInst(InstRef(total)))
    return module


def main(argv: list[str] | None = None) -> int:
    """Build the example module, print it, and write its LLVM IR to stderr."""
    parser = argparse.ArgumentParser(
        prog="mirc", description="Lower the example IR module to LLVM IR."
    )
    parser.parse_args(argv)
    module = build_example_module()
    print(module)
    sys.stderr.write(compile_module(module))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())