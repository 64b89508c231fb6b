import pytest

from mirc.codegen import Codegen, CodegenError, build_example_module, compile_module, main
from mirc.function import Block, Function
from mirc.ir import (
    AddInst,
    AssignInst,
    ConstantFloat,
    ConstantInt,
    DefineInst,
    InstId,
    InstRef,
    MIRType,
    RetInst,
)
from mirc.module import Module


def _module(*insts, name="f"):
    func = Function(name, MIRType.INT32)
    block = Block("entry", InstId(0))
    func.add_block(block)
    for inst in insts:
        block.adjust_range(func.add_instruction(inst))
    module = Module("m")
    module.add_function(func)
    return module


def _compile(module):
    codegen = Codegen()
    codegen.compile(module)
    return codegen


def test_example_module_verifies():
    ir = compile_module(build_example_module())
    assert "define i32 @main() {" in ir
    assert ir.rstrip().endswith("}")
    assert ir.count("alloca") == 2


def test_example_returns_add_result():
    ir = compile_module(build_example_module())
    ret_lines = [line.strip() for line in ir.splitlines() if line.strip().startswith("ret ")]
    assert ret_lines == ["ret i32 %add"]


def test_returning_i64_constant_fails_verification():
    codegen = _compile(
        _module(DefineInst(MIRType.INT32, ConstantInt(1)), RetInst(ConstantInt(0)))
    )
    with pytest.raises(CodegenError, match="return type"):
        codegen.verify()


def test_block_without_terminator_fails_verification():
    codegen = _compile(
        _module(
            DefineInst(MIRType.INT32, ConstantInt(1)),
            DefineInst(MIRType.INT32, ConstantInt(2)),
        )
    )
    with pytest.raises(CodegenError, match="terminator"):
        codegen.verify()


def test_unknown_instruction_reference_raises():
    module = _module(
        DefineInst(MIRType.INT32, ConstantInt(1)),
        RetInst(InstRef(InstId(7))),
    )
    with pytest.raises(CodegenError):
        _compile(module)


def test_float_add_operand_raises():
    module = _module(
        DefineInst(MIRType.INT32, ConstantInt(1)),
        AddInst(InstRef(InstId(0)), ConstantFloat(1.5), ConstantInt(1), MIRType.INT32),
    )
    with pytest.raises(CodegenError):
        _compile(module)


def test_constant_add_destination_raises():
    module = _module(
        DefineInst(MIRType.INT32, ConstantInt(1)),
        AddInst(ConstantInt(0), ConstantInt(1), ConstantInt(1), MIRType.INT32),
    )
    with pytest.raises(CodegenError):
        _compile(module)


def test_assign_to_non_pointer_raises():
    module = _module(
        DefineInst(MIRType.INT32, ConstantInt(1)),
        AssignInst(ConstantInt(3), ConstantInt(4)),
    )
    with pytest.raises(CodegenError):
        _compile(module)


def test_assign_stores_into_variable():
    module = _module(
        DefineInst(MIRType.INT32, ConstantInt(1)),
        AssignInst(InstRef(InstId(0)), ConstantInt(5)),
        AddInst(InstRef(InstId(0)), InstRef(InstId(0)), ConstantInt(1), MIRType.INT32),
        RetInst(InstRef(InstId(2))),
    )
    ir = compile_module(module)
    assert ir.count("store ") == 3


def test_function_without_blocks_is_declared():
    module = Module("m")
    module.add_function(Function("f", MIRType.INT32))
    ir = compile_module(module)
    assert "declare i32 @f()" in ir
    assert "define" not in ir


def test_duplicate_function_names_are_made_unique():
    module = build_example_module()
    module.functions.extend(build_example_module().functions)
    ir = compile_module(module)
    names = [line.split("@")[1].split("(")[0] for line in ir.splitlines() if line.startswith("define")]
    assert len(names) == 2
    assert len(set(names)) == 2


def test_main_writes_ir_to_stderr(capsys):
    assert main([]) == 0
    captured = capsys.readouterr()
    assert captured.err == compile_module(build_example_module())
    assert "entry" in captured.out