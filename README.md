# mirc

`mirc` is a small mid-level intermediate representation (MIR). It comes with a code generator that lowers the IR to textual LLVM IR.

## The IR

The IR is defined across three modules.

### `mirc.ir`

This module holds types, values and instructions.

* `MIRType` is the type of a value. It has one member, `INT32`.
* `InstId(index)` is the position of an instruction in its function. A negative index raises `ValueError`.
* A value is one of three kinds:
  * `InstRef(inst)` is the result of an earlier instruction.
  * `ConstantInt(value)` is an integer literal. A literal outside the signed 64-bit range raises `ValueError`.
  * `ConstantFloat(value)` is a floating-point literal.
* Instructions are frozen dataclasses:
  * `DefineInst(type, value)` defines a variable and gives it a starting value.
  * `AssignInst(dest, src)` stores `src` into the variable `dest`.
  * `AddInst(dest, lhs, rhs, type)` stores `lhs + rhs` into `dest`.
  * `RetInst(value)` returns `value`.

### `mirc.function`

A `Function(name, ret_type)` has a list of instructions and a list of `Block`s.

* `add_instruction(inst)` appends an instruction and returns its `InstId`.
* `add_block(block)` appends a block and returns its `BlockId`.
* `block(block_id)` returns the block with that id, or `None` if there is none.
* `last_block()` returns the id of the newest block, or `None` if the function has no blocks.

A `Block(name, start)` covers the instructions in the range from `start` up to, but not including, `end`. When a block is created, `end` is set equal to `start`.

* `adjust_range(inst_id)` sets `end` to `inst_id.index + 1`, but only when `inst_id.index` is greater than the current `end`. As a result, a new block starting at 0 does not grow when you pass it instruction 0. It covers instruction 0 only once a later instruction has been added.
* `range` holds the instruction indices that the block covers.
* `instructions(func)` returns those instructions. It raises `IndexError` if the block reaches past the end of the function.

### `mirc.module`

A `Module(name)` holds a list of functions.

* `add_function(func)` appends a function and returns its `FuncId`.
* `function(func_id)` returns the function with that id, or `None` if there is none.

## Building a module

```python
from mirc.function import Block, Function
from mirc.ir import AddInst, ConstantInt, DefineInst, InstId, InstRef, MIRType, RetInst
from mirc.module import Module

module = Module("main")
func = module.function(module.add_function(Function("main", MIRType.INT32)))
entry = func.block(func.add_block(Block("entry", InstId(0))))

def emit(inst):
    inst_id = func.add_instruction(inst)
    entry.adjust_range(inst_id)
    return inst_id

x = emit(DefineInst(MIRType.INT32, ConstantInt(1)))
total = emit(AddInst(InstRef(x), InstRef(x), ConstantInt(2), MIRType.INT32))
emit(RetInst(InstRef(total)))
```

`mirc.codegen.build_example_module()` builds a complete `main` function of this kind. The function does the following:

1. Defines a variable holding 69.
2. Defines a second variable from the first.
3. Adds 2 to the second variable and stores the result in the first.
4. Returns the sum.

## Generating code

```python
from mirc.codegen import Codegen, build_example_module

codegen = Codegen()          # module name defaults to "main"
codegen.compile(build_example_module())
codegen.verify()
print(codegen.emit())
```

`Codegen` has the following methods:

* `compile(module)` lowers every function in the module.
* `compile_function(func)` lowers a single function.
* `verify()` checks that every block ends in exactly one `ret`, and that the type of each `ret` matches the function's return type. If it finds problems, it raises one `CodegenError` that lists all of them.
* `emit()` returns the module as LLVM IR text.

`compile_module(module)` does all of the steps above in one call and returns the text.

Lowering also raises `CodegenError` in these cases:

* a reference to an instruction that has produced no value;
* a non-pointer value used where a variable is expected;
* an `AddInst` whose destination is not an instruction;
* an `AddInst` whose operand is a float constant.

When both operands of an add are integer constants, the sum is worked out ahead of time (constant-folded) at 32 bits.

## Command line

```
mirc
```

This command builds the example module and prints its structure to standard output. It then writes the generated LLVM IR to standard error. It takes no options besides `--help`.

## What it does not do

`mirc` only produces LLVM IR as text. It does not do any of the following:

* parse IR from a file;
* run LLVM's own verifier;
* optimise the code;
* produce object code or executables;
* run the generated code.

Its own `verify()` checks only the rules listed above.

## Tests

```
pip install -e .[test]
pytest
```