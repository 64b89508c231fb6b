import dataclasses

import pytest

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


def test_inst_ids_are_hashable_and_equal_by_index():
    ids = {InstId(1), InstId(1), InstId(2)}
    assert len(ids) == 2
    assert InstId(1) < InstId(2)


def test_negative_inst_id_rejected():
    with pytest.raises(ValueError):
        InstId(-1)


def test_constant_int_bounds():
    assert ConstantInt(2**63 - 1).value == 2**63 - 1
    assert ConstantInt(-(2**63)).value == -(2**63)
    with pytest.raises(ValueError):
        ConstantInt(2**63)
    with pytest.raises(ValueError):
        ConstantInt(-(2**63) - 1)


def test_add_inst_fields_round_trip():
    dest = InstRef(InstId(0))
    lhs = InstRef(InstId(1))
    rhs = ConstantInt(2)
    inst = AddInst(dest, lhs, rhs, MIRType.INT32)
    assert (inst.dest, inst.lhs, inst.rhs, inst.type) == (dest, lhs, rhs, MIRType.INT32)


def test_instructions_are_immutable():
    inst = RetInst(ConstantInt(1))
    with pytest.raises(dataclasses.FrozenInstanceError):
        inst.value = ConstantInt(2)


def _describe(inst):
    match inst:
        case DefineInst(type=ty, value=ConstantInt(value=v)):
            return ("define", ty, v)
        case AssignInst(dest=InstRef(id=target), src=ConstantFloat(value=v)):
            return ("assign", target, v)
        case _:
            return ("other",)