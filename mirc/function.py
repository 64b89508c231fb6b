"""Functions and basic blocks of the IR."""

from __future__ import annotations

from dataclasses import dataclass, field

from mirc.ir import InstId, Instruction, MIRType


@dataclass(frozen=True)
class BlockId:
    """Position of a block inside its function."""

    index: int


@dataclass
class Block:
    """A named run of consecutive instructions of a function."""

    name: str
    start: InstId
    end: InstId = field(init=False)

    def __post_init__(self) -> None:
        self.end = self.start

    def adjust_range(self, inst: InstId) -> None:
        """Extend the block so that it reaches past ``inst``."""
        if inst.index > self.end.index:
            self.end = InstId(inst.index + 1)

    @property
    def range(self) -> range:
        """Indices of the instructions that belong to the block."""
        return range(self.start.index, self.end.index)

    def instructions(self, func: Function) -> list[Instruction]:
        """The instructions of ``func`` that the block covers."""
        if self.end.index > len(func.instructions):
            raise IndexError(
                f"block {self.name!r} ends at {self.end.index} but the function "
                f"has {len(func.instructions)} instructions"
            )
        return func.instructions[self.start.index : self.end.index]


@dataclass(frozen=True)
class FuncId:
    """Position of a function inside its module."""

    index: int


@dataclass
class Function:
    """A function: its instructions and the blocks that group them."""

    name: str
    ret_type: MIRType
    instructions: list[Instruction] = field(default_factory=list)
    blocks: list[Block] = field(default_factory=list)

    def add_instruction(self, instruction: Instruction) -> InstId:
        """Append an instruction and return its id."""
        self.instructions.append(instruction)
        return InstId(len(self.instructions) - 1)

    def add_block(self, block: Block) -> BlockId:
        """Append a block and return its id."""
        self.blocks.append(block)
        return BlockId(len(self.blocks) - 1)

    def last_block(self) -> BlockId | None:
        """Id of the most recently added block, if any."""
        return BlockId(len(self.blocks) - 1) if self.blocks else None

    def block(self, block_id: BlockId) -> Block | None:
        """The block with the given id, or None if there is none."""
        if 0 <= block_id.index < len(self.blocks):
            return self.blocks[block_id.index]
        return None