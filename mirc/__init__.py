"""A small mid-level IR (types, instructions, functions, modules) and a generator of textual LLVM IR."""

__version__ = "0.1.0"
__all__ = ["ir", "function", "module", "codegen"]