"""Compiled function model as handed over by the host script engine."""

from dataclasses import dataclass, field
from typing import Any, List, Optional


@dataclass
class CompiledFunction:
    """
    Compiled function bytecode.

    This mirrors the parts of the engine's function bytecode object that the
    disassembler reads.  Nested functions live in the constant pool and are
    referenced by index from fclosure/fclosure8 instructions.
    """

    # Instruction buffer
    byte_code: bytes

    # Constant pool (plain values and nested CompiledFunction objects)
    cpool: List[Any] = field(default_factory=list)

    # Debug information
    source: Optional[str] = None  # Source text of the function, if kept by the engine
    line_num: int = 1  # Line number where the function starts
    name: str = "<eval>"  # Name for debugging
    filename: str = ""  # Source file name (if available)

    @property
    def byte_code_len(self) -> int:
        """Length of the instruction buffer in bytes."""
        return len(self.byte_code)

    @property
    def source_len(self) -> int:
        """Length of the source text, 0 if there is none."""
        return len(self.source) if self.source else 0

    def nested_functions(self) -> List['CompiledFunction']:
        """Return the compiled functions held directly in the constant pool."""
        return [value for value in self.cpool if isinstance(value, CompiledFunction)]

    def __repr__(self) -> str:
        """Human-readable representation."""
        return (
            f"CompiledFunction({self.name!r}, line {self.line_num}, "
            f"{self.byte_code_len} bytes, {len(self.cpool)} constants)"
        )
