"""Opcode table mapping one-byte opcode values to instruction descriptors."""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, List, Sequence

from qjsdis.qjsdis_error import QJSDisInvalidOpcodeError
from qjsdis.qjsdis_instruction_set import InstructionDefinition, QUICKJS_INSTRUCTION_SET


MAX_OPCODES = 256


class ClosureForm(Enum):
    """How a closure-creation instruction encodes its constant pool index.

    The value is the operand width in bytes.
    """
    NONE = 0
    CONST8 = 1      # Single operand byte is the pool index
    CONST32 = 4     # Four operand bytes, little-endian, are the pool index


# Closure-creation mnemonics and their index encodings
CLOSURE_MNEMONICS: Dict[str, ClosureForm] = {
    'fclosure8': ClosureForm.CONST8,
    'fclosure': ClosureForm.CONST32,
}


@dataclass(frozen=True)
class InstructionDescriptor:
    """Static description of one opcode."""
    opcode: int
    mnemonic: str
    encoded_size: int  # Total bytes including the opcode byte
    operand_format: str = 'none'
    closure_form: ClosureForm = ClosureForm.NONE

    @property
    def operand_count(self) -> int:
        """Number of operand bytes following the opcode byte."""
        return self.encoded_size - 1

    @property
    def is_closure(self) -> bool:
        """True if this instruction creates a closure from a nested function."""
        return self.closure_form is not ClosureForm.NONE

    def __repr__(self) -> str:
        return f"{self.opcode:#04x} ({self.mnemonic}) size={self.encoded_size}"


class OpcodeTable:
    """
    Read-only table of instruction descriptors indexed by opcode byte.

    The table is built once from an instruction definition list, where the
    position of each definition is its opcode value.  Any byte value past the
    end of the list has no descriptor.
    """

    def __init__(self, definitions: Sequence[InstructionDefinition]) -> None:
        """
        Build the table.

        Args:
            definitions: (mnemonic, encoded_size, operand_format) entries in opcode order

        Raises:
            ValueError: If the definitions cannot form a valid one-byte opcode table
        """
        if len(definitions) > MAX_OPCODES:
            raise ValueError(f"Instruction set has {len(definitions)} opcodes, at most {MAX_OPCODES} fit in a byte")

        descriptors: List[InstructionDescriptor] = []
        by_mnemonic: Dict[str, InstructionDescriptor] = {}

        for opcode, (mnemonic, encoded_size, operand_format) in enumerate(definitions):
            if encoded_size < 1:
                raise ValueError(f"Opcode '{mnemonic}' has invalid size {encoded_size}")

            if mnemonic in by_mnemonic:
                raise ValueError(f"Duplicate opcode mnemonic '{mnemonic}'")

            descriptor = InstructionDescriptor(
                opcode=opcode,
                mnemonic=mnemonic,
                encoded_size=encoded_size,
                operand_format=operand_format,
                closure_form=CLOSURE_MNEMONICS.get(mnemonic, ClosureForm.NONE)
            )
            descriptors.append(descriptor)
            by_mnemonic[mnemonic] = descriptor

        self._descriptors = tuple(descriptors)
        self._by_mnemonic = by_mnemonic

    def lookup(self, opcode: int) -> InstructionDescriptor:
        """
        Find the descriptor for an opcode byte.

        Args:
            opcode: Opcode byte value

        Returns:
            The instruction descriptor

        Raises:
            QJSDisInvalidOpcodeError: If no instruction is defined for this value
        """
        if not 0 <= opcode < len(self._descriptors):
            raise QJSDisInvalidOpcodeError(
                f"Invalid opcode {opcode:#04x}",
                opcode=opcode,
                context=f"Opcode table defines {len(self._descriptors)} opcodes"
            )

        return self._descriptors[opcode]

    def find(self, mnemonic: str) -> InstructionDescriptor:
        """Find a descriptor by mnemonic.  Raises KeyError if there is none."""
        return self._by_mnemonic[mnemonic]

    def __len__(self) -> int:
        return len(self._descriptors)

    def __contains__(self, opcode: object) -> bool:
        return isinstance(opcode, int) and 0 <= opcode < len(self._descriptors)

    def __iter__(self) -> Iterator[InstructionDescriptor]:
        return iter(self._descriptors)


# The QuickJS table, built once at import
QUICKJS_OPCODE_TABLE = OpcodeTable(QUICKJS_INSTRUCTION_SET)
