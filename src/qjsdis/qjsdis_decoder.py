"""Linear decoder for QuickJS instruction buffers."""

from dataclasses import dataclass
from typing import Iterator, List

from qjsdis.qjsdis_error import QJSDisInvalidOpcodeError, QJSDisTruncatedInstructionError
from qjsdis.qjsdis_opcode_table import ClosureForm, InstructionDescriptor, OpcodeTable


@dataclass(frozen=True)
class DecodedInstruction:
    """One instruction decoded from an instruction buffer."""
    offset: int
    descriptor: InstructionDescriptor
    operands: bytes

    @property
    def opcode(self) -> int:
        """Opcode byte value."""
        return self.descriptor.opcode

    @property
    def mnemonic(self) -> str:
        """Instruction mnemonic."""
        return self.descriptor.mnemonic

    @property
    def size(self) -> int:
        """Encoded size in bytes, including the opcode byte."""
        return self.descriptor.encoded_size

    @property
    def end_offset(self) -> int:
        """Offset of the next instruction."""
        return self.offset + self.descriptor.encoded_size

    @property
    def closure_index(self) -> int | None:
        """Constant pool index of the nested function for closure instructions, else None."""
        form = self.descriptor.closure_form
        if form is ClosureForm.CONST8:
            return self.operands[0]

        if form is ClosureForm.CONST32:
            return int.from_bytes(self.operands[:4], 'little')

        return None


class InstructionDecoder:
    """
    Decodes an instruction buffer one instruction at a time.

    Every opcode has a fixed encoded size, so decoding is a straight walk over
    the buffer.  An undefined opcode or an instruction running past the end of
    the buffer stops the walk with an exception; nothing is skipped.
    """

    def __init__(self, opcode_table: OpcodeTable) -> None:
        """
        Initialize decoder.

        Args:
            opcode_table: Table used to look up each opcode byte
        """
        self.opcode_table = opcode_table

    def decode(self, byte_code: bytes) -> Iterator[DecodedInstruction]:
        """
        Decode an instruction buffer.

        Args:
            byte_code: Instruction buffer to decode

        Yields:
            Decoded instructions in buffer order

        Raises:
            QJSDisInvalidOpcodeError: If a byte is not a defined opcode
            QJSDisTruncatedInstructionError: If an instruction runs past the end of the buffer
        """
        byte_code_len = len(byte_code)
        pc = 0

        while pc < byte_code_len:
            opcode = byte_code[pc]
            try:
                descriptor = self.opcode_table.lookup(opcode)

            except QJSDisInvalidOpcodeError as e:
                # The table doesn't know where in the buffer it was asked
                raise QJSDisInvalidOpcodeError(e.message, offset=pc, opcode=opcode, context=e.context) from e

            end = pc + descriptor.encoded_size
            if end > byte_code_len:
                raise QJSDisTruncatedInstructionError(
                    f"Instruction '{descriptor.mnemonic}' needs {descriptor.encoded_size} bytes "
                    f"but only {byte_code_len - pc} remain",
                    offset=pc,
                    opcode=opcode,
                    context=f"Instruction buffer is {byte_code_len} bytes"
                )

            yield DecodedInstruction(pc, descriptor, bytes(byte_code[pc + 1:end]))
            pc = end

    def decode_all(self, byte_code: bytes) -> List[DecodedInstruction]:
        """Decode a whole instruction buffer into a list."""
        return list(self.decode(byte_code))
