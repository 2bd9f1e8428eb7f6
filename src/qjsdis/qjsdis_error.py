"""Exception classes for the qjsdis bytecode disassembler with detailed context."""

from typing import Optional


class QJSDisError(Exception):
    """Base exception for qjsdis errors with detailed context information."""

    def __init__(
        self,
        message: str,
        offset: Optional[int] = None,
        opcode: Optional[int] = None,
        context: Optional[str] = None
    ):
        """
        Initialize detailed error.

        Args:
            message: Core error description
            offset: Byte offset in the instruction buffer where the error occurred
            opcode: Opcode byte being decoded when the error occurred
            context: Additional context information
        """
        self.message = message
        self.offset = offset
        self.opcode = opcode
        self.context = context

        super().__init__(self._format_detailed_message())

    def _format_detailed_message(self) -> str:
        """Format the error message with all available details."""
        parts = [f"Error: {self.message}"]

        if self.offset is not None:
            parts.append(f"Offset: {self.offset}")

        if self.opcode is not None:
            parts.append(f"Opcode: {self.opcode:#04x}")

        if self.context:
            parts.append(f"Context: {self.context}")

        return "\n".join(parts)


class QJSDisUsageError(QJSDisError):
    """Command line usage errors."""


class QJSDisConfigError(QJSDisError):
    """Invalid configuration or script engine selection."""


class QJSDisCompileError(QJSDisError):
    """The script engine rejected the source text."""

    def __init__(self, diagnostic: str):
        """
        Initialize compile error.

        The engine diagnostic is kept verbatim so it can be surfaced unchanged.

        Args:
            diagnostic: Diagnostic text produced by the script engine
        """
        self.diagnostic = diagnostic
        super().__init__(diagnostic)

    def _format_detailed_message(self) -> str:
        return self.diagnostic


class QJSDisDecodeError(QJSDisError):
    """Errors found while decoding an instruction stream."""


class QJSDisInvalidOpcodeError(QJSDisDecodeError):
    """An opcode byte has no entry in the opcode table."""


class QJSDisTruncatedInstructionError(QJSDisDecodeError):
    """An instruction needs more bytes than remain in the buffer."""


class QJSDisConstantPoolError(QJSDisDecodeError):
    """A closure instruction refers to a missing or non-function constant pool entry."""


class QJSDisNestingError(QJSDisDecodeError):
    """Closure nesting is too deep or loops back through the constant pool."""
