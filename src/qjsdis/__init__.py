"""qjsdis - disassembler for QuickJS compiled function bytecode."""

# Main API
from qjsdis.qjsdis_disassembler import Disassembler, DEFAULT_MAX_DEPTH, INDENT_WIDTH
from qjsdis.qjsdis_function import CompiledFunction

# Exceptions
from qjsdis.qjsdis_error import (
    QJSDisError, QJSDisUsageError, QJSDisConfigError, QJSDisCompileError, QJSDisDecodeError,
    QJSDisInvalidOpcodeError, QJSDisTruncatedInstructionError, QJSDisConstantPoolError, QJSDisNestingError
)

# Lower-level components
from qjsdis.qjsdis_opcode_table import (
    ClosureForm, InstructionDescriptor, OpcodeTable, QUICKJS_OPCODE_TABLE
)
from qjsdis.qjsdis_decoder import DecodedInstruction, InstructionDecoder
from qjsdis.qjsdis_engine import ScriptEngine, ImageScriptEngine, load_engine
from qjsdis.qjsdis_image import ImageLoader, load_image
from qjsdis.qjsdis_config import DisassemblerConfig


__version__ = "1.0.0"

__all__ = [
    # Main API
    "Disassembler", "DEFAULT_MAX_DEPTH", "INDENT_WIDTH", "CompiledFunction",

    # Exceptions
    "QJSDisError", "QJSDisUsageError", "QJSDisConfigError", "QJSDisCompileError", "QJSDisDecodeError",
    "QJSDisInvalidOpcodeError", "QJSDisTruncatedInstructionError", "QJSDisConstantPoolError",
    "QJSDisNestingError",

    # Lower-level components
    "ClosureForm", "InstructionDescriptor", "OpcodeTable", "QUICKJS_OPCODE_TABLE",
    "DecodedInstruction", "InstructionDecoder",
    "ScriptEngine", "ImageScriptEngine", "load_engine",
    "ImageLoader", "load_image",
    "DisassemblerConfig",
]
