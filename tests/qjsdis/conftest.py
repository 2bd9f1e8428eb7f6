"""Shared fixtures and utilities for qjsdis tests."""

import pytest
from typing import Any, List

from qjsdis import CompiledFunction, Disassembler, OpcodeTable, QUICKJS_OPCODE_TABLE


@pytest.fixture
def disassembler():
    """Create a disassembler with default options."""
    return Disassembler()


@pytest.fixture
def stripping_disassembler():
    """Create a disassembler that leaves out source annotations."""
    return Disassembler(strip=True)


@pytest.fixture
def small_table():
    """A two opcode table: op0 has no operands, op1 has one operand byte."""
    return OpcodeTable([
        ('op0', 1, 'none'),
        ('op1', 2, 'u8'),
    ])


class QJSDisTestHelpers:
    """Helper utilities for qjsdis testing."""

    @staticmethod
    def op(mnemonic: str) -> int:
        """Return the QuickJS opcode byte for a mnemonic."""
        return QUICKJS_OPCODE_TABLE.find(mnemonic).opcode

    @staticmethod
    def assemble(*instructions: Any) -> bytes:
        """
        Build an instruction buffer.

        Each argument is either a mnemonic or a (mnemonic, operand_bytes) tuple.
        """
        buffer = bytearray()
        for instr in instructions:
            if isinstance(instr, str):
                buffer.append(QJSDisTestHelpers.op(instr))
                continue

            mnemonic, operands = instr
            buffer.append(QJSDisTestHelpers.op(mnemonic))
            buffer.extend(operands)

        return bytes(buffer)

    @staticmethod
    def make_function(*instructions: Any, cpool: List[Any] | None = None, **kwargs: Any) -> CompiledFunction:
        """Build a compiled function from assembled instructions."""
        return CompiledFunction(
            byte_code=QJSDisTestHelpers.assemble(*instructions),
            cpool=cpool if cpool is not None else [],
            **kwargs
        )

    @staticmethod
    def make_closure_chain(depth: int) -> CompiledFunction:
        """Build a function tree where each level creates a closure for the next one."""
        function = QJSDisTestHelpers.make_function('return_undef', name=f"level{depth}")
        for level in range(depth - 1, -1, -1):
            function = QJSDisTestHelpers.make_function(
                ('fclosure8', [0]), 'drop', 'return_undef',
                cpool=[function],
                name=f"level{level}"
            )

        return function


@pytest.fixture
def helpers():
    """Provide test helper utilities."""
    return QJSDisTestHelpers
