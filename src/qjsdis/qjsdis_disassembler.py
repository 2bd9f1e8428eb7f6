"""
Recursive disassembler for QuickJS compiled functions.

The listing has one line per instruction: the opcode byte, the mnemonic in
parentheses and then each operand byte, all in 0x-prefixed two digit hex.
Closure-creation instructions (fclosure8 and fclosure) are followed directly
by the listing of the nested function they refer to, indented one level
deeper.  Unless stripped, each function's listing starts with its source text.

Lines never carry trailing whitespace: operands are separated by single
spaces with none after the last one, and blank source lines come out as
empty strings rather than as bare indentation.
"""

import logging
from typing import Iterator, List, Set, TextIO

from qjsdis.qjsdis_decoder import DecodedInstruction, InstructionDecoder
from qjsdis.qjsdis_error import QJSDisConstantPoolError, QJSDisNestingError
from qjsdis.qjsdis_function import CompiledFunction
from qjsdis.qjsdis_opcode_table import QUICKJS_OPCODE_TABLE, OpcodeTable


INDENT_WIDTH = 2
DEFAULT_MAX_DEPTH = 256


class Disassembler:
    """
    Produces the text listing for a compiled function and every closure nested in it.

    A disassembler only holds its options, so one instance can be reused for
    any number of functions and always gives the same output for the same input.
    """

    def __init__(
        self,
        opcode_table: OpcodeTable | None = None,
        strip: bool = False,
        indent_width: int = INDENT_WIDTH,
        max_depth: int | None = DEFAULT_MAX_DEPTH
    ) -> None:
        """
        Initialize disassembler.

        Args:
            opcode_table: Opcode table to decode with (defaults to the QuickJS table)
            strip: If True, leave out source text for every function at every depth
            indent_width: Columns of indentation per nesting level
            max_depth: Deepest closure nesting allowed, or None for no limit
        """
        if indent_width < 1:
            raise ValueError(f"indent_width must be at least 1, got {indent_width}")

        if max_depth is not None and max_depth < 0:
            raise ValueError(f"max_depth must not be negative, got {max_depth}")

        self.opcode_table = opcode_table if opcode_table is not None else QUICKJS_OPCODE_TABLE
        self.strip = strip
        self.indent_width = indent_width
        self.max_depth = max_depth
        self._decoder = InstructionDecoder(self.opcode_table)
        self._logger = logging.getLogger("Disassembler")

    def disassemble(self, function: CompiledFunction, depth: int = 0) -> List[str]:
        """
        Disassemble a function and its nested closures.

        Args:
            function: Compiled function to disassemble
            depth: Nesting depth of the function, controls indentation

        Returns:
            Listing lines, without line terminators

        Raises:
            QJSDisDecodeError: If any instruction buffer in the tree can't be decoded
        """
        return list(self.iter_lines(function, depth))

    def iter_lines(self, function: CompiledFunction, depth: int = 0) -> Iterator[str]:
        """
        Yield the listing lines for a function as they are produced.

        Raises:
            QJSDisDecodeError: If any instruction buffer in the tree can't be decoded, or the
                closures nest too deeply for the interpreter to follow
        """
        try:
            yield from self._disassemble_function(function, depth, set())

        except RecursionError as e:
            raise QJSDisNestingError(
                "Closure nesting too deep to disassemble",
                context=f"Recursion limit reached below function {function.name!r}; set a lower max_depth"
            ) from e

    def dump(self, function: CompiledFunction, stream: TextIO) -> int:
        """
        Write the listing for a function to a text stream.

        Lines are written as they are decoded, so a decode error can leave a
        partial listing in the stream.

        Args:
            function: Compiled function to disassemble
            stream: Stream to write to

        Returns:
            Number of lines written
        """
        count = 0
        for line in self.iter_lines(function):
            stream.write(line + "\n")
            count += 1

        return count

    def indent(self, depth: int) -> str:
        """Return the indentation prefix for a nesting depth."""
        return " " * (depth * self.indent_width)

    def format_instruction(self, instr: DecodedInstruction, depth: int = 0) -> str:
        """Format one decoded instruction as a listing line."""
        parts = [f"{instr.opcode:#04x}", f"({instr.mnemonic})"]
        parts.extend(f"{operand:#04x}" for operand in instr.operands)
        return self.indent(depth) + " ".join(parts)

    def format_source(self, function: CompiledFunction, depth: int = 0) -> List[str]:
        """
        Format the source annotation for a function.

        The header sits at the function's own indentation and every line of the
        source text sits one level deeper.  Empty source lines stay empty.

        Args:
            function: Function whose source text is shown
            depth: Nesting depth of the function

        Returns:
            Annotation lines, or an empty list if the function has no source text
        """
        if not function.source:
            return []

        body_indent = self.indent(depth + 1)
        lines = [f"{self.indent(depth)}Source (Line {function.line_num}):"]
        for source_line in function.source.split("\n"):
            lines.append(body_indent + source_line if source_line else "")

        return lines

    def _disassemble_function(self, function: CompiledFunction, depth: int, active: Set[int]) -> Iterator[str]:
        """
        Disassemble one function, recursing into the closures it creates.

        Args:
            function: Function to disassemble
            depth: Nesting depth of the function
            active: ids of the functions on the current recursion path
        """
        active.add(id(function))
        self._logger.debug("Disassembling %r at depth %d", function, depth)

        try:
            if not self.strip:
                yield from self.format_source(function, depth)

            count = 0
            for instr in self._decoder.decode(function.byte_code):
                yield self.format_instruction(instr, depth)
                count += 1

                index = instr.closure_index
                if index is None:
                    continue

                nested = self._resolve_closure(function, instr, index, depth, active)
                yield from self._disassemble_function(nested, depth + 1, active)

            self._logger.debug(
                "Finished %r: %d instructions, %d nested functions in constant pool",
                function,
                count,
                len(function.nested_functions())
            )

        finally:
            active.discard(id(function))

    def _resolve_closure(
        self,
        function: CompiledFunction,
        instr: DecodedInstruction,
        index: int,
        depth: int,
        active: Set[int]
    ) -> CompiledFunction:
        """
        Find the nested function a closure instruction refers to.

        Raises:
            QJSDisConstantPoolError: If the index is out of range or doesn't name a compiled function
            QJSDisNestingError: If the nesting limit is exceeded or the function is already being disassembled
        """
        if index >= len(function.cpool):
            raise QJSDisConstantPoolError(
                f"Constant pool index {index} out of range in '{instr.mnemonic}'",
                offset=instr.offset,
                opcode=instr.opcode,
                context=f"Function {function.name!r} has {len(function.cpool)} constants"
            )

        nested = function.cpool[index]
        if not isinstance(nested, CompiledFunction):
            raise QJSDisConstantPoolError(
                f"Constant pool entry {index} is not a compiled function",
                offset=instr.offset,
                opcode=instr.opcode,
                context=f"Found {type(nested).__name__} in function {function.name!r}"
            )

        if self.max_depth is not None and depth + 1 > self.max_depth:
            raise QJSDisNestingError(
                f"Closure nesting deeper than {self.max_depth} levels",
                offset=instr.offset,
                opcode=instr.opcode,
                context=f"Nested function {nested.name!r} in function {function.name!r}"
            )

        if id(nested) in active:
            raise QJSDisNestingError(
                f"Constant pool entry {index} refers back to a function that is already being disassembled",
                offset=instr.offset,
                opcode=instr.opcode,
                context=f"Nested function {nested.name!r} in function {function.name!r}"
            )

        return nested
