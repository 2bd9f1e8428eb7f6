"""Tests for the recursive disassembler."""

import io
import logging

import pytest

from qjsdis import (
    CompiledFunction, Disassembler, QJSDisConstantPoolError, QJSDisInvalidOpcodeError,
    QJSDisNestingError, QJSDisTruncatedInstructionError
)


class TestInstructionLines:
    """Test the formatting of single instructions."""

    def test_small_table_scenario(self, small_table):
        """Test the two line listing of [0x00, 0x01, 0x02]."""
        function = CompiledFunction(byte_code=bytes([0x00, 0x01, 0x02]))
        lines = Disassembler(opcode_table=small_table).disassemble(function)

        assert lines == [
            "0x00 (op0)",
            "0x01 (op1) 0x02",
        ]

    def test_operands_as_hex(self, disassembler, helpers):
        """Test that every operand byte is shown as two digit hex."""
        function = helpers.make_function(('push_i32', [0x2a, 0x00, 0xff, 0x10]), 'return')
        assert disassembler.disassemble(function) == [
            "0x01 (push_i32) 0x2a 0x00 0xff 0x10",
            "0x28 (return)",
        ]

    def test_empty_function(self, disassembler):
        """Test that an empty instruction buffer gives an empty listing."""
        assert disassembler.disassemble(CompiledFunction(byte_code=b"")) == []

    def test_one_line_per_instruction(self, disassembler, helpers):
        """Test the line count equals the instruction count."""
        function = helpers.make_function('push_0', 'push_1', 'add', 'drop', 'return_undef')
        assert len(disassembler.disassemble(function)) == 5


class TestClosureRecursion:
    """Test recursion into nested functions."""

    def test_fclosure8(self, disassembler, helpers):
        """Test that the 8 bit closure form lists the nested function right after it."""
        inner = helpers.make_function('push_1', 'return', name="inner")
        outer = helpers.make_function(
            ('fclosure8', [1]), 'drop', 'return_undef',
            cpool=[42, inner]
        )

        assert disassembler.disassemble(outer) == [
            "0xc0 (fclosure8) 0x01",
            "  0xb6 (push_1)",
            "  0x28 (return)",
            "0x0e (drop)",
            "0x29 (return_undef)",
        ]

    def test_fclosure_32_bit_little_endian(self, disassembler, helpers):
        """Test that the 32 bit closure form reads its index little-endian."""
        inner = helpers.make_function('return_undef', name="inner")
        cpool = [None] * 258
        cpool[257] = inner
        outer = helpers.make_function(('fclosure', [0x01, 0x01, 0x00, 0x00]), 'return', cpool=cpool)

        assert disassembler.disassemble(outer) == [
            "0x03 (fclosure) 0x01 0x01 0x00 0x00",
            "  0x29 (return_undef)",
            "0x28 (return)",
        ]

    def test_deep_nesting_indentation(self, disassembler, helpers):
        """Test that each nesting level is indented two more columns."""
        lines = disassembler.disassemble(helpers.make_closure_chain(3))

        assert lines == [
            "0xc0 (fclosure8) 0x00",
            "  0xc0 (fclosure8) 0x00",
            "    0xc0 (fclosure8) 0x00",
            "      0x29 (return_undef)",
            "    0x0e (drop)",
            "    0x29 (return_undef)",
            "  0x0e (drop)",
            "  0x29 (return_undef)",
            "0x0e (drop)",
            "0x29 (return_undef)",
        ]

    def test_multiple_closures(self, disassembler, helpers):
        """Test sibling closures are each listed after their own instruction."""
        first = helpers.make_function('push_1', 'return')
        second = helpers.make_function('push_0', 'return')
        outer = helpers.make_function(
            ('fclosure8', [0]), ('fclosure', [1, 0, 0, 0]), 'return_undef',
            cpool=[first, second]
        )

        assert disassembler.disassemble(outer) == [
            "0xc0 (fclosure8) 0x00",
            "  0xb6 (push_1)",
            "  0x28 (return)",
            "0x03 (fclosure) 0x01 0x00 0x00 0x00",
            "  0xb5 (push_0)",
            "  0x28 (return)",
            "0x29 (return_undef)",
        ]

    def test_shared_function_listed_at_each_reference(self, disassembler, helpers):
        """Test that the same nested function referenced twice is listed twice."""
        inner = helpers.make_function('return_undef')
        outer = helpers.make_function(('fclosure8', [0]), ('fclosure8', [0]), cpool=[inner])

        assert disassembler.disassemble(outer) == [
            "0xc0 (fclosure8) 0x00",
            "  0x29 (return_undef)",
            "0xc0 (fclosure8) 0x00",
            "  0x29 (return_undef)",
        ]

    def test_push_const8_does_not_recurse(self, disassembler, helpers):
        """Test that other instructions using the constant pool don't recurse."""
        inner = helpers.make_function('return_undef')
        outer = helpers.make_function(('push_const8', [0]), 'return', cpool=[inner])

        assert disassembler.disassemble(outer) == [
            "0xbf (push_const8) 0x00",
            "0x28 (return)",
        ]

    def test_start_depth(self, disassembler, helpers):
        """Test that a starting depth indents the whole listing."""
        function = helpers.make_function('return_undef')
        assert disassembler.disassemble(function, depth=2) == ["    0x29 (return_undef)"]

    def test_custom_indent_width(self, helpers):
        """Test a different indent width."""
        inner = helpers.make_function('return_undef')
        outer = helpers.make_function(('fclosure8', [0]), cpool=[inner])

        assert Disassembler(indent_width=4).disassemble(outer) == [
            "0xc0 (fclosure8) 0x00",
            "    0x29 (return_undef)",
        ]

    def test_invalid_indent_width(self):
        """Test that an indent width below 1 is rejected."""
        with pytest.raises(ValueError):
            Disassembler(indent_width=0)


class TestSourceAnnotation:
    """Test the source text annotation."""

    def test_source_header_and_body(self, disassembler, helpers):
        """Test a single line source annotation."""
        function = helpers.make_function('return_undef', source="f();", line_num=3)

        assert disassembler.disassemble(function) == [
            "Source (Line 3):",
            "  f();",
            "0x29 (return_undef)",
        ]

    def test_multi_line_source_is_indented_on_every_line(self, disassembler, helpers):
        """Test that every source line is indented, not just the first."""
        function = helpers.make_function(
            'return_undef',
            source="function f() {\n  return 1;\n}",
            line_num=1
        )

        assert disassembler.disassemble(function) == [
            "Source (Line 1):",
            "  function f() {",
            "    return 1;",
            "  }",
            "0x29 (return_undef)",
        ]

    def test_empty_source_lines_stay_empty(self, disassembler, helpers):
        """Test that blank source lines don't get trailing indentation."""
        function = helpers.make_function('return_undef', source="a;\n\nb;\n")

        assert disassembler.disassemble(function) == [
            "Source (Line 1):",
            "  a;",
            "",
            "  b;",
            "",
            "0x29 (return_undef)",
        ]

    def test_nested_source(self, disassembler, helpers):
        """Test source annotation of a nested function."""
        inner = helpers.make_function('push_1', 'return', source="() => {\n  1\n}", line_num=2)
        outer = helpers.make_function(
            ('fclosure8', [0]), 'return',
            cpool=[inner],
            source="var g = () => {\n  1\n};",
            line_num=1
        )

        assert disassembler.disassemble(outer) == [
            "Source (Line 1):",
            "  var g = () => {",
            "    1",
            "  };",
            "0xc0 (fclosure8) 0x00",
            "  Source (Line 2):",
            "    () => {",
            "      1",
            "    }",
            "  0xb6 (push_1)",
            "  0x28 (return)",
            "0x28 (return)",
        ]

    def test_no_source(self, disassembler, helpers):
        """Test that functions without source text get no header."""
        function = helpers.make_function('return_undef', source="")
        assert disassembler.disassemble(function) == ["0x29 (return_undef)"]

    def test_strip_suppresses_source_at_every_depth(self, stripping_disassembler, helpers):
        """Test that strip removes source annotations from nested functions too."""
        innermost = helpers.make_function('return_undef', source="x", line_num=3)
        inner = helpers.make_function(('fclosure8', [0]), 'return', cpool=[innermost], source="y", line_num=2)
        outer = helpers.make_function(('fclosure8', [0]), 'return', cpool=[inner], source="z", line_num=1)

        lines = stripping_disassembler.disassemble(outer)

        assert not any("Source" in line for line in lines)
        assert lines == [
            "0xc0 (fclosure8) 0x00",
            "  0xc0 (fclosure8) 0x00",
            "    0x29 (return_undef)",
            "  0x28 (return)",
            "0x28 (return)",
        ]


class TestErrors:
    """Test fatal decoding conditions."""

    def test_truncated_instruction_prints_no_partial_line(self, disassembler, helpers):
        """Test that a truncated instruction raises before its line is produced."""
        function = helpers.make_function('push_0', ('push_i32', [1]))
        lines = []

        with pytest.raises(QJSDisTruncatedInstructionError):
            for line in disassembler.iter_lines(function):
                lines.append(line)

        assert lines == ["0xb5 (push_0)"]

    def test_invalid_opcode(self, disassembler):
        """Test an undefined opcode byte."""
        with pytest.raises(QJSDisInvalidOpcodeError) as exc_info:
            disassembler.disassemble(CompiledFunction(byte_code=bytes([0xb5, 0xfa])))

        assert exc_info.value.offset == 1

    def test_error_in_nested_function_aborts_whole_pass(self, disassembler, helpers):
        """Test that a nested decode error propagates to the top level."""
        inner = CompiledFunction(byte_code=bytes([0xff]))
        outer = helpers.make_function(('fclosure8', [0]), 'return', cpool=[inner])

        with pytest.raises(QJSDisInvalidOpcodeError):
            disassembler.disassemble(outer)

    def test_constant_index_out_of_range(self, disassembler, helpers):
        """Test a closure index past the end of the constant pool."""
        outer = helpers.make_function(('fclosure8', [3]), cpool=[1, 2])

        with pytest.raises(QJSDisConstantPoolError) as exc_info:
            disassembler.disassemble(outer)

        assert "index 3 out of range" in exc_info.value.message
        assert exc_info.value.offset == 0

    def test_constant_is_not_a_function(self, disassembler, helpers):
        """Test a closure index naming a plain constant."""
        outer = helpers.make_function(('push_0'), ('fclosure', [0, 0, 0, 0]), cpool=["text"])

        with pytest.raises(QJSDisConstantPoolError) as exc_info:
            disassembler.disassemble(outer)

        assert "not a compiled function" in exc_info.value.message
        assert exc_info.value.offset == 1

    def test_max_depth(self, helpers):
        """Test that nesting deeper than the limit is rejected."""
        function = helpers.make_closure_chain(4)

        assert len(Disassembler(max_depth=4).disassemble(function)) > 0
        with pytest.raises(QJSDisNestingError):
            Disassembler(max_depth=3).disassemble(function)

    def test_no_depth_limit(self, helpers):
        """Test that max_depth None allows any nesting in the recursion limit."""
        function = helpers.make_closure_chain(300)
        lines = Disassembler(max_depth=None).disassemble(function)
        assert lines[300] == " " * 600 + "0x29 (return_undef)"

    def test_unlimited_depth_past_recursion_limit(self, helpers):
        """Test that nesting the interpreter can't follow raises a nesting error."""
        function = helpers.make_closure_chain(3000)

        with pytest.raises(QJSDisNestingError) as exc_info:
            Disassembler(max_depth=None).disassemble(function)

        assert "too deep" in exc_info.value.message
        assert isinstance(exc_info.value.__cause__, RecursionError)

    def test_default_depth_limit(self, disassembler, helpers):
        """Test that the default limit stops very deep nesting with an error."""
        with pytest.raises(QJSDisNestingError):
            disassembler.disassemble(helpers.make_closure_chain(300))

    def test_cycle_through_constant_pool(self, disassembler, helpers):
        """Test that a function that contains itself is reported, not recursed forever."""
        function = helpers.make_function(('fclosure8', [0]), 'return')
        function.cpool.append(function)

        with pytest.raises(QJSDisNestingError) as exc_info:
            disassembler.disassemble(function)

        assert "refers back" in exc_info.value.message


class TestDeterminism:
    """Test repeatability and output helpers."""

    def test_idempotent(self, disassembler, helpers):
        """Test that disassembling twice gives identical output."""
        inner = helpers.make_function('push_1', 'return', source="() => 1")
        outer = helpers.make_function(('fclosure8', [0]), 'return', cpool=[inner], source="f = () => 1")

        assert disassembler.disassemble(outer) == disassembler.disassemble(outer)

    def test_disassembly_does_not_modify_function(self, disassembler, helpers):
        """Test that the function tree is only read."""
        inner = helpers.make_function('return_undef')
        outer = helpers.make_function(('fclosure8', [0]), cpool=[inner], source="s")
        before = (outer.byte_code, list(outer.cpool), outer.source)

        disassembler.disassemble(outer)

        assert (outer.byte_code, list(outer.cpool), outer.source) == before

    def test_dump_matches_disassemble(self, disassembler, helpers):
        """Test that dump writes the same lines to a stream."""
        inner = helpers.make_function('return_undef')
        outer = helpers.make_function(('fclosure8', [0]), 'return', cpool=[inner], source="a\nb")
        stream = io.StringIO()

        count = disassembler.dump(outer, stream)

        lines = disassembler.disassemble(outer)
        assert count == len(lines)
        assert stream.getvalue() == "".join(line + "\n" for line in lines)

    def test_debug_log_counts_nested_functions(self, disassembler, helpers, caplog):
        """Test that finishing a function logs its instruction and nested function counts."""
        inner = helpers.make_function('return_undef', name="inner")
        outer = helpers.make_function(('fclosure8', [1]), 'return', cpool=[7, inner], name="outer")

        with caplog.at_level(logging.DEBUG, logger="Disassembler"):
            disassembler.disassemble(outer)

        messages = [record.getMessage() for record in caplog.records]
        assert any("'outer'" in m and "2 instructions, 1 nested functions" in m for m in messages)
        assert any("'inner'" in m and "1 instructions, 0 nested functions" in m for m in messages)
