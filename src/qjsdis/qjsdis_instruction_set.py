"""QuickJS bytecode instruction set.

One entry per opcode, in opcode order, as (mnemonic, encoded_size, operand_format).
This follows the DEF() list of quickjs-opcode.h with SHORT_OPCODES enabled and
CONFIG_BIGNUM disabled.  The lower-case def() temporaries only exist while the
compiler is running and never appear in a finished function, so they are not
listed here.
"""

from typing import Dict, List, Tuple


InstructionDefinition = Tuple[str, int, str]


# Number of operand bytes that follow the opcode for each operand format.
OPERAND_FORMAT_WIDTHS: Dict[str, int] = {
    'none': 0,
    'none_int': 0,
    'none_loc': 0,
    'none_arg': 0,
    'none_var_ref': 0,
    'u8': 1,
    'i8': 1,
    'loc8': 1,
    'const8': 1,
    'label8': 1,
    'u16': 2,
    'i16': 2,
    'label16': 2,
    'npop': 2,
    'npopx': 0,
    'npop_u16': 4,
    'loc': 2,
    'arg': 2,
    'var_ref': 2,
    'u32': 4,
    'i32': 4,
    'const': 4,
    'label': 4,
    'atom': 4,
    'atom_u8': 5,
    'atom_u16': 6,
    'atom_label_u8': 9,
    'atom_label_u16': 10,
    'label_u16': 6,
}


QUICKJS_INSTRUCTION_SET: List[InstructionDefinition] = [
    ('invalid', 1, 'none'),

    # Push values
    ('push_i32', 5, 'i32'),
    ('push_const', 5, 'const'),
    ('fclosure', 5, 'const'),           # Pool index of the nested function, 32 bit
    ('push_atom_value', 5, 'atom'),
    ('private_symbol', 5, 'atom'),
    ('undefined', 1, 'none'),
    ('null', 1, 'none'),
    ('push_this', 1, 'none'),
    ('push_false', 1, 'none'),
    ('push_true', 1, 'none'),
    ('object', 1, 'none'),
    ('special_object', 2, 'u8'),
    ('rest', 3, 'u16'),

    # Stack manipulation
    ('drop', 1, 'none'),
    ('nip', 1, 'none'),
    ('nip1', 1, 'none'),
    ('dup', 1, 'none'),
    ('dup1', 1, 'none'),
    ('dup2', 1, 'none'),
    ('dup3', 1, 'none'),
    ('insert2', 1, 'none'),
    ('insert3', 1, 'none'),
    ('insert4', 1, 'none'),
    ('perm3', 1, 'none'),
    ('perm4', 1, 'none'),
    ('perm5', 1, 'none'),
    ('swap', 1, 'none'),
    ('swap2', 1, 'none'),
    ('rot3l', 1, 'none'),
    ('rot3r', 1, 'none'),
    ('rot4l', 1, 'none'),
    ('rot5l', 1, 'none'),

    # Calls and returns
    ('call_constructor', 3, 'npop'),
    ('call', 3, 'npop'),
    ('tail_call', 3, 'npop'),
    ('call_method', 3, 'npop'),
    ('tail_call_method', 3, 'npop'),
    ('array_from', 3, 'npop'),
    ('apply', 3, 'u16'),
    ('return', 1, 'none'),
    ('return_undef', 1, 'none'),
    ('check_ctor_return', 1, 'none'),
    ('check_ctor', 1, 'none'),
    ('check_brand', 1, 'none'),
    ('add_brand', 1, 'none'),
    ('return_async', 1, 'none'),
    ('throw', 1, 'none'),
    ('throw_error', 6, 'atom_u8'),
    ('eval', 5, 'npop_u16'),
    ('apply_eval', 3, 'u16'),
    ('regexp', 1, 'none'),
    ('get_super', 1, 'none'),
    ('import', 1, 'none'),

    # Global variables
    ('check_var', 5, 'atom'),
    ('get_var_undef', 5, 'atom'),
    ('get_var', 5, 'atom'),
    ('put_var', 5, 'atom'),
    ('put_var_init', 5, 'atom'),
    ('put_var_strict', 5, 'atom'),
    ('get_ref_value', 1, 'none'),
    ('put_ref_value', 1, 'none'),
    ('define_var', 6, 'atom_u8'),
    ('check_define_var', 6, 'atom_u8'),
    ('define_func', 6, 'atom_u8'),

    # Properties
    ('get_field', 5, 'atom'),
    ('get_field2', 5, 'atom'),
    ('put_field', 5, 'atom'),
    ('get_private_field', 1, 'none'),
    ('put_private_field', 1, 'none'),
    ('define_private_field', 1, 'none'),
    ('get_array_el', 1, 'none'),
    ('get_array_el2', 1, 'none'),
    ('put_array_el', 1, 'none'),
    ('get_super_value', 1, 'none'),
    ('put_super_value', 1, 'none'),
    ('define_field', 5, 'atom'),
    ('set_name', 5, 'atom'),
    ('set_name_computed', 1, 'none'),
    ('set_proto', 1, 'none'),
    ('set_home_object', 1, 'none'),
    ('define_array_el', 1, 'none'),
    ('append', 1, 'none'),
    ('copy_data_properties', 2, 'u8'),
    ('define_method', 6, 'atom_u8'),
    ('define_method_computed', 2, 'u8'),
    ('define_class', 6, 'atom_u8'),
    ('define_class_computed', 6, 'atom_u8'),

    # Locals, arguments and closure variables
    ('get_loc', 3, 'loc'),
    ('put_loc', 3, 'loc'),
    ('set_loc', 3, 'loc'),
    ('get_arg', 3, 'arg'),
    ('put_arg', 3, 'arg'),
    ('set_arg', 3, 'arg'),
    ('get_var_ref', 3, 'var_ref'),
    ('put_var_ref', 3, 'var_ref'),
    ('set_var_ref', 3, 'var_ref'),
    ('set_loc_uninitialized', 3, 'loc'),
    ('get_loc_check', 3, 'loc'),
    ('put_loc_check', 3, 'loc'),
    ('put_loc_check_init', 3, 'loc'),
    ('get_loc_checkthis', 3, 'loc'),
    ('get_var_ref_check', 3, 'var_ref'),
    ('put_var_ref_check', 3, 'var_ref'),
    ('put_var_ref_check_init', 3, 'var_ref'),
    ('close_loc', 3, 'loc'),

    # Control flow
    ('if_false', 5, 'label'),
    ('if_true', 5, 'label'),
    ('goto', 5, 'label'),
    ('catch', 5, 'label'),
    ('gosub', 5, 'label'),
    ('ret', 1, 'none'),
    ('nip_catch', 1, 'none'),
    ('to_object', 1, 'none'),
    ('to_propkey', 1, 'none'),
    ('to_propkey2', 1, 'none'),

    # with statement support
    ('with_get_var', 10, 'atom_label_u8'),
    ('with_put_var', 10, 'atom_label_u8'),
    ('with_delete_var', 10, 'atom_label_u8'),
    ('with_make_ref', 10, 'atom_label_u8'),
    ('with_get_ref', 10, 'atom_label_u8'),
    ('with_get_ref_undef', 10, 'atom_label_u8'),
    ('make_loc_ref', 7, 'atom_u16'),
    ('make_arg_ref', 7, 'atom_u16'),
    ('make_var_ref_ref', 7, 'atom_u16'),
    ('make_var_ref', 5, 'atom'),

    # Iteration and generators
    ('for_in_start', 1, 'none'),
    ('for_of_start', 1, 'none'),
    ('for_await_of_start', 1, 'none'),
    ('for_in_next', 1, 'none'),
    ('for_of_next', 2, 'u8'),
    ('iterator_check_object', 1, 'none'),
    ('iterator_get_value_done', 1, 'none'),
    ('iterator_close', 1, 'none'),
    ('iterator_next', 1, 'none'),
    ('iterator_call', 2, 'u8'),
    ('initial_yield', 1, 'none'),
    ('yield', 1, 'none'),
    ('yield_star', 1, 'none'),
    ('async_yield_star', 1, 'none'),
    ('await', 1, 'none'),

    # Arithmetic and logic
    ('neg', 1, 'none'),
    ('plus', 1, 'none'),
    ('dec', 1, 'none'),
    ('inc', 1, 'none'),
    ('post_dec', 1, 'none'),
    ('post_inc', 1, 'none'),
    ('dec_loc', 2, 'loc8'),
    ('inc_loc', 2, 'loc8'),
    ('add_loc', 2, 'loc8'),
    ('not', 1, 'none'),
    ('lnot', 1, 'none'),
    ('typeof', 1, 'none'),
    ('delete', 1, 'none'),
    ('delete_var', 5, 'atom'),
    ('mul', 1, 'none'),
    ('div', 1, 'none'),
    ('mod', 1, 'none'),
    ('add', 1, 'none'),
    ('sub', 1, 'none'),
    ('pow', 1, 'none'),
    ('shl', 1, 'none'),
    ('sar', 1, 'none'),
    ('shr', 1, 'none'),
    ('lt', 1, 'none'),
    ('lte', 1, 'none'),
    ('gt', 1, 'none'),
    ('gte', 1, 'none'),
    ('instanceof', 1, 'none'),
    ('in', 1, 'none'),
    ('eq', 1, 'none'),
    ('neq', 1, 'none'),
    ('strict_eq', 1, 'none'),
    ('strict_neq', 1, 'none'),
    ('and', 1, 'none'),
    ('xor', 1, 'none'),
    ('or', 1, 'none'),
    ('is_undefined_or_null', 1, 'none'),
    ('private_in', 1, 'none'),
    ('nop', 1, 'none'),

    # Short opcodes
    ('push_minus1', 1, 'none_int'),
    ('push_0', 1, 'none_int'),
    ('push_1', 1, 'none_int'),
    ('push_2', 1, 'none_int'),
    ('push_3', 1, 'none_int'),
    ('push_4', 1, 'none_int'),
    ('push_5', 1, 'none_int'),
    ('push_6', 1, 'none_int'),
    ('push_7', 1, 'none_int'),
    ('push_i8', 2, 'i8'),
    ('push_i16', 3, 'i16'),
    ('push_const8', 2, 'const8'),
    ('fclosure8', 2, 'const8'),         # Pool index of the nested function, 8 bit
    ('push_empty_string', 1, 'none'),
    ('get_loc8', 2, 'loc8'),
    ('put_loc8', 2, 'loc8'),
    ('set_loc8', 2, 'loc8'),
    ('get_loc0', 1, 'none_loc'),
    ('get_loc1', 1, 'none_loc'),
    ('get_loc2', 1, 'none_loc'),
    ('get_loc3', 1, 'none_loc'),
    ('put_loc0', 1, 'none_loc'),
    ('put_loc1', 1, 'none_loc'),
    ('put_loc2', 1, 'none_loc'),
    ('put_loc3', 1, 'none_loc'),
    ('set_loc0', 1, 'none_loc'),
    ('set_loc1', 1, 'none_loc'),
    ('set_loc2', 1, 'none_loc'),
    ('set_loc3', 1, 'none_loc'),
    ('get_arg0', 1, 'none_arg'),
    ('get_arg1', 1, 'none_arg'),
    ('get_arg2', 1, 'none_arg'),
    ('get_arg3', 1, 'none_arg'),
    ('put_arg0', 1, 'none_arg'),
    ('put_arg1', 1, 'none_arg'),
    ('put_arg2', 1, 'none_arg'),
    ('put_arg3', 1, 'none_arg'),
    ('set_arg0', 1, 'none_arg'),
    ('set_arg1', 1, 'none_arg'),
    ('set_arg2', 1, 'none_arg'),
    ('set_arg3', 1, 'none_arg'),
    ('get_var_ref0', 1, 'none_var_ref'),
    ('get_var_ref1', 1, 'none_var_ref'),
    ('get_var_ref2', 1, 'none_var_ref'),
    ('get_var_ref3', 1, 'none_var_ref'),
    ('put_var_ref0', 1, 'none_var_ref'),
    ('put_var_ref1', 1, 'none_var_ref'),
    ('put_var_ref2', 1, 'none_var_ref'),
    ('put_var_ref3', 1, 'none_var_ref'),
    ('set_var_ref0', 1, 'none_var_ref'),
    ('set_var_ref1', 1, 'none_var_ref'),
    ('set_var_ref2', 1, 'none_var_ref'),
    ('set_var_ref3', 1, 'none_var_ref'),
    ('get_length', 1, 'none'),
    ('if_false8', 2, 'label8'),
    ('if_true8', 2, 'label8'),
    ('goto8', 2, 'label8'),
    ('goto16', 3, 'label16'),
    ('call0', 1, 'npopx'),
    ('call1', 1, 'npopx'),
    ('call2', 1, 'npopx'),
    ('call3', 1, 'npopx'),
    ('is_undefined', 1, 'none'),
    ('is_null', 1, 'none'),
    ('typeof_is_undefined', 1, 'none'),
    ('typeof_is_function', 1, 'none'),
]
